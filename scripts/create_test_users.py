"""
Seed one user per role for local testing
"""
from app.config.database import SessionLocal, init_db
from app.shared.database.models import User
from app.core.auth.service import AuthService

TEST_USERS = [
    {
        "email": "employee@example.com",
        "password": "employee123",
        "name": "Emma Employee",
        "role": "Employee",
        "department": "Sales",
        "employee_id": "EMP-001"
    },
    {
        "email": "manager@example.com",
        "password": "manager123",
        "name": "Mark Manager",
        "role": "Manager",
        "department": "Sales",
        "employee_id": "MGR-001"
    },
    {
        "email": "finance@example.com",
        "password": "finance123",
        "name": "Fiona Finance",
        "role": "Finance",
        "department": "Finance",
        "employee_id": "FIN-001"
    }
]

def create_test_users():
    """Create the seed users that are not there yet"""
    init_db()
    db = SessionLocal()

    try:
        created = 0
        for user_data in TEST_USERS:
            if db.query(User).filter(User.email == user_data["email"]).first():
                print(f"Already exists: {user_data['email']}")
                continue

            db.add(User(
                email=user_data["email"],
                password_hash=AuthService.get_password_hash(user_data["password"]),
                name=user_data["name"],
                role=user_data["role"],
                department=user_data["department"],
                employee_id=user_data["employee_id"],
                is_active=True
            ))
            created += 1
            print(f"Created: {user_data['email']} / {user_data['password']} ({user_data['role']})")

        db.commit()
        print(f"\n{created} test users created")

    except Exception:
        db.rollback()
        raise

    finally:
        db.close()

if __name__ == "__main__":
    create_test_users()
