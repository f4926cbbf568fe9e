from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import ValidationError
from sqlalchemy.orm import Session
from typing import Iterable, List, Optional

from app.config.database import get_db
from app.shared.database.models import User, Expense
from app.core.auth.schemas import TokenPayload, UserRole
from app.core.auth.service import AuthService
from app.core.errors import NotFoundError

# auto_error disabled so a missing header is a 401, not a 403
security = HTTPBearer(auto_error=False)

REVIEWER_ROLES = (UserRole.MANAGER, UserRole.FINANCE)

class AuthenticationError(HTTPException):
    def __init__(self, detail: str = "Not authorized"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

class AuthorizationError(HTTPException):
    def __init__(self, detail: str = "Not enough permissions"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Resolve the bearer token to an active user"""

    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authorized, no token")

    payload = AuthService.verify_token(credentials.credentials)
    if payload is None:
        raise AuthenticationError("Not authorized, token failed")

    try:
        token_data = TokenPayload(**payload)
    except ValidationError:
        raise AuthenticationError("Not authorized, invalid token payload")

    user = db.query(User).filter(User.id == token_data.user_id).first()

    if user is None:
        raise AuthenticationError("Not authorized, user not found")

    if not user.is_active:
        raise AuthenticationError("Not authorized, account is deactivated")

    return user

def role_allowed(allowed_roles: Iterable[UserRole], role: str) -> bool:
    """True when `role` is one of `allowed_roles`"""
    return role in {UserRole(r).value for r in allowed_roles}

def require_roles(allowed_roles: List[UserRole]):
    """Factory for a dependency that only lets `allowed_roles` through"""
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if not role_allowed(allowed_roles, current_user.role):
            raise AuthorizationError(
                f"User role {current_user.role} is not authorized to access this resource"
            )
        return current_user
    return role_checker

# Role-specific dependencies
def get_employee_user(current_user: User = Depends(require_roles([UserRole.EMPLOYEE]))):
    return current_user

def get_reviewer_user(current_user: User = Depends(require_roles(list(REVIEWER_ROLES)))):
    """Managers and finance staff"""
    return current_user

def is_reviewer(user: User) -> bool:
    return role_allowed(REVIEWER_ROLES, user.role)

def can_access_expense(user: User, expense: Expense) -> bool:
    """Reviewers see every expense, everyone else only their own"""
    if is_reviewer(user):
        return True
    return expense.submitted_by == user.id

async def verify_expense_access(
    expense_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> User:
    """
    Ownership check for /expenses/{expense_id} routes.

    Reviewers pass without a lookup. Other users get 404 when the expense
    does not exist and 403 when it belongs to someone else.
    """
    if is_reviewer(current_user):
        return current_user

    expense = db.query(Expense).filter(Expense.id == expense_id).first()
    if expense is None:
        raise NotFoundError("Expense not found")

    if not can_access_expense(current_user, expense):
        raise AuthorizationError("Not authorized to access this expense")

    return current_user
