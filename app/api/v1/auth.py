from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
import logging

from app.config.database import get_db
from app.core.auth.service import AuthService
from app.core.auth.schemas import UserLogin, TokenResponse, UserResponse
from app.core.auth.dependencies import get_current_user, AuthenticationError
from app.shared.database.models import User

logger = logging.getLogger(__name__)

router = APIRouter()

def _authenticate(db: Session, email: str, password: str) -> TokenResponse:
    user = db.query(User).filter(User.email == email).first()

    if not user or not AuthService.verify_password(password, user.password_hash):
        logger.info(f"Failed login for {email}")
        raise AuthenticationError("Invalid email or password")

    if not user.is_active:
        raise AuthenticationError("Not authorized, account is deactivated")

    access_token = AuthService.create_access_token(data={
        "user_id": user.id,
        "email": user.email,
        "role": user.role
    })

    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        user=UserResponse.model_validate(user)
    )

@router.post("/login", response_model=TokenResponse)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """
    OAuth2 password login

    **Form fields:**
    - **username**: user email
    - **password**: user password
    """
    return _authenticate(db, form_data.username, form_data.password)

@router.post("/login-json", response_model=TokenResponse)
async def login_json(
    user_login: UserLogin,
    db: Session = Depends(get_db)
):
    """
    JSON login

    **Body:**
    ```json
    {"email": "user@example.com", "password": "password123"}
    ```
    """
    return _authenticate(db, user_login.email, user_login.password)

@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Profile of the token's owner"""
    return UserResponse.model_validate(current_user)
