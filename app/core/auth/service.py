from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
from jose import jwt, JWTError
from passlib.context import CryptContext
from app.config.settings import settings

logger = logging.getLogger(__name__)

# Password context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

class AuthService:
    """Token and password helpers"""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Check a plain password against its bcrypt hash"""
        try:
            # bcrypt only looks at the first 72 bytes
            encoded_password = plain_password.encode('utf-8')[:72].decode('utf-8', 'ignore')
            return pwd_context.verify(encoded_password, hashed_password)
        except (ValueError, TypeError) as e:
            logger.warning(f"Password verification error: {e}")
            return False

    @staticmethod
    def get_password_hash(password: str) -> str:
        encoded_password = password.encode('utf-8')[:72].decode('utf-8', 'ignore')
        return pwd_context.hash(encoded_password)

    @staticmethod
    def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
        """Sign a bearer token; `data` must carry user_id"""
        to_encode = data.copy()

        if "user_id" not in to_encode:
            raise ValueError("user_id is required in the token")

        if expires_delta:
            expire = datetime.now(timezone.utc) + expires_delta
        else:
            expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)

        to_encode.update({"exp": expire})

        return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)

    @staticmethod
    def verify_token(token: str) -> Optional[dict]:
        """Decode a token; None when the signature or expiry is invalid"""
        try:
            return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        except JWTError:
            return None
