from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class UserRole(str, Enum):
    """Roles known to the service"""
    EMPLOYEE = "Employee"
    MANAGER = "Manager"
    FINANCE = "Finance"


class UserLogin(BaseModel):
    """Login payload"""
    email: str = Field(..., description="User email")
    password: str = Field(..., min_length=6, description="User password")

    class Config:
        json_schema_extra = {
            "example": {
                "email": "employee@example.com",
                "password": "employee123"
            }
        }

class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: UserRole
    department: Optional[str] = None
    employee_id: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": 1,
                "name": "Jane Doe",
                "email": "employee@example.com",
                "role": "Employee",
                "department": "Sales",
                "employee_id": "EMP-001",
                "is_active": True
            }
        }

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse

class TokenPayload(BaseModel):
    """Claims carried by the access token"""
    user_id: int
    email: Optional[str] = None
    role: Optional[UserRole] = None
    exp: Optional[datetime] = None
