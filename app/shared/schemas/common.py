# app/shared/schemas/common.py
from pydantic import BaseModel
from typing import List, Optional

class MessageResponse(BaseModel):
    message: str

class FieldError(BaseModel):
    field: str
    message: str

class ValidationErrorResponse(MessageResponse):
    errors: List[FieldError] = []

class HealthResponse(BaseModel):
    status: str
    version: str
    app: str
    environment: Optional[str] = None

ERROR_RESPONSES = {
    400: {"model": ValidationErrorResponse, "description": "Validation failed"},
    401: {"model": MessageResponse, "description": "Missing, invalid or expired token"},
    403: {"model": MessageResponse, "description": "Role or ownership mismatch"},
    404: {"model": MessageResponse, "description": "Expense not found"},
}
