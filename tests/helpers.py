import json
from datetime import timedelta
from typing import Dict, Optional

from app.core.auth.service import AuthService
from app.shared.database.models import User

EXPENSES_URL = "/api/v1/expenses"
MIB = 1024 * 1024


def make_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    return AuthService.create_access_token(
        {"user_id": user.id, "email": user.email, "role": user.role},
        expires_delta=expires_delta,
    )


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user)}"}


def expense_form(**overrides) -> Dict[str, str]:
    data = {
        "title": "Client visit",
        "category": "Travel",
        "amount": "42.50",
        "currency": "USD",
        "description": "Train tickets for the client visit",
        "vendor": json.dumps({"name": "National Rail", "contact": "help@rail.example"}),
        "expenseDate": "2024-03-14",
    }
    data.update(overrides)
    return {k: v for k, v in data.items() if v is not None}


def invoice_file(size: int = 1024, name: str = "receipt.pdf", content_type: str = "application/pdf"):
    return {"invoice": (name, b"%" * size, content_type)}
