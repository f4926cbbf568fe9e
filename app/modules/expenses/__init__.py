# app/modules/expenses/__init__.py
"""
Expenses module - reimbursement claims

Employees submit claims with an invoice file; managers and finance
review them and everyone can download the invoices they are allowed
to see.

Layout:
- router.py: HTTP endpoints
- service.py: submission, listing, review and download logic
- repository.py: database access
- schemas.py: request/response models and the status lifecycle
"""

from .router import router
from .service import ExpensesService
from .repository import ExpensesRepository

__all__ = [
    "router",
    "ExpensesService",
    "ExpensesRepository"
]
