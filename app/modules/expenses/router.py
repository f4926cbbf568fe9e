# app/modules/expenses/router.py
from fastapi import APIRouter, Depends, Form, File, UploadFile, Query, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from typing import List, Optional

from app.config.database import get_db
from app.config.settings import settings
from app.core.auth.dependencies import (
    get_current_user, get_employee_user, get_reviewer_user, verify_expense_access
)
from app.shared.database.models import User
from app.shared.schemas.common import ERROR_RESPONSES
from .service import ExpensesService
from .schemas import (
    ExpenseStatusUpdate, ExpenseResponse, ExpenseListResponse, ExpenseCategoriesResponse
)

router = APIRouter()

@router.post(
    "",
    response_model=ExpenseResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES
)
async def submit_expense(
    title: Optional[str] = Form(None, description="Short title, up to 100 characters"),
    category: Optional[str] = Form(None, description="One of the expense categories"),
    amount: Optional[str] = Form(None, description="Amount, at least 0.01"),
    currency: Optional[str] = Form(None, description="Currency code, USD by default"),
    description: Optional[str] = Form(None, description="Business reason, up to 500 characters"),
    vendor: Optional[str] = Form(None, description='Vendor as JSON: {"name", "contact", "address"}'),
    vendor_name: Optional[str] = Form(None, alias="vendor[name]"),
    vendor_contact: Optional[str] = Form(None, alias="vendor[contact]"),
    vendor_address: Optional[str] = Form(None, alias="vendor[address]"),
    expense_date: Optional[str] = Form(None, alias="expenseDate", description="Date the expense was incurred"),
    invoice: Optional[UploadFile] = File(None, description="Invoice (PDF, JPG or PNG, max 5MB)"),
    current_user: User = Depends(get_employee_user),
    db: Session = Depends(get_db)
):
    """
    Submit a new expense claim with its invoice

    **Multipart fields:**
    - title, category, amount, currency (optional), description, expenseDate
    - vendor as a JSON string, or vendor[name] / vendor[contact] / vendor[address]
    - invoice file

    Every invalid field is reported in one 400 response.
    """
    if vendor is None and any(v is not None for v in (vendor_name, vendor_contact, vendor_address)):
        vendor_data = {"name": vendor_name, "contact": vendor_contact, "address": vendor_address}
    else:
        vendor_data = vendor

    form_data = {
        "title": title,
        "category": category,
        "amount": amount,
        "currency": currency,
        "description": description,
        "vendor": vendor_data,
        "expenseDate": expense_date,
    }

    service = ExpensesService(db)
    return await service.submit_expense(form_data, invoice, current_user)

@router.get("/my", response_model=List[ExpenseResponse], responses=ERROR_RESPONSES)
async def get_my_expenses(
    current_user: User = Depends(get_employee_user),
    db: Session = Depends(get_db)
):
    """Expenses submitted by the current employee, newest first"""
    service = ExpensesService(db)
    return await service.get_my_expenses(current_user)

@router.get("/categories", response_model=ExpenseCategoriesResponse)
async def get_expense_categories(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Accepted categories, currencies and statuses"""
    service = ExpensesService(db)
    return await service.get_expense_categories()

@router.get("", response_model=ExpenseListResponse, responses=ERROR_RESPONSES)
async def get_all_expenses(
    status: Optional[str] = Query(None, description="Exact status filter"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size, description="Page size"),
    current_user: User = Depends(get_reviewer_user),
    db: Session = Depends(get_db)
):
    """
    All expenses for managers and finance

    **Returns:** expenses, totalPages, currentPage, total
    """
    service = ExpensesService(db)
    return await service.get_all_expenses(status=status, page=page, limit=limit)

@router.get("/{expense_id}", response_model=ExpenseResponse, responses=ERROR_RESPONSES)
async def get_expense(
    expense_id: int,
    current_user: User = Depends(verify_expense_access),
    db: Session = Depends(get_db)
):
    """Single expense; employees only see their own"""
    service = ExpensesService(db)
    return await service.get_expense(expense_id)

@router.put("/{expense_id}/status", response_model=ExpenseResponse, responses=ERROR_RESPONSES)
async def update_expense_status(
    expense_id: int,
    update: ExpenseStatusUpdate,
    current_user: User = Depends(get_reviewer_user),
    db: Session = Depends(get_db)
):
    """
    Review an expense

    **Body:** `{"status": "Approved" | "Rejected" | "Under Review", "reviewComments": "..."}`

    Approved and Rejected expenses cannot be reviewed again.
    """
    service = ExpensesService(db)
    return await service.update_status(expense_id, update, current_user)

@router.get(
    "/{expense_id}/invoice",
    response_class=FileResponse,
    responses=ERROR_RESPONSES
)
async def download_invoice(
    expense_id: int,
    current_user: User = Depends(verify_expense_access),
    db: Session = Depends(get_db)
):
    """Download the invoice under its original filename"""
    service = ExpensesService(db)
    path, original_name, media_type = await service.get_invoice(expense_id)
    return FileResponse(path, media_type=media_type, filename=original_name)
