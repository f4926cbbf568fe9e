# app/modules/expenses/service.py
import math
import logging
from typing import Dict, Any, List, Optional, Tuple
from fastapi import HTTPException, UploadFile
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .repository import ExpensesRepository
from .schemas import (
    ExpenseCreateRequest, ExpenseStatusUpdate, ExpenseResponse, ExpenseListResponse,
    ExpenseCategoriesResponse, ExpenseCategory, Currency, ExpenseStatus,
    VendorInfo, InvoiceInfo, SubmitterInfo, ReviewerInfo, can_transition
)
from app.core.errors import ExpenseValidationError, NotFoundError, ServerError, format_errors
from app.shared.database.models import Expense, User
from app.shared.services.file_storage_service import FileStorageService, file_storage_service

logger = logging.getLogger(__name__)


class ExpensesService:
    def __init__(self, db: Session, storage: Optional[FileStorageService] = None):
        self.db = db
        self.repository = ExpensesRepository(db)
        self.storage = storage or file_storage_service

    # =====================================================
    # SUBMISSION
    # =====================================================

    def validate_submission(self, form_data: Dict[str, Any]) -> ExpenseCreateRequest:
        """Validate every field at once; raises with the full error list"""
        try:
            return ExpenseCreateRequest.model_validate(form_data)
        except ValidationError as e:
            raise ExpenseValidationError(format_errors(e.errors(include_url=False)))

    async def submit_expense(
        self,
        form_data: Dict[str, Any],
        invoice: Optional[UploadFile],
        current_user: User
    ) -> ExpenseResponse:
        """
        Create a Pending expense for `current_user`.

        Fields are validated before the invoice touches disk. The invoice
        is stored first and the record written after; a failed record
        write leaves the stored file behind.
        """
        expense_request = self.validate_submission(form_data)

        if invoice is None or not invoice.filename:
            raise HTTPException(status_code=400, detail="Invoice file is required")

        stored = await self.storage.save_invoice(invoice)

        expense_dict = expense_request.model_dump(mode='python')
        expense_dict['category'] = expense_request.category.value
        expense_dict['currency'] = expense_request.currency.value
        expense_dict['invoice'] = stored.model_dump()

        try:
            expense = self.repository.create_expense(expense_dict, current_user.id)
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Expense submission failed, invoice left at {stored.path}")
            raise ServerError("Server error during expense submission")

        logger.info(
            f"Expense {expense.id} submitted by user {current_user.id}: "
            f"{expense.amount} {expense.currency} ({expense.category})"
        )
        return self._to_response(expense)

    # =====================================================
    # LISTING & RETRIEVAL
    # =====================================================

    async def get_my_expenses(self, current_user: User) -> List[ExpenseResponse]:
        expenses = self.repository.get_expenses_by_submitter(current_user.id)
        return [self._to_response(e) for e in expenses]

    async def get_all_expenses(
        self,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 10
    ) -> ExpenseListResponse:
        """Page through every expense, optionally by exact status"""
        skip = (page - 1) * limit
        expenses = self.repository.get_all_expenses(status, skip, limit)
        total = self.repository.count_expenses(status)

        return ExpenseListResponse(
            expenses=[self._to_response(e) for e in expenses],
            total_pages=math.ceil(total / limit),
            current_page=page,
            total=total
        )

    async def get_expense(self, expense_id: int) -> ExpenseResponse:
        return self._to_response(self._get_or_404(expense_id))

    # =====================================================
    # REVIEW
    # =====================================================

    async def update_status(
        self,
        expense_id: int,
        update: ExpenseStatusUpdate,
        reviewer: User
    ) -> ExpenseResponse:
        """Approve, reject or mark an expense under review"""
        expense = self._get_or_404(expense_id)

        target = update.status.value
        if not can_transition(expense.status, target):
            raise ExpenseValidationError(
                [{"field": "status", "message": f"Expense is already {expense.status} and cannot be changed"}],
                message="Invalid status transition"
            )

        try:
            expense = self.repository.update_status(
                expense, target, reviewer.id, update.review_comments
            )
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Status update failed for expense {expense_id}")
            raise ServerError()

        logger.info(f"Expense {expense.id} set to {target} by user {reviewer.id}")
        return self._to_response(expense)

    # =====================================================
    # INVOICE
    # =====================================================

    async def get_invoice(self, expense_id: int) -> Tuple[str, str, str]:
        """(path, original filename, media type) of a stored invoice"""
        expense = self._get_or_404(expense_id)

        path = self.storage.resolve(expense.invoice_path)
        if path is None:
            logger.warning(f"Invoice file missing for expense {expense_id}: {expense.invoice_path}")
            raise NotFoundError("Invoice file not found")

        return str(path), expense.invoice_original_name, expense.invoice_mimetype

    async def get_expense_categories(self) -> ExpenseCategoriesResponse:
        return ExpenseCategoriesResponse(
            categories=[c.value for c in ExpenseCategory],
            currencies=[c.value for c in Currency],
            statuses=[s.value for s in ExpenseStatus]
        )

    # =====================================================
    # HELPERS
    # =====================================================

    def _get_or_404(self, expense_id: int) -> Expense:
        expense = self.repository.get_expense_by_id(expense_id)
        if expense is None:
            raise NotFoundError("Expense not found")
        return expense

    def _to_response(self, expense: Expense) -> ExpenseResponse:
        submitter = expense.submitter
        reviewer = expense.reviewer

        return ExpenseResponse(
            id=expense.id,
            title=expense.title,
            category=expense.category,
            amount=float(expense.amount),
            currency=expense.currency,
            description=expense.description,
            vendor=VendorInfo(
                name=expense.vendor_name,
                contact=expense.vendor_contact,
                address=expense.vendor_address
            ),
            invoice=InvoiceInfo(
                filename=expense.invoice_filename,
                original_name=expense.invoice_original_name,
                path=expense.invoice_path,
                size=expense.invoice_size,
                mimetype=expense.invoice_mimetype
            ),
            submitted_by=SubmitterInfo(
                id=submitter.id,
                name=submitter.name,
                email=submitter.email,
                department=submitter.department,
                employee_id=submitter.employee_id
            ),
            status=expense.status,
            reviewed_by=ReviewerInfo(
                id=reviewer.id,
                name=reviewer.name,
                email=reviewer.email
            ) if reviewer else None,
            review_comments=expense.review_comments,
            submitted_date=expense.submitted_date,
            reviewed_date=expense.reviewed_date,
            expense_date=expense.expense_date,
            created_at=expense.created_at,
            updated_at=expense.updated_at
        )
