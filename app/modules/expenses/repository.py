# app/modules/expenses/repository.py
from sqlalchemy.orm import Session, joinedload
from typing import List, Dict, Any, Optional
import logging

from app.shared.database.models import Expense, utcnow

logger = logging.getLogger(__name__)

class ExpensesRepository:
    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Expense).options(
            joinedload(Expense.submitter),
            joinedload(Expense.reviewer)
        )

    def create_expense(self, expense_data: Dict[str, Any], user_id: int) -> Expense:
        """Insert a new Pending expense"""
        expense = Expense(
            title=expense_data['title'],
            category=expense_data['category'],
            amount=expense_data['amount'],
            currency=expense_data['currency'],
            description=expense_data['description'],
            vendor_name=expense_data['vendor']['name'],
            vendor_contact=expense_data['vendor'].get('contact'),
            vendor_address=expense_data['vendor'].get('address'),
            invoice_filename=expense_data['invoice']['filename'],
            invoice_original_name=expense_data['invoice']['original_name'],
            invoice_path=expense_data['invoice']['path'],
            invoice_size=expense_data['invoice']['size'],
            invoice_mimetype=expense_data['invoice']['mimetype'],
            submitted_by=user_id,
            status='Pending',
            submitted_date=utcnow(),
            expense_date=expense_data['expense_date']
        )

        self.db.add(expense)
        self.db.commit()
        self.db.refresh(expense)
        return expense

    def get_expense_by_id(self, expense_id: int) -> Optional[Expense]:
        return self._query().filter(Expense.id == expense_id).first()

    def get_expenses_by_submitter(self, user_id: int) -> List[Expense]:
        """All expenses of one user, newest first"""
        # Equal submitted_date: latest inserted first
        return self._query().filter(
            Expense.submitted_by == user_id
        ).order_by(Expense.submitted_date.desc(), Expense.id.desc()).all()

    def get_all_expenses(self, status: Optional[str] = None, skip: int = 0, limit: int = 10) -> List[Expense]:
        query = self._query()

        if status:
            query = query.filter(Expense.status == status)

        return query.order_by(
            Expense.submitted_date.desc(), Expense.id.desc()
        ).offset(skip).limit(limit).all()

    def count_expenses(self, status: Optional[str] = None) -> int:
        query = self.db.query(Expense)

        if status:
            query = query.filter(Expense.status == status)

        return query.count()

    def update_status(
        self,
        expense: Expense,
        status: str,
        reviewer_id: int,
        review_comments: Optional[str] = None
    ) -> Expense:
        """Record a review decision in one commit"""
        expense.status = status
        expense.reviewed_by = reviewer_id
        expense.reviewed_date = utcnow()

        # Omitted comments keep the previous ones
        if review_comments:
            expense.review_comments = review_comments

        self.db.commit()
        self.db.refresh(expense)
        return expense
