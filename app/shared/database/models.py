# app/shared/database/models.py
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Text,
    Numeric, ForeignKey, Index, func
)
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from app.config.database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, the convention for every DateTime column"""
    return datetime.now(timezone.utc).replace(tzinfo=None)

# =====================================================
# TIMESTAMP MIXIN
# =====================================================
class TimestampMixin:
    """Adds created_at and updated_at columns"""
    created_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.current_timestamp())
    updated_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.current_timestamp(), onupdate=utcnow)


# =====================================================
# USERS
# =====================================================

class User(Base, TimestampMixin):
    """Employee, Manager or Finance account"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(50), default='Employee', nullable=False)
    department = Column(String(255))
    employee_id = Column(String(50))
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    submitted_expenses = relationship("Expense", back_populates="submitter", foreign_keys="Expense.submitted_by")
    reviewed_expenses = relationship("Expense", back_populates="reviewer", foreign_keys="Expense.reviewed_by")


# =====================================================
# EXPENSES
# =====================================================

class Expense(Base, TimestampMixin):
    """Expense claim with its invoice attachment"""
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    category = Column(String(50), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default='USD')
    description = Column(String(500), nullable=False)

    # Vendor
    vendor_name = Column(String(255), nullable=False)
    vendor_contact = Column(String(255))
    vendor_address = Column(Text)

    # Invoice (fixed at creation)
    invoice_filename = Column(String(255), nullable=False)
    invoice_original_name = Column(String(255), nullable=False)
    invoice_path = Column(Text, nullable=False)
    invoice_size = Column(Integer, nullable=False)
    invoice_mimetype = Column(String(100), nullable=False)

    # Review
    submitted_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(String(20), nullable=False, default='Pending')
    reviewed_by = Column(Integer, ForeignKey("users.id"))
    review_comments = Column(String(500))

    submitted_date = Column(DateTime, nullable=False, default=utcnow)
    reviewed_date = Column(DateTime)
    expense_date = Column(DateTime, nullable=False)

    __table_args__ = (
        Index('ix_expenses_submitted_by_status', 'submitted_by', 'status'),
        Index('ix_expenses_status_submitted_date', 'status', 'submitted_date'),
    )

    # Relationships
    submitter = relationship("User", back_populates="submitted_expenses", foreign_keys=[submitted_by])
    reviewer = relationship("User", back_populates="reviewed_expenses", foreign_keys=[reviewed_by])
