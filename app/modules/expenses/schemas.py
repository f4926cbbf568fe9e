# app/modules/expenses/schemas.py
import json
import re
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Any
from decimal import Decimal
from datetime import datetime, timezone
from enum import Enum


# =====================================================
# ENUMS
# =====================================================

class ExpenseCategory(str, Enum):
    TRAVEL = "Travel"
    MEALS = "Meals"
    OFFICE_SUPPLIES = "Office Supplies"
    TRANSPORTATION = "Transportation"
    ACCOMMODATION = "Accommodation"
    ENTERTAINMENT = "Entertainment"
    TRAINING = "Training"
    SOFTWARE = "Software"
    EQUIPMENT = "Equipment"
    OTHER = "Other"


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    INR = "INR"
    CAD = "CAD"
    AUD = "AUD"


class ExpenseStatus(str, Enum):
    """Lifecycle states of an expense"""
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    UNDER_REVIEW = "Under Review"


class ReviewStatus(str, Enum):
    """States a reviewer may set"""
    APPROVED = "Approved"
    REJECTED = "Rejected"
    UNDER_REVIEW = "Under Review"


# YYYY-MM-DD, optionally followed by a time part
ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}([T ].*)?$")

# Approved and Rejected have no way out
ALLOWED_TRANSITIONS = {
    ExpenseStatus.PENDING.value: {s.value for s in ReviewStatus},
    ExpenseStatus.UNDER_REVIEW.value: {s.value for s in ReviewStatus},
    ExpenseStatus.APPROVED.value: set(),
    ExpenseStatus.REJECTED.value: set(),
}


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


# =====================================================
# REQUESTS
# =====================================================

class VendorInfo(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None

    @field_validator('name', 'contact', 'address', mode='before')
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator('contact', 'address')
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class ExpenseCreateRequest(BaseModel):
    """Fields of a new expense submission"""
    title: str = Field(..., min_length=1, max_length=100, description="Short title")
    category: ExpenseCategory = Field(..., description="Expense category")
    amount: Decimal = Field(..., ge=Decimal("0.01"), max_digits=12, decimal_places=2, description="Amount, at least 0.01")
    currency: Currency = Field(Currency.USD, description="ISO currency code")
    description: str = Field(..., min_length=1, max_length=500, description="Business reason")
    vendor: VendorInfo
    expense_date: datetime = Field(..., alias="expenseDate", description="When the expense was incurred")

    @field_validator('title', 'description', mode='before')
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator('currency', mode='before')
    @classmethod
    def default_currency(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return Currency.USD
        return v

    @field_validator('vendor', mode='before')
    @classmethod
    def decode_vendor(cls, v: Any) -> Any:
        """Vendor arrives either as an object or as JSON text"""
        if isinstance(v, (str, bytes)):
            try:
                v = json.loads(v)
            except ValueError:
                raise ValueError('Invalid vendor data format')
            if not isinstance(v, dict):
                raise ValueError('Invalid vendor data format')
        return v

    @field_validator('expense_date', mode='before')
    @classmethod
    def iso_date_only(cls, v: Any) -> Any:
        """Only ISO 8601 text; no epoch numbers"""
        if isinstance(v, datetime):
            return v
        if not isinstance(v, str) or not ISO_DATE_RE.match(v.strip()):
            raise ValueError('Valid expense date is required')
        return v.strip()

    @field_validator('expense_date')
    @classmethod
    def naive_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

    class Config:
        populate_by_name = True


class ExpenseStatusUpdate(BaseModel):
    status: ReviewStatus
    review_comments: Optional[str] = Field(None, alias="reviewComments", max_length=500)

    @field_validator('review_comments', mode='before')
    @classmethod
    def strip_comments(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "status": "Approved",
                "reviewComments": "Receipt matches the travel policy"
            }
        }


# =====================================================
# RESPONSES
# =====================================================

class InvoiceInfo(BaseModel):
    filename: str
    original_name: str = Field(..., alias="originalName")
    path: str
    size: int
    mimetype: str

    class Config:
        populate_by_name = True


class ReviewerInfo(BaseModel):
    id: int
    name: str
    email: str


class SubmitterInfo(ReviewerInfo):
    department: Optional[str] = None
    employee_id: Optional[str] = Field(None, alias="employeeId")

    class Config:
        populate_by_name = True


class ExpenseResponse(BaseModel):
    id: int
    title: str
    category: str
    amount: float
    currency: str
    description: str
    vendor: VendorInfo
    invoice: InvoiceInfo
    submitted_by: SubmitterInfo = Field(..., alias="submittedBy")
    status: str
    reviewed_by: Optional[ReviewerInfo] = Field(None, alias="reviewedBy")
    review_comments: Optional[str] = Field(None, alias="reviewComments")
    submitted_date: datetime = Field(..., alias="submittedDate")
    reviewed_date: Optional[datetime] = Field(None, alias="reviewedDate")
    expense_date: datetime = Field(..., alias="expenseDate")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    class Config:
        populate_by_name = True


class ExpenseListResponse(BaseModel):
    expenses: List[ExpenseResponse]
    total_pages: int = Field(..., alias="totalPages")
    current_page: int = Field(..., alias="currentPage")
    total: int

    class Config:
        populate_by_name = True


class ExpenseCategoriesResponse(BaseModel):
    categories: List[str]
    currencies: List[str]
    statuses: List[str]
