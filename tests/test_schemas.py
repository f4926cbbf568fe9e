"""Tests for expense request models and the status lifecycle."""

from datetime import datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from app.core.errors import format_errors
from app.modules.expenses.schemas import (
    ExpenseCreateRequest, ExpenseStatusUpdate, ReviewStatus, can_transition
)


def payload(**overrides):
    data = {
        "title": "Team lunch",
        "category": "Meals",
        "amount": "18.20",
        "description": "Quarterly team lunch",
        "vendor": {"name": "Deli"},
        "expenseDate": "2024-05-02",
    }
    data.update(overrides)
    return data


class TestVendorDecoding:
    def test_structured(self):
        request = ExpenseCreateRequest.model_validate(payload())
        assert request.vendor.name == "Deli"
        assert request.vendor.contact is None

    def test_json_text(self):
        request = ExpenseCreateRequest.model_validate(
            payload(vendor='{"name": " Deli ", "contact": "555-0100", "address": ""}')
        )
        assert request.vendor.name == "Deli"
        assert request.vendor.contact == "555-0100"
        assert request.vendor.address is None

    @pytest.mark.parametrize("vendor", ["not json", "[1, 2]", '"Deli"'])
    def test_undecodable(self, vendor):
        with pytest.raises(ValidationError) as exc:
            ExpenseCreateRequest.model_validate(payload(vendor=vendor))
        assert format_errors(exc.value.errors()) == [{"field": "vendor", "message": "Invalid vendor data format"}]


class TestExpenseCreateRequest:
    def test_defaults(self):
        request = ExpenseCreateRequest.model_validate(payload())
        assert request.currency.value == "USD"
        assert request.amount == Decimal("18.20")
        assert request.expense_date == datetime(2024, 5, 2)

    def test_aware_date_becomes_naive_utc(self):
        request = ExpenseCreateRequest.model_validate(payload(expenseDate="2024-05-02T10:00:00+02:00"))
        assert request.expense_date == datetime(2024, 5, 2, 8, 0)

    @pytest.mark.parametrize("value", ["1700000000", 1700000000, "May 2, 2024"])
    def test_non_iso_date_rejected(self, value):
        with pytest.raises(ValidationError) as exc:
            ExpenseCreateRequest.model_validate(payload(expenseDate=value))
        assert format_errors(exc.value.errors()) == [
            {"field": "expenseDate", "message": "Valid expense date is required"}
        ]

    @pytest.mark.parametrize("amount", ["10.005", "1e400", "1234567890123"])
    def test_amount_precision(self, amount):
        with pytest.raises(ValidationError) as exc:
            ExpenseCreateRequest.model_validate(payload(amount=amount))
        assert [e["field"] for e in format_errors(exc.value.errors())] == ["amount"]

    def test_all_errors_collected(self):
        with pytest.raises(ValidationError) as exc:
            ExpenseCreateRequest.model_validate({})
        fields = [e["field"] for e in format_errors(exc.value.errors())]
        assert sorted(fields) == sorted(["title", "category", "amount", "description", "vendor", "expenseDate"])


class TestLifecycle:
    @pytest.mark.parametrize("target", [s.value for s in ReviewStatus])
    def test_open_states(self, target):
        assert can_transition("Pending", target)
        assert can_transition("Under Review", target)

    @pytest.mark.parametrize("current", ["Approved", "Rejected"])
    def test_terminal_states(self, current):
        assert not any(can_transition(current, s.value) for s in ReviewStatus)

    def test_never_back_to_pending(self):
        assert not can_transition("Under Review", "Pending")

    def test_status_update_accepts_alias(self):
        update = ExpenseStatusUpdate.model_validate({"status": "Rejected", "reviewComments": "  duplicate  "})
        assert update.review_comments == "duplicate"

    def test_status_update_rejects_pending(self):
        with pytest.raises(ValidationError):
            ExpenseStatusUpdate.model_validate({"status": "Pending"})
