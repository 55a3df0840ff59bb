"""
Numeris - Invoice model
Tests: totals, payload validation, creation-time date rules, in-memory edits.
Run: cd backend && pytest tests/test_invoice_model.py -v
"""

from datetime import date

import pytest
from pydantic import ValidationError as PydanticValidationError

import errors
from models.invoice import (
    InvoiceCreate,
    InvoiceStatus,
    Item,
    PaymentInformation,
    calculate_total_amount,
    new_invoice,
    validate_dates,
)
from tests.fakes import OWNER_ID, invoice_payload


# ═══════════════════════════════════════════════════════════════
# 1. TOTALS
# ═══════════════════════════════════════════════════════════════

class TestTotals:
    def test_item_total_price_is_computed(self):
        item = Item(description="Design", quantity=3, unit_price=12.5)
        assert item.total_price == 37.5

    def test_discount_applied_on_subtotal(self):
        items = [
            Item(description="a", quantity=2, unit_price=25.0),
            Item(description="b", quantity=1, unit_price=30.0),
        ]
        assert calculate_total_amount(items, 10) == pytest.approx(72.0)

    def test_no_discount(self):
        items = [Item(description="a", quantity=4, unit_price=2.5)]
        assert calculate_total_amount(items, 0) == pytest.approx(10.0)

    def test_full_discount(self):
        items = [Item(description="a", quantity=1, unit_price=99.0)]
        assert calculate_total_amount(items, 100) == pytest.approx(0.0)


# ═══════════════════════════════════════════════════════════════
# 2. PAYLOAD VALIDATION
# ═══════════════════════════════════════════════════════════════

class TestInvoiceCreate:
    def test_valid_payload(self):
        data = InvoiceCreate(**invoice_payload())
        assert data.billing_currency == "USD"
        assert len(data.items) == 2

    def test_empty_items_rejected(self):
        with pytest.raises(PydanticValidationError):
            InvoiceCreate(**invoice_payload(items=[]))

    @pytest.mark.parametrize("discount", [-1, 100.5])
    def test_discount_out_of_range(self, discount):
        with pytest.raises(PydanticValidationError):
            InvoiceCreate(**invoice_payload(discount=discount))

    def test_zero_quantity_rejected(self):
        items = [{"description": "a", "quantity": 0, "unit_price": 1.0}]
        with pytest.raises(PydanticValidationError):
            InvoiceCreate(**invoice_payload(items=items))

    @pytest.mark.parametrize("discount", [float("nan"), float("inf")])
    def test_non_finite_discount_rejected(self, discount):
        with pytest.raises(PydanticValidationError, match="discount must be between 0 and 100"):
            InvoiceCreate(**invoice_payload(discount=discount))

    @pytest.mark.parametrize("price", [float("nan"), float("inf")])
    def test_non_finite_unit_price_rejected(self, price):
        items = [{"description": "a", "quantity": 1, "unit_price": price}]
        with pytest.raises(PydanticValidationError, match="finite number"):
            InvoiceCreate(**invoice_payload(items=items))

    def test_overflowing_item_total_rejected(self):
        items = [{"description": "a", "quantity": 10, "unit_price": 1e308}]
        with pytest.raises(PydanticValidationError, match="out of range"):
            InvoiceCreate(**invoice_payload(items=items))

    def test_negative_unit_price_rejected(self):
        items = [{"description": "a", "quantity": 1, "unit_price": -1.0}]
        with pytest.raises(PydanticValidationError):
            InvoiceCreate(**invoice_payload(items=items))

    def test_bad_date_format(self):
        with pytest.raises(PydanticValidationError) as exc:
            InvoiceCreate(**invoice_payload(issue_date="10/01/2024"))
        assert "YYYY-MM-DD" in str(exc.value)

    def test_customer_email_checked(self):
        payload = invoice_payload()
        payload["customer"] = dict(payload["customer"], email="not-an-email")
        with pytest.raises(PydanticValidationError):
            InvoiceCreate(**payload)

    def test_short_account_number(self):
        payload = invoice_payload()
        payload["payment_info"] = dict(payload["payment_info"], account_number="123")
        with pytest.raises(PydanticValidationError):
            InvoiceCreate(**payload)


# ═══════════════════════════════════════════════════════════════
# 3. DATES
# ═══════════════════════════════════════════════════════════════

class TestValidateDates:
    CURRENT = date(2024, 1, 10)

    def test_today_is_accepted(self):
        issue, due = validate_dates("2024-01-10", "2024-01-10", self.CURRENT)
        assert issue == due == self.CURRENT

    def test_issue_in_past(self):
        with pytest.raises(errors.ValidationError, match="issue date cannot be in the past"):
            validate_dates("2024-01-09", "2024-02-01", self.CURRENT)

    def test_issue_after_due(self):
        with pytest.raises(errors.ValidationError, match="issue date cannot be after due date"):
            validate_dates("2024-01-20", "2024-01-15", self.CURRENT)

    def test_bad_format(self):
        with pytest.raises(errors.ValidationError, match="invalid issue date format"):
            validate_dates("2024-13-01", "2024-02-01", self.CURRENT)


# ═══════════════════════════════════════════════════════════════
# 4. NEW INVOICE / EDITS
# ═══════════════════════════════════════════════════════════════

class TestNewInvoice:
    def test_defaults(self):
        invoice = new_invoice(OWNER_ID, InvoiceCreate(**invoice_payload()))
        assert invoice.invoice_id.startswith("INV-")
        assert invoice.owner_id == OWNER_ID
        assert invoice.status == InvoiceStatus.DRAFT.value
        assert invoice.total_amount_due == pytest.approx(72.0)
        assert invoice.created_at == invoice.updated_at

    def test_ids_are_unique(self):
        data = InvoiceCreate(**invoice_payload())
        assert new_invoice(OWNER_ID, data).invoice_id != new_invoice(OWNER_ID, data).invoice_id

    def test_past_issue_date_rejected(self):
        with pytest.raises(errors.ValidationError):
            new_invoice(OWNER_ID, InvoiceCreate(**invoice_payload(issue_offset=-1)))

    def test_add_item_recomputes_total(self, draft_invoice):
        draft_invoice.add_item(Item(description="Extra", quantity=1, unit_price=20.0))
        assert len(draft_invoice.items) == 3
        assert draft_invoice.total_amount_due == pytest.approx(90.0)

    def test_update_discount(self, draft_invoice):
        draft_invoice.update_discount(50)
        assert draft_invoice.total_amount_due == pytest.approx(40.0)

    def test_update_discount_out_of_range(self, draft_invoice):
        with pytest.raises(errors.ValidationError):
            draft_invoice.update_discount(101)
        assert draft_invoice.discount == 10

    def test_update_discount_nan(self, draft_invoice):
        with pytest.raises(errors.ValidationError):
            draft_invoice.update_discount(float("nan"))
        assert draft_invoice.total_amount_due == pytest.approx(72.0)

    def test_update_payment_info(self, draft_invoice):
        info = PaymentInformation(
            account_name="New Name",
            account_number="99999999999",
            routing_number="7654321",
            bank_name="Other Bank",
        )
        draft_invoice.update_payment_info(info)
        assert draft_invoice.payment_info.bank_name == "Other Bank"

    def test_to_document_is_plain(self, draft_invoice):
        doc = draft_invoice.to_document()
        assert doc["invoice_id"] == draft_invoice.invoice_id
        assert doc["items"][0]["total_price"] == 50.0
        assert doc["customer"]["email"] == "jane@customer.com"
