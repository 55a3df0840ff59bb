"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  Numeris - Modèle Invoice                                                    ║
║                                                                              ║
║  INVARIANTS:                                                                 ║
║  - au moins 1 item; quantity >= 1, unit_price >= 0 et fini                   ║
║  - discount dans [0, 100] (NaN et inf refusés)                               ║
║  - total_amount_due = sum(qty * unit_price) * (1 - discount / 100)           ║
║  - issue_date <= due_date, aucune des deux dans le passé à la création       ║
║                                                                              ║
║  Stockée deux fois: dans le document user du propriétaire et dans la         ║
║  collection `invoice` (voir repositories/invoice.py).                        ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import math
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

import errors
from config import new_object_id, now_iso, today
from .common import DATE_FORMAT, is_valid_email_format, require_text

ACCOUNT_NUMBER_MIN_LENGTH = 11
ROUTING_NUMBER_MIN_LENGTH = 7


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    OVERDUE = "overdue"
    ISSUED = "issued"
    PAID = "paid"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


# Only {draft, pending, overdue} -> issued exists. Nothing produces
# paid / cancelled / refunded yet.
ISSUABLE_STATUSES = [
    InvoiceStatus.DRAFT.value,
    InvoiceStatus.PENDING.value,
    InvoiceStatus.OVERDUE.value,
]


# ==================== NESTED ====================

class Item(BaseModel):
    description: str
    quantity: int
    unit_price: float
    total_price: float = 0.0

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        return require_text(v, "item description")

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v):
        if v <= 0:
            raise ValueError("item quantity must be greater than 0")
        return v

    @field_validator("unit_price")
    @classmethod
    def validate_unit_price(cls, v):
        if not math.isfinite(v) or v < 0:
            raise ValueError("item unit price must be a finite number greater than or equal to 0")
        return v

    @model_validator(mode="after")
    def compute_total_price(self):
        self.total_price = self.quantity * self.unit_price
        if not math.isfinite(self.total_price):
            raise ValueError("item total price is out of range")
        return self


class PaymentInformation(BaseModel):
    account_name: str
    account_number: str
    routing_number: str
    bank_name: str

    @field_validator("account_name")
    @classmethod
    def validate_account_name(cls, v):
        return require_text(v, "account name")

    @field_validator("bank_name")
    @classmethod
    def validate_bank_name(cls, v):
        return require_text(v, "bank name")

    @field_validator("account_number")
    @classmethod
    def validate_account_number(cls, v):
        v = require_text(v, "account number")
        if len(v) < ACCOUNT_NUMBER_MIN_LENGTH:
            raise ValueError(f"account number must be at least {ACCOUNT_NUMBER_MIN_LENGTH} characters")
        return v

    @field_validator("routing_number")
    @classmethod
    def validate_routing_number(cls, v):
        v = require_text(v, "routing number")
        if len(v) < ROUTING_NUMBER_MIN_LENGTH:
            raise ValueError(f"routing number must be at least {ROUTING_NUMBER_MIN_LENGTH} characters")
        return v


class PartyDetails(BaseModel):
    name: str
    phone: str
    email: str
    address: str

    @field_validator("name", "phone", "address")
    @classmethod
    def validate_text(cls, v, info):
        return require_text(v, info.field_name)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if not is_valid_email_format((v or "").strip()):
            raise ValueError(f"invalid email format: {v}")
        return v.strip()


class CustomerDetails(PartyDetails):
    """Who the invoice is addressed to."""


class SenderDetails(PartyDetails):
    """Who issues the invoice."""


# ==================== PAYLOAD ====================

class InvoiceCreate(BaseModel):
    """Body of create and update requests."""
    invoice_number: str
    billing_currency: str
    items: List[Item]
    discount: float = 0.0
    payment_info: PaymentInformation
    notes: Optional[str] = ""
    customer: CustomerDetails
    sender: SenderDetails
    issue_date: str
    due_date: str

    @field_validator("invoice_number")
    @classmethod
    def validate_invoice_number(cls, v):
        return require_text(v, "invoice number")

    @field_validator("billing_currency")
    @classmethod
    def validate_currency(cls, v):
        return require_text(v, "billing currency").upper()

    @field_validator("discount")
    @classmethod
    def validate_discount(cls, v):
        if not is_valid_discount(v):
            raise ValueError("discount must be between 0 and 100")
        return v

    @field_validator("items")
    @classmethod
    def validate_items(cls, v):
        if not v:
            raise ValueError("invoice must have at least one item")
        if not math.isfinite(sum(i.total_price for i in v)):
            raise ValueError("invoice subtotal is out of range")
        return v

    @field_validator("issue_date", "due_date")
    @classmethod
    def validate_date_format(cls, v, info):
        try:
            parse_date(v)
        except ValueError:
            raise ValueError(f"invalid {info.field_name.replace('_', ' ')} format: {v} (expected YYYY-MM-DD)")
        return v


# ==================== STORED ====================

class Invoice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    invoice_id: str
    owner_id: str
    invoice_number: str
    issue_date: str
    due_date: str
    billing_currency: str
    items: List[Item]
    discount: float = 0.0
    total_amount_due: float = 0.0
    notes: str = ""
    status: str = InvoiceStatus.DRAFT.value
    payment_info: PaymentInformation
    customer: CustomerDetails
    sender: SenderDetails
    created_at: str = ""
    updated_at: str = ""

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump()

    def recalculate(self) -> None:
        self.total_amount_due = calculate_total_amount(self.items, self.discount)
        self.updated_at = now_iso()

    def add_item(self, item: Item) -> None:
        self.items = [*self.items, item]
        self.recalculate()

    def update_discount(self, discount: float) -> None:
        if not is_valid_discount(discount):
            raise errors.ValidationError("discount must be between 0 and 100")
        self.discount = discount
        self.recalculate()

    def update_payment_info(self, payment_info: PaymentInformation) -> None:
        try:
            self.payment_info = PaymentInformation.model_validate(payment_info.model_dump())
        except PydanticValidationError as e:
            raise errors.ValidationError(e.errors()[0]["msg"].replace("Value error, ", ""))
        self.updated_at = now_iso()


# ==================== HELPERS ====================

def is_valid_discount(value: float) -> bool:
    # rejects NaN and inf
    return math.isfinite(value) and 0 <= value <= 100


def parse_date(value: str) -> date:
    return datetime.strptime(value, DATE_FORMAT).date()


def calculate_total_amount(items: List[Item], discount: float) -> float:
    total = 0.0
    for item in items:
        total += item.quantity * item.unit_price
    return total * (1 - discount / 100)


def validate_dates(issue_date: str, due_date: str, current: Optional[date] = None) -> Tuple[date, date]:
    """Creation-time date checks; comparisons are date-only."""
    try:
        issue = parse_date(issue_date)
    except ValueError:
        raise errors.ValidationError(f"invalid issue date format: {issue_date}")
    try:
        due = parse_date(due_date)
    except ValueError:
        raise errors.ValidationError(f"invalid due date format: {due_date}")

    current = current or today()
    if current > issue:
        raise errors.ValidationError("issue date cannot be in the past")
    if issue > due:
        raise errors.ValidationError("issue date cannot be after due date")
    if current > due:
        raise errors.ValidationError("due date cannot be in the past")
    return issue, due


def generate_invoice_id() -> str:
    return f"INV-{new_object_id()}"


def new_invoice(owner_id: str, data: InvoiceCreate, current: Optional[date] = None) -> Invoice:
    """Build a draft invoice for `owner_id` from a validated payload."""
    validate_dates(data.issue_date, data.due_date, current)
    created_at = now_iso()
    return Invoice(
        invoice_id=generate_invoice_id(),
        owner_id=owner_id,
        invoice_number=data.invoice_number,
        issue_date=data.issue_date,
        due_date=data.due_date,
        billing_currency=data.billing_currency,
        items=data.items,
        discount=data.discount,
        total_amount_due=calculate_total_amount(data.items, data.discount),
        notes=data.notes or "",
        status=InvoiceStatus.DRAFT.value,
        payment_info=data.payment_info,
        customer=data.customer,
        sender=data.sender,
        created_at=created_at,
        updated_at=created_at,
    )
