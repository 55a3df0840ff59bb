"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  Numeris - Paquet des modèles                                               ║
║                                                                              ║
║  Exports tous les modèles pour import facile                                 ║
║  from models import Invoice, InvoiceCreate, UserCreate, etc.                 ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

# Auth & users
from .auth import (
    UserLogin,
    UserCreate,
    PasswordReset,
    User,
    new_user,
    normalize_email,
)

# Invoice
from .invoice import (
    InvoiceStatus,
    ISSUABLE_STATUSES,
    Item,
    PaymentInformation,
    CustomerDetails,
    SenderDetails,
    InvoiceCreate,
    Invoice,
    calculate_total_amount,
    validate_dates,
    new_invoice,
)

# Activity
from .activity import Activity, INVOICE_ACTIONS

# Summary
from .summary import InvoiceSummary

__all__ = [
    # Auth
    "UserLogin",
    "UserCreate",
    "PasswordReset",
    "User",
    "new_user",
    "normalize_email",
    # Invoice
    "InvoiceStatus",
    "ISSUABLE_STATUSES",
    "Item",
    "PaymentInformation",
    "CustomerDetails",
    "SenderDetails",
    "InvoiceCreate",
    "Invoice",
    "calculate_total_amount",
    "validate_dates",
    "new_invoice",
    # Activity
    "Activity",
    "INVOICE_ACTIONS",
    # Summary
    "InvoiceSummary",
]
