"""
Numeris - Activity (append-only telemetry)
"""

from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

from config import now_utc

USER_CREATED_ACCOUNT = "user_created_account"
CREATE_INVOICE = "create_invoice_activity"
ISSUE_INVOICE = "issue_invoice_activity"
UPDATE_INVOICE = "update_invoice_activity"
DELETE_INVOICE = "delete_invoice_activity"
PAYMENT_MADE = "payment_made_activity"
USER_UPDATED_ACCOUNT = "user_updated_account"
USER_DELETED_ACCOUNT = "user_deleted_account"
INVOICE_REMINDER = "invoice_reminder_activity"
PAYMENT_FAILED = "payment_failed_activity"
INVOICE_PAID = "invoice_paid_activity"
INVOICE_CANCELLED = "invoice_cancelled_activity"
INVOICE_REFUNDED = "invoice_refunded_activity"

INVOICE_ACTIONS = [CREATE_INVOICE, ISSUE_INVOICE, UPDATE_INVOICE, DELETE_INVOICE]


class Activity(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    user_id: str
    action: str
    timestamp: datetime = Field(default_factory=now_utc)
    metadata: Dict[str, Any] = Field(default_factory=dict)
