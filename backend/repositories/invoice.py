"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  Numeris - Dépôt des factures                                                ║
║                                                                              ║
║  Une facture existe en DEUX exemplaires:                                     ║
║  - intégrée: user.invoices[] du propriétaire                                 ║
║  - autonome: collection `invoice`, clé invoice_id (+ owner_id)               ║
║                                                                              ║
║  INVARIANTS:                                                                 ║
║  - toute écriture touchant les deux passe par self.transaction()             ║
║  - les deux exemplaires changent ensemble ou pas du tout                     ║
║  - édition seulement avant issue_date et due_date (minuit UTC)               ║
║  - seule transition: {draft, pending, overdue} -> issued                     ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
from datetime import datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from config import now_iso, now_utc, today
from errors import ImmutableInvoiceError, NotFoundError, PersistenceError
from models.invoice import (
    ISSUABLE_STATUSES,
    Invoice,
    InvoiceStatus,
    Item,
    parse_date,
)
from models.summary import InvoiceSummary
from .base import MongoRepository

logger = logging.getLogger("invoice_repository")

READY_TO_ISSUE_WINDOW_DAYS = 30
CLOSED_STATUSES = [
    InvoiceStatus.PAID.value,
    InvoiceStatus.CANCELLED.value,
    InvoiceStatus.REFUNDED.value,
]


def _to_invoice(doc: Dict[str, Any]) -> Invoice:
    try:
        return Invoice.model_validate(doc)
    except PydanticValidationError as e:
        raise PersistenceError(f"stored invoice {doc.get('invoice_id')} is malformed: {e.error_count()} error(s)")


def _midnight(value: str) -> datetime:
    return datetime.combine(parse_date(value), time.min, tzinfo=timezone.utc)


def ensure_editable(invoice: Invoice, now: Optional[datetime] = None) -> None:
    """
    Raise ImmutableInvoiceError unless `invoice` is still editable.
    Strict check: the issue date itself is already too late.
    """
    now = now or now_utc()
    try:
        issue_at = _midnight(invoice.issue_date)
        due_at = _midnight(invoice.due_date)
    except ValueError:
        raise PersistenceError(f"stored invoice {invoice.invoice_id} has malformed dates")

    if invoice.status not in ISSUABLE_STATUSES:
        raise ImmutableInvoiceError(f"invoice cannot be updated: status is {invoice.status}")
    if issue_at < now or now > due_at:
        raise ImmutableInvoiceError("invoice cannot be updated: it has been issued or the due date has passed")


class InvoiceRepository(MongoRepository):

    # ════════════════════════════════════════════════════════════════════
    # WRITES (dual collection, transactional)
    # ════════════════════════════════════════════════════════════════════

    async def add_new_invoice(self, owner_id: str, invoice: Invoice) -> Invoice:
        """Push into the owner's embedded list and insert the standalone copy."""
        await self.run("add invoice", self._add_new_invoice(owner_id, invoice))
        logger.info(f"Invoice {invoice.invoice_id} created and synchronized for user {owner_id}")
        return invoice

    async def _add_new_invoice(self, owner_id: str, invoice: Invoice) -> None:
        doc = invoice.to_document()
        async with self.transaction() as session:
            result = await self.users.update_one(
                {"_id": owner_id},
                {"$push": {"invoices": doc}},
                session=session,
            )
            if result.matched_count == 0:
                raise NotFoundError(f"no user found with ID {owner_id}")
            await self.invoices.insert_one(dict(doc), session=session)

    async def update_before_due_date(
        self,
        owner_id: str,
        invoice_id: str,
        new_invoice: Invoice,
        now: Optional[datetime] = None,
    ) -> Invoice:
        """
        Replace both copies of an invoice that is still editable.

        Keeps invoice_id, owner_id, status and created_at of the current
        copy. Raises ImmutableInvoiceError when the edit window is closed and
        NotFoundError when either copy vanished; both abort the transaction.
        """
        updated = await self.run(
            "update invoice",
            self._update_before_due_date(owner_id, invoice_id, new_invoice, now),
        )
        logger.info(f"Invoice {invoice_id} updated successfully")
        return updated

    async def _update_before_due_date(self, owner_id, invoice_id, new_invoice, now) -> Invoice:
        async with self.transaction() as session:
            current = await self._find_embedded(owner_id, invoice_id, session=session)
            ensure_editable(current, now)

            updated = new_invoice.model_copy(update={
                "invoice_id": current.invoice_id,
                "owner_id": current.owner_id,
                "status": current.status,
                "created_at": current.created_at,
                "updated_at": now_iso(),
            })
            doc = updated.to_document()

            result = await self.users.update_one(
                {"_id": owner_id, "invoices.invoice_id": invoice_id},
                {"$set": {"invoices.$": doc}},
                session=session,
            )
            if result.matched_count == 0:
                raise NotFoundError(f"no invoice found with ID {invoice_id} for user {owner_id}")

            result = await self.invoices.update_one(
                {"invoice_id": invoice_id, "owner_id": owner_id},
                {"$set": doc},
                session=session,
            )
            if result.matched_count == 0:
                raise NotFoundError(f"no invoice found with ID {invoice_id} in invoice collection")
        return updated

    async def update_status_to_issued(self, owner_id: str, invoice_id: str) -> int:
        """
        {draft, pending, overdue} -> issued, with a fresh issue date.
        Returns how many embedded copies changed: 0 means the invoice was not
        in an issuable state (or does not exist) and nothing was written.
        Raises NotFoundError, aborting, when only one of the two copies was
        issuable.
        """
        modified = await self.run("issue invoice", self._update_status_to_issued(owner_id, invoice_id))
        if modified:
            logger.info(f"Invoice {invoice_id} issued")
        else:
            logger.info(f"Invoice {invoice_id} not issuable, nothing changed")
        return modified

    async def _update_status_to_issued(self, owner_id: str, invoice_id: str) -> int:
        issued_on = today().isoformat()
        updated_at = now_iso()
        async with self.transaction() as session:
            result = await self.users.update_one(
                {
                    "_id": owner_id,
                    "invoices": {"$elemMatch": {
                        "invoice_id": invoice_id,
                        "status": {"$in": ISSUABLE_STATUSES},
                    }},
                },
                {"$set": {
                    "invoices.$.status": InvoiceStatus.ISSUED.value,
                    "invoices.$.issue_date": issued_on,
                    "invoices.$.updated_at": updated_at,
                }},
                session=session,
            )
            standalone = await self.invoices.update_one(
                {
                    "invoice_id": invoice_id,
                    "owner_id": owner_id,
                    "status": {"$in": ISSUABLE_STATUSES},
                },
                {"$set": {
                    "status": InvoiceStatus.ISSUED.value,
                    "issue_date": issued_on,
                    "updated_at": updated_at,
                }},
                session=session,
            )
            if result.modified_count != standalone.modified_count:
                raise NotFoundError(
                    f"invoice {invoice_id} is out of sync between user and invoice collections, not issued"
                )
        return result.modified_count

    async def delete_invoice(self, owner_id: str, invoice_id: str) -> None:
        """Hard delete from both collections. Deleting nothing is not an error."""
        await self.run("delete invoice", self._delete_invoice(owner_id, invoice_id))
        logger.info(f"Invoice {invoice_id} deleted for user {owner_id}")

    async def _delete_invoice(self, owner_id: str, invoice_id: str) -> None:
        async with self.transaction() as session:
            await self.users.update_one(
                {"_id": owner_id},
                {"$pull": {"invoices": {"invoice_id": invoice_id}}},
                session=session,
            )
            await self.invoices.delete_one(
                {"invoice_id": invoice_id, "owner_id": owner_id},
                session=session,
            )

    # ════════════════════════════════════════════════════════════════════
    # READS
    # ════════════════════════════════════════════════════════════════════

    async def _find_embedded(self, owner_id: str, invoice_id: str, session=None) -> Invoice:
        doc = await self.users.find_one(
            {"_id": owner_id, "invoices.invoice_id": invoice_id},
            {"invoices.$": 1},
            session=session,
        )
        if not doc or not doc.get("invoices"):
            raise NotFoundError(f"invoice not found for userID {owner_id} and invoiceID {invoice_id}")
        return _to_invoice(doc["invoices"][0])

    async def find_by_id(self, owner_id: str, invoice_id: str) -> Invoice:
        return await self.run("find invoice", self._find_embedded(owner_id, invoice_id))

    async def find_all(self, owner_id: str) -> List[Invoice]:
        doc = await self.run(
            "find invoices",
            self.users.find_one({"_id": owner_id}, {"invoices": 1}),
        )
        if not doc:
            raise NotFoundError(f"no user found with ID {owner_id}")
        return [_to_invoice(d) for d in doc.get("invoices") or []]

    async def item_summary(self, owner_id: str, invoice_id: str) -> List[Item]:
        invoice = await self.find_by_id(owner_id, invoice_id)
        return [
            Item(description=i.description, quantity=i.quantity, unit_price=i.unit_price)
            for i in invoice.items
        ]

    async def stat_summary(self, owner_id: str) -> InvoiceSummary:
        """
        Totals over the owner's embedded invoices.

        Known gap: the pipeline keeps only `paid` invoices before grouping,
        so total_overdue / total_draft / total_unpaid are always 0.
        """
        current = today().isoformat()
        pipeline = [
            {"$match": {"_id": owner_id}},
            {"$unwind": "$invoices"},
            {"$match": {"invoices.status": InvoiceStatus.PAID.value}},
            {"$group": {
                "_id": None,
                "total_paid": {"$sum": "$invoices.total_amount_due"},
                "total_overdue": {"$sum": {"$cond": [
                    {"$and": [
                        {"$eq": ["$invoices.status", InvoiceStatus.OVERDUE.value]},
                        {"$lt": ["$invoices.due_date", current]},
                    ]},
                    "$invoices.total_amount_due",
                    0,
                ]}},
                "total_draft": {"$sum": {"$cond": [
                    {"$in": ["$invoices.status", [InvoiceStatus.DRAFT.value, InvoiceStatus.PENDING.value]]},
                    "$invoices.total_amount_due",
                    0,
                ]}},
                "total_unpaid": {"$sum": {"$cond": [
                    {"$in": ["$invoices.status", CLOSED_STATUSES]},
                    0,
                    "$invoices.total_amount_due",
                ]}},
            }},
        ]
        rows = await self.run("invoice stats", self.users.aggregate(pipeline).to_list(length=1))
        if not rows:
            return InvoiceSummary()
        row = rows[0]
        return InvoiceSummary(
            total_paid=row.get("total_paid", 0),
            total_overdue=row.get("total_overdue", 0),
            total_draft=row.get("total_draft", 0),
            total_unpaid=row.get("total_unpaid", 0),
        )

    async def ready_to_issue(self, owner_id: str, window_days: int = READY_TO_ISSUE_WINDOW_DAYS) -> List[Invoice]:
        """Issuable invoices whose issue date falls within the next `window_days`."""
        start = today()
        end = start + timedelta(days=window_days)
        pipeline = [
            {"$match": {"_id": owner_id}},
            {"$unwind": "$invoices"},
            {"$match": {
                "invoices.status": {"$in": ISSUABLE_STATUSES},
                "invoices.issue_date": {"$gte": start.isoformat(), "$lte": end.isoformat()},
            }},
            {"$replaceRoot": {"newRoot": "$invoices"}},
            {"$sort": {"issue_date": 1}},
        ]
        rows = await self.run("ready to issue", self.users.aggregate(pipeline).to_list(length=None))
        return [_to_invoice(r) for r in rows]
