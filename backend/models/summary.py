"""
Numeris - InvoiceSummary (computed on demand, never stored)
"""

from pydantic import BaseModel


class InvoiceSummary(BaseModel):
    total_paid: float = 0.0
    total_overdue: float = 0.0
    total_draft: float = 0.0
    total_unpaid: float = 0.0
