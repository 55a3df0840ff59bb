"""
Numeris - Repositories (MongoDB through Motor)
"""

from .base import MongoRepository, USERS, INVOICES, ACTIVITIES
from .user import UserRepository
from .invoice import InvoiceRepository
from .activity import ActivityRepository

__all__ = [
    "MongoRepository",
    "USERS",
    "INVOICES",
    "ACTIVITIES",
    "UserRepository",
    "InvoiceRepository",
    "ActivityRepository",
]
