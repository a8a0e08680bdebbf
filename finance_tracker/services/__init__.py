"""
Business logic services.
"""
from .currency import CurrencyService
from .notifications import NotificationCenter
from .session import SessionManager
from .transaction import TransactionService
from .transaction_form import TransactionEntryForm

__all__ = [
    "CurrencyService",
    "NotificationCenter",
    "SessionManager",
    "TransactionEntryForm",
    "TransactionService",
]
