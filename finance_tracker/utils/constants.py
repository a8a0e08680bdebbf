"""
Application constants.
"""

from enum import Enum
from typing import Dict, Tuple


class TransactionType(str, Enum):
    """Transaction types."""
    INCOME = "income"
    EXPENSE = "expense"


class Theme(str, Enum):
    """UI themes stored in user settings."""
    LIGHT = "light"
    DARK = "dark"


class SessionStatus(str, Enum):
    """Lifecycle of the in-process session."""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class NotificationLevel(str, Enum):
    """Notification severities shown to the user."""
    SUCCESS = "success"
    ERROR = "error"


# Allowed categories per transaction type, in display order
TRANSACTION_CATEGORIES: Dict[TransactionType, Tuple[str, ...]] = {
    TransactionType.INCOME: (
        "Salary",
        "Freelance",
        "Investments",
        "Business",
        "Other Income",
    ),
    TransactionType.EXPENSE: (
        "Food & Dining",
        "Shopping",
        "Transport",
        "Bills & Utilities",
        "Entertainment",
        "Healthcare",
        "Travel",
        "Other",
    ),
}

# Firestore layout
USERS_COLLECTION = "users"
SETTINGS_COLLECTION = "settings"
PREFERENCES_DOCUMENT = "preferences"
TRANSACTIONS_COLLECTION = "transactions"

# Defaults written next to a new profile
DEFAULT_CURRENCY = "USD"
DEFAULT_THEME = Theme.LIGHT
DEFAULT_EMAIL_NOTIFICATIONS = True
DEFAULT_PUSH_NOTIFICATIONS = False

# Validation constants
MAX_DESCRIPTION_LENGTH = 200
MAX_NAME_LENGTH = 100

# Currency formatting
CURRENCY_DECIMALS = 2
CURRENCY_SYMBOLS: Dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
    "CAD": "CA$",
    "AUD": "A$",
    "CHF": "CHF ",
    "CNY": "CN¥",
    "MXN": "MX$",
}
# Currencies rendered without minor units
ZERO_DECIMAL_CURRENCIES = {"JPY"}

# Notification feed
DEFAULT_NOTIFICATION_HISTORY = 50


def user_document_path(user_id: str) -> str:
    """Path of a user's profile document."""
    return f"{USERS_COLLECTION}/{user_id}"


def settings_document_path(user_id: str) -> str:
    """Path of a user's preferences document."""
    return f"{USERS_COLLECTION}/{user_id}/{SETTINGS_COLLECTION}/{PREFERENCES_DOCUMENT}"


def transactions_collection_path(user_id: str) -> str:
    """Path of a user's transactions collection."""
    return f"{USERS_COLLECTION}/{user_id}/{TRANSACTIONS_COLLECTION}"
