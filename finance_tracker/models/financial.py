"""
Financial domain models: transactions, entry form state and summaries.
"""
from datetime import date as CalendarDate, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.constants import MAX_DESCRIPTION_LENGTH, TransactionType
from .base import DocumentModel


class Transaction(DocumentModel):
    """Financial transaction stored in users/{uid}/transactions."""

    id: Optional[str] = Field(default=None, description="Document ID, not stored in the document")

    amount: Decimal = Field(..., gt=0)
    type: TransactionType
    category: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=MAX_DESCRIPTION_LENGTH)
    date: datetime
    currency: str = Field(..., min_length=3, max_length=3)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    user_id: str = Field(..., description="Owner of the transaction")

    model_config = ConfigDict(extra="ignore", use_enum_values=True)

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        """Validate currency code."""
        return v.upper()

    def to_document(self, **kwargs) -> dict:
        """Dump without the document ID."""
        return super().to_document(exclude={"id"}, **kwargs)


class EntryFormState(BaseModel):
    """Snapshot of the transaction entry form."""

    amount: str = ""
    type: TransactionType = TransactionType.EXPENSE
    category: str = ""
    description: str = ""
    date: CalendarDate
    submitting: bool = False
    is_open: bool = False
    currency: str
    categories: List[str] = Field(default_factory=list)
    preview: Optional[str] = Field(None, description="Formatted amount, when one is entered")


class EntryFormUpdate(BaseModel):
    """Changes typed into the entry form."""

    amount: Optional[str] = Field(None, max_length=32)
    type: Optional[TransactionType] = None
    category: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    date: Optional[CalendarDate] = None

    model_config = ConfigDict(extra="forbid")


class SubmissionStatus(str, Enum):
    """Outcome of submitting the entry form."""
    SKIPPED = "skipped"
    REJECTED = "rejected"
    CREATED = "created"
    FAILED = "failed"


class SubmissionResult(BaseModel):
    """Result of one submit action."""

    status: SubmissionStatus
    transaction_id: Optional[str] = None
    error_code: Optional[str] = None
    message: Optional[str] = None


class CategorySummary(BaseModel):
    """Totals for one category of one transaction type."""

    type: TransactionType
    category: str
    total: Decimal = Field(default=Decimal("0"))
    count: int = 0


class TransactionsSummary(BaseModel):
    """Categorized totals of a user's transactions in one currency."""

    currency: str
    total_income: Decimal = Field(default=Decimal("0"))
    total_expense: Decimal = Field(default=Decimal("0"))
    net: Decimal = Field(default=Decimal("0"))
    transaction_count: int = 0
    categories: List[CategorySummary] = Field(default_factory=list)
