"""
Transaction entry form: collects one income or expense, validates it and
writes it under the signed-in user.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

import structlog

from ..infrastructure import FirestoreService, get_firestore
from ..models.financial import (
    EntryFormState,
    EntryFormUpdate,
    SubmissionResult,
    SubmissionStatus,
    Transaction,
)
from ..utils.constants import TRANSACTION_CATEGORIES, TransactionType, transactions_collection_path
from ..utils.exceptions import AppException, InvalidAmountError, InvalidCategoryError, ValidationError
from ..utils.validators import parse_amount, validate_category, validate_positive_amount
from .currency import CurrencyService
from .notifications import NotificationCenter
from .session import SessionManager

logger = structlog.get_logger()


def _today() -> date:
    return datetime.utcnow().date()


class TransactionEntryForm:
    """Form state plus the submit action."""

    def __init__(
        self,
        session: SessionManager,
        currency: CurrencyService,
        notifications: NotificationCenter,
        firestore: Optional[FirestoreService] = None
    ):
        self.session = session
        self.currency = currency
        self.notifications = notifications
        self.firestore = firestore or get_firestore()

        self.amount = ""
        self.type = TransactionType.EXPENSE
        self.category = ""
        self.description = ""
        self.date = _today()
        self.submitting = False
        self.is_open = False

    # Input

    @property
    def categories(self) -> List[str]:
        return list(TRANSACTION_CATEGORIES[self.type])

    def set_type(self, transaction_type: TransactionType) -> None:
        """Switch between income and expense; the category choice starts over."""
        self.type = TransactionType(transaction_type)
        self.category = ""

    def apply(self, update: EntryFormUpdate) -> EntryFormState:
        """Apply typed changes. A type change is applied before the category."""
        changes = update.model_dump(exclude_unset=True)

        if changes.get("type") is not None:
            self.set_type(changes["type"])
        if changes.get("amount") is not None:
            self.amount = changes["amount"]
        if changes.get("category") is not None:
            self.category = changes["category"]
        if changes.get("description") is not None:
            self.description = changes["description"]
        if changes.get("date") is not None:
            self.date = changes["date"]

        return self.snapshot()

    @property
    def preview(self) -> Optional[str]:
        """Formatted amount while one is typed; not validated here."""
        if not self.amount:
            return None

        try:
            value = parse_amount(self.amount)
        except ValueError:
            value = Decimal("NaN")

        return self.currency.format_amount(value)

    def snapshot(self) -> EntryFormState:
        return EntryFormState(
            amount=self.amount,
            type=self.type,
            category=self.category,
            description=self.description,
            date=self.date,
            submitting=self.submitting,
            is_open=self.is_open,
            currency=self.currency.currency,
            categories=self.categories,
            preview=self.preview
        )

    # Dialog

    def open(self) -> EntryFormState:
        self.is_open = True
        return self.snapshot()

    def close(self) -> EntryFormState:
        """Dismiss the dialog, discarding what was typed."""
        self.reset()
        self.is_open = False
        return self.snapshot()

    def reset(self) -> None:
        self.amount = ""
        self.category = ""
        self.description = ""
        self.date = _today()
        self.type = TransactionType.EXPENSE

    # Submit

    def _validated_amount(self) -> Decimal:
        try:
            return validate_positive_amount(parse_amount(self.amount))
        except ValueError as e:
            raise InvalidAmountError(details=[str(e)])

    def _validated_category(self) -> str:
        try:
            return validate_category(self.type, self.category)
        except ValueError:
            raise InvalidCategoryError(self.category, self.type.value)

    def _validated_description(self) -> str:
        description = self.description.strip()
        if not description:
            raise ValidationError("Please enter a description", code="MISSING_DESCRIPTION")
        return description

    async def submit(self) -> SubmissionResult:
        """Validate and write one transaction."""
        user = self.session.current_user
        if user is None:
            return SubmissionResult(status=SubmissionStatus.SKIPPED)

        transaction_type = self.type
        label = "Income" if transaction_type == TransactionType.INCOME else "Expense"

        try:
            self.submitting = True

            try:
                amount = self._validated_amount()
                category = self._validated_category()
                description = self._validated_description()
            except ValidationError as e:
                self.notifications.error(e.message)
                return SubmissionResult(
                    status=SubmissionStatus.REJECTED,
                    error_code=e.code,
                    message=e.message
                )

            transaction = Transaction(
                amount=amount,
                type=transaction_type,
                category=category,
                description=description,
                date=datetime(self.date.year, self.date.month, self.date.day),
                currency=self.currency.currency,
                created_at=datetime.utcnow(),
                user_id=user.uid
            )

            transaction_id = await self.firestore.add_document(
                transactions_collection_path(user.uid),
                transaction
            )

            logger.info(
                "Transaction added",
                user_id=user.uid,
                transaction_id=transaction_id,
                type=transaction_type.value,
                amount=str(amount),
                currency=transaction.currency
            )

            message = f"{label} added successfully!"
            self.notifications.success(message)
            self.reset()
            self.is_open = False

            return SubmissionResult(
                status=SubmissionStatus.CREATED,
                transaction_id=transaction_id,
                message=message
            )

        except Exception as e:
            logger.error("Error adding transaction", user_id=user.uid, error=str(e))
            message = f"Failed to add {transaction_type.value}. Please try again."
            self.notifications.error(message)
            return SubmissionResult(
                status=SubmissionStatus.FAILED,
                error_code=e.code if isinstance(e, AppException) else None,
                message=message
            )

        finally:
            self.submitting = False
