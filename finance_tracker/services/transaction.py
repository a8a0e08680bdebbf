"""
Transaction read service: listing and categorized summaries.
"""
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

import structlog

from ..infrastructure import FirestoreService, get_firestore
from ..models.financial import CategorySummary, Transaction, TransactionsSummary
from ..utils.constants import TRANSACTION_CATEGORIES, TransactionType, transactions_collection_path
from ..utils.exceptions import DatabaseError

logger = structlog.get_logger()


class TransactionService:
    """Service for reading a user's transactions."""

    def __init__(self, firestore: Optional[FirestoreService] = None):
        self.firestore = firestore or get_firestore()

    async def list_transactions(
        self,
        user_id: str,
        transaction_type: Optional[TransactionType] = None,
        currency: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[Transaction]:
        """List user transactions, newest first."""
        where_clauses = []
        if transaction_type:
            where_clauses.append(("type", "==", TransactionType(transaction_type).value))
        if currency:
            where_clauses.append(("currency", "==", currency.upper()))

        documents = await self.firestore.query_documents(
            collection=transactions_collection_path(user_id),
            where_clauses=where_clauses or None,
            order_by="-date",
            limit=limit
        )

        transactions = []
        for doc in documents:
            try:
                transactions.append(Transaction.model_validate(doc))
            except ValueError as e:
                # Malformed documents are skipped so one bad record does not hide the rest
                logger.warning(
                    "Skipping malformed transaction",
                    user_id=user_id,
                    transaction_id=doc.get("id"),
                    error=str(e)
                )

        return transactions

    async def summarize(self, user_id: str, currency: str) -> TransactionsSummary:
        """Totals per type and per category for one currency."""
        try:
            transactions = await self.list_transactions(user_id, currency=currency)
        except DatabaseError:
            logger.error("Failed to summarize transactions", user_id=user_id, currency=currency)
            raise

        buckets: Dict[Tuple[str, str], CategorySummary] = {}
        totals = {TransactionType.INCOME.value: Decimal("0"), TransactionType.EXPENSE.value: Decimal("0")}

        for transaction in transactions:
            key = (transaction.type, transaction.category)
            bucket = buckets.setdefault(
                key,
                CategorySummary(type=transaction.type, category=transaction.category)
            )
            bucket.total += transaction.amount
            bucket.count += 1
            totals[transaction.type] += transaction.amount

        summary = TransactionsSummary(
            currency=currency.upper(),
            total_income=totals[TransactionType.INCOME.value],
            total_expense=totals[TransactionType.EXPENSE.value],
            net=totals[TransactionType.INCOME.value] - totals[TransactionType.EXPENSE.value],
            transaction_count=len(transactions),
            categories=sorted(buckets.values(), key=_category_order)
        )

        logger.info(
            "Transactions summarized",
            user_id=user_id,
            currency=summary.currency,
            count=summary.transaction_count
        )
        return summary


def _category_order(summary: CategorySummary) -> Tuple[int, int, str]:
    """Income before expense, then catalog order; unknown categories last."""
    transaction_type = TransactionType(summary.type)
    catalog = TRANSACTION_CATEGORIES[transaction_type]
    position = catalog.index(summary.category) if summary.category in catalog else len(catalog)
    return (0 if transaction_type == TransactionType.INCOME else 1, position, summary.category)
