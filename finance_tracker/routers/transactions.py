"""
Transaction endpoints: the entry form, listing and categorized summaries.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ..models.api_responses import CategoryCatalog
from ..models.auth import IdentityUser
from ..models.financial import (
    EntryFormState,
    EntryFormUpdate,
    SubmissionResult,
    SubmissionStatus,
    Transaction,
    TransactionsSummary,
)
from ..services import CurrencyService, TransactionEntryForm, TransactionService
from ..utils.constants import TRANSACTION_CATEGORIES, TransactionType
from ..utils.dependencies import (
    get_current_user,
    get_currency_service,
    get_entry_form,
    get_ready_session,
    get_transaction_service,
)

router = APIRouter(prefix="/transactions")

SUBMISSION_STATUS_CODES = {
    SubmissionStatus.CREATED: status.HTTP_201_CREATED,
    SubmissionStatus.SKIPPED: status.HTTP_200_OK,
    SubmissionStatus.REJECTED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    SubmissionStatus.FAILED: status.HTTP_502_BAD_GATEWAY,
}


@router.get("/categories", response_model=CategoryCatalog)
async def list_categories() -> CategoryCatalog:
    """Allowed categories per transaction type."""
    return CategoryCatalog(
        income=list(TRANSACTION_CATEGORIES[TransactionType.INCOME]),
        expense=list(TRANSACTION_CATEGORIES[TransactionType.EXPENSE])
    )


@router.get("/form", response_model=EntryFormState, dependencies=[Depends(get_ready_session)])
async def get_form(form: TransactionEntryForm = Depends(get_entry_form)) -> EntryFormState:
    """Current entry form state with amount preview."""
    return form.snapshot()


@router.patch("/form", response_model=EntryFormState, dependencies=[Depends(get_ready_session)])
async def update_form(
    update: EntryFormUpdate,
    form: TransactionEntryForm = Depends(get_entry_form)
) -> EntryFormState:
    """Apply typed changes; changing the type clears the category."""
    return form.apply(update)


@router.post("/form/open", response_model=EntryFormState, dependencies=[Depends(get_ready_session)])
async def open_form(form: TransactionEntryForm = Depends(get_entry_form)) -> EntryFormState:
    return form.open()


@router.post("/form/close", response_model=EntryFormState, dependencies=[Depends(get_ready_session)])
async def close_form(form: TransactionEntryForm = Depends(get_entry_form)) -> EntryFormState:
    """Close the form and discard its fields."""
    return form.close()


@router.post("/form/submit", response_model=SubmissionResult, dependencies=[Depends(get_ready_session)])
async def submit_form(
    response: Response,
    form: TransactionEntryForm = Depends(get_entry_form)
) -> SubmissionResult:
    """
    Submit the entry form.

    Outcomes are also pushed to the notification feed:
    201 created, 422 rejected input, 502 failed write, 200 skipped (no user).
    """
    result = await form.submit()
    response.status_code = SUBMISSION_STATUS_CODES[result.status]
    return result


@router.get("", response_model=List[Transaction])
async def list_transactions(
    type: Optional[TransactionType] = Query(None, description="Filter by transaction type"),
    limit: Optional[int] = Query(50, ge=1, le=1000, description="Maximum number of transactions to return"),
    current_user: IdentityUser = Depends(get_current_user),
    transaction_service: TransactionService = Depends(get_transaction_service)
) -> List[Transaction]:
    """Signed-in user's transactions, newest first."""
    return await transaction_service.list_transactions(
        current_user.uid,
        transaction_type=type,
        limit=limit
    )


@router.get("/summary", response_model=TransactionsSummary)
async def summarize_transactions(
    currency: Optional[str] = Query(None, min_length=3, max_length=3, description="Defaults to the active currency"),
    current_user: IdentityUser = Depends(get_current_user),
    currency_service: CurrencyService = Depends(get_currency_service),
    transaction_service: TransactionService = Depends(get_transaction_service)
) -> TransactionsSummary:
    """Totals per type and category."""
    return await transaction_service.summarize(
        current_user.uid,
        currency=currency or currency_service.currency
    )
