"""
Preference endpoints.
"""
from fastapi import APIRouter, Depends

from ..models.auth import CurrencyPreference
from ..services import CurrencyService
from ..utils.dependencies import get_currency_service, get_ready_session

router = APIRouter(prefix="/preferences", dependencies=[Depends(get_ready_session)])


@router.get("/currency", response_model=CurrencyPreference)
async def get_currency(
    currency_service: CurrencyService = Depends(get_currency_service)
) -> CurrencyPreference:
    return CurrencyPreference(currency=currency_service.currency)


@router.put("/currency", response_model=CurrencyPreference)
async def set_currency(
    preference: CurrencyPreference,
    currency_service: CurrencyService = Depends(get_currency_service)
) -> CurrencyPreference:
    """Change the active currency; saved to the user's settings when signed in."""
    return CurrencyPreference(currency=await currency_service.set_currency(preference.currency))
