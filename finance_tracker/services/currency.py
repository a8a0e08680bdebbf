"""
Active currency and amount formatting.
"""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Optional, Union

import structlog

from ..infrastructure import FirestoreService, get_firestore
from ..models.auth import SessionState, UserSettings
from ..utils.constants import (
    CURRENCY_DECIMALS,
    CURRENCY_SYMBOLS,
    DEFAULT_CURRENCY,
    ZERO_DECIMAL_CURRENCIES,
    settings_document_path,
)
from ..utils.exceptions import ValidationError as AppValidationError
from ..utils.validators import validate_currency_code

logger = structlog.get_logger()

Amount = Union[Decimal, float, int, str]


class CurrencyService:
    """
    Holds the currency of the signed-in user and formats amounts in it.

    Falls back to the configured default while nobody is signed in or the
    user's preferences cannot be read.
    """

    def __init__(
        self,
        firestore: Optional[FirestoreService] = None,
        default_currency: str = DEFAULT_CURRENCY
    ):
        self.firestore = firestore or get_firestore()
        self._default_currency = default_currency
        self._currency = default_currency
        self._user_id: Optional[str] = None

    @property
    def currency(self) -> str:
        return self._currency

    def symbol(self, currency: Optional[str] = None) -> str:
        code = currency or self._currency
        return CURRENCY_SYMBOLS.get(code, f"{code} ")

    def format_amount(self, amount: Amount, currency: Optional[str] = None) -> str:
        """Format an amount, e.g. ``$1,234.50``. Non-numbers render as ``$NaN``."""
        code = currency or self._currency
        symbol = self.symbol(code)

        try:
            value = Decimal(str(amount))
        except (InvalidOperation, ValueError):
            value = Decimal("NaN")

        if value.is_nan():
            return f"{symbol}NaN"
        if value.is_infinite():
            return f"{'-' if value < 0 else ''}{symbol}∞"

        decimals = 0 if code in ZERO_DECIMAL_CURRENCIES else CURRENCY_DECIMALS
        try:
            with localcontext() as ctx:
                # Room for every integer digit plus the fraction
                ctx.prec = max(ctx.prec, value.adjusted() + decimals + 2)
                quantized = value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
        except InvalidOperation:
            return f"{symbol}NaN"
        sign = "-" if quantized < 0 else ""
        return f"{sign}{symbol}{quantized.copy_abs():,.{decimals}f}"

    async def handle_session_change(self, state: SessionState) -> None:
        """Follow sign-in and sign-out of the session."""
        if state.user is None:
            if self._user_id is not None:
                logger.debug("Currency reset to default", currency=self._default_currency)
            self._user_id = None
            self._currency = self._default_currency
        elif state.user.uid != self._user_id:
            self._user_id = state.user.uid
            await self.load_preferences(state.user.uid)

    async def load_preferences(self, user_id: str) -> str:
        """Load the user's preferred currency; keeps the current one on failure."""
        try:
            doc = await self.firestore.get_document(settings_document_path(user_id))
            if doc:
                self._currency = UserSettings.model_validate(doc).currency.upper()
        except Exception as e:
            logger.error("Error loading currency preference", user_id=user_id, error=str(e))

        return self._currency

    async def set_currency(self, currency: str) -> str:
        """Change the active currency and persist it for the signed-in user."""
        try:
            code = validate_currency_code(currency)
        except ValueError as e:
            raise AppValidationError(message=str(e), code="INVALID_CURRENCY")

        if self._user_id is not None:
            await self.firestore.set_document(
                settings_document_path(self._user_id),
                {"currency": code},
                merge=True
            )

        self._currency = code
        logger.info("Currency changed", user_id=self._user_id, currency=code)
        return code
