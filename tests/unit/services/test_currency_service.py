"""
Unit tests for the currency service.
"""
from decimal import Decimal

import pytest

from finance_tracker.models.auth import IdentityUser, SessionState
from finance_tracker.services import CurrencyService
from finance_tracker.utils.constants import settings_document_path
from finance_tracker.utils.exceptions import ValidationError
from tests.factories.user_factory import SettingsDocumentFactory


def signed_in(uid: str) -> SessionState:
    return SessionState(user=IdentityUser(uid=uid, email_verified=True), loading=False)


@pytest.mark.unit
class TestFormatAmount:
    """Amount formatting."""

    @pytest.mark.parametrize("amount,currency,expected", [
        (Decimal("1234.5"), "USD", "$1,234.50"),
        (Decimal("25.5"), "EUR", "€25.50"),
        (Decimal("0.005"), "USD", "$0.01"),
        (Decimal("-12"), "GBP", "-£12.00"),
        (Decimal("25.5"), "JPY", "¥26"),
        (1000000, "USD", "$1,000,000.00"),
        ("42.1", "USD", "$42.10"),
        (Decimal("10"), "SEK", "SEK 10.00"),
    ])
    def test_formats(self, test_db, amount, currency, expected):
        service = CurrencyService(test_db)

        assert service.format_amount(amount, currency) == expected

    def test_uses_active_currency(self, test_db):
        service = CurrencyService(test_db, default_currency="EUR")

        assert service.format_amount(Decimal("5")) == "€5.00"

    @pytest.mark.parametrize("amount", [Decimal("NaN"), "abc", float("nan")])
    def test_non_numbers_never_raise(self, test_db, amount):
        assert CurrencyService(test_db).format_amount(amount) == "$NaN"

    def test_infinity(self, test_db):
        service = CurrencyService(test_db)

        assert service.format_amount(Decimal("Infinity")) == "$∞"
        assert service.format_amount(Decimal("-Infinity")) == "-$∞"

    def test_amounts_beyond_default_precision(self, test_db):
        service = CurrencyService(test_db)

        assert service.format_amount("1e30") == "$1" + ",000" * 10 + ".00"
        assert service.format_amount("1234567890" * 4) == (
            "$1,234,567,890,123,456,789,012,345,678,901,234,567,890.00"
        )
        assert service.format_amount("-1e30", "JPY") == "-¥1" + ",000" * 10


class TestSessionFollowing:
    """Currency follows the signed-in user."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_loads_preference_on_sign_in(self, test_db):
        test_db.seed(settings_document_path("u1"), SettingsDocumentFactory(currency="EUR"))
        service = CurrencyService(test_db)

        await service.handle_session_change(signed_in("u1"))

        assert service.currency == "EUR"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_preferences_keep_default(self, test_db):
        service = CurrencyService(test_db)

        await service.handle_session_change(signed_in("u1"))

        assert service.currency == "USD"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_read_failure_keeps_current(self, test_db):
        test_db.fail("get_document")
        service = CurrencyService(test_db, default_currency="GBP")

        assert await service.load_preferences("u1") == "GBP"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_resets_on_sign_out(self, test_db):
        test_db.seed(settings_document_path("u1"), SettingsDocumentFactory(currency="JPY"))
        service = CurrencyService(test_db)
        await service.handle_session_change(signed_in("u1"))

        await service.handle_session_change(SessionState(loading=False))

        assert service.currency == "USD"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_same_user_is_not_reloaded(self, test_db):
        service = CurrencyService(test_db)
        await service.handle_session_change(signed_in("u1"))
        await service.set_currency("CAD")

        await service.handle_session_change(signed_in("u1"))

        assert service.currency == "CAD"


class TestSetCurrency:
    """Changing the active currency."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_persists_for_signed_in_user(self, test_db):
        test_db.seed(settings_document_path("u1"), SettingsDocumentFactory(currency="USD", theme="dark"))
        service = CurrencyService(test_db)
        await service.handle_session_change(signed_in("u1"))

        assert await service.set_currency("eur") == "EUR"

        stored = test_db.documents[settings_document_path("u1")]
        assert stored["currency"] == "EUR"
        assert stored["theme"] == "dark"
        assert test_db.writes[-1] == ("set", settings_document_path("u1"), {"currency": "EUR"})

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_anonymous_change_is_not_persisted(self, test_db):
        service = CurrencyService(test_db)

        await service.set_currency("EUR")

        assert service.currency == "EUR"
        assert test_db.writes == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_invalid_code(self, test_db):
        service = CurrencyService(test_db)

        with pytest.raises(ValidationError) as exc_info:
            await service.set_currency("E1R")

        assert exc_info.value.code == "INVALID_CURRENCY"
        assert service.currency == "USD"
