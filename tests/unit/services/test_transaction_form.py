"""
Unit tests for the transaction entry form.
"""
from datetime import date, datetime

import pytest

from finance_tracker.models.financial import EntryFormUpdate, SubmissionStatus
from finance_tracker.utils.constants import NotificationLevel, TransactionType, transactions_collection_path


async def sign_in(session_manager, identity, uid="u1"):
    identity.add_account(f"{uid}@example.com", "secret1", uid=uid)
    await session_manager.sign_in(f"{uid}@example.com", "secret1")


def fill(entry_form, **fields):
    values = {
        "amount": "25.50",
        "type": TransactionType.EXPENSE,
        "category": "Food & Dining",
        "description": "Lunch",
        "date": date(2024, 1, 15),
    }
    values.update(fields)
    return entry_form.apply(EntryFormUpdate(**values))


class TestFormState:
    """Input handling and previews."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_defaults(self, entry_form):
        state = entry_form.snapshot()

        assert state.amount == ""
        assert state.type == TransactionType.EXPENSE
        assert state.category == ""
        assert state.description == ""
        assert state.date == datetime.utcnow().date()
        assert state.submitting is False
        assert state.is_open is False
        assert state.currency == "USD"
        assert state.categories[0] == "Food & Dining"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_type_change_resets_category(self, entry_form):
        entry_form.apply(EntryFormUpdate(category="Shopping"))

        state = entry_form.apply(EntryFormUpdate(type=TransactionType.INCOME))

        assert state.category == ""
        assert "Salary" in state.categories
        assert "Shopping" not in state.categories

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_type_is_applied_before_category(self, entry_form):
        state = entry_form.apply(EntryFormUpdate(type=TransactionType.INCOME, category="Salary"))

        assert state.type == TransactionType.INCOME
        assert state.category == "Salary"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_preview(self, entry_form):
        assert entry_form.preview is None

        entry_form.apply(EntryFormUpdate(amount="1234.5"))
        assert entry_form.preview == "$1,234.50"

        entry_form.apply(EntryFormUpdate(amount="abc"))
        assert entry_form.preview == "$NaN"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_preview_of_huge_amounts(self, entry_form):
        state = entry_form.apply(EntryFormUpdate(amount="1e30"))

        assert state.preview == "$1" + ",000" * 10 + ".00"

        entry_form.apply(EntryFormUpdate(amount="9" * 30))
        assert entry_form.snapshot().preview == "$999" + ",999" * 9 + ".00"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_close_discards_fields(self, entry_form):
        entry_form.open()
        fill(entry_form, type=TransactionType.INCOME, category="Salary")

        state = entry_form.close()

        assert state.is_open is False
        assert state.amount == ""
        assert state.type == TransactionType.EXPENSE
        assert state.category == ""


class TestSubmit:
    """Submitting the form."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_valid_submission_writes_once(self, entry_form, session_manager, identity, test_db, notifications):
        await sign_in(session_manager, identity, "u1")
        entry_form.open()
        fill(entry_form)

        result = await entry_form.submit()

        assert result.status == SubmissionStatus.CREATED
        assert len(test_db.writes) == 1
        operation, path, doc = test_db.writes[0]
        assert operation == "add"
        assert path.startswith(transactions_collection_path("u1") + "/")
        assert path.endswith(result.transaction_id)
        assert doc["amount"] == 25.5
        assert doc["type"] == "expense"
        assert doc["category"] == "Food & Dining"
        assert doc["description"] == "Lunch"
        assert doc["date"] == datetime(2024, 1, 15)
        assert doc["currency"] == "USD"
        assert doc["userId"] == "u1"
        assert isinstance(doc["createdAt"], datetime)
        assert "id" not in doc

        assert [n.message for n in notifications.pending()] == ["Expense added successfully!"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_success_resets_and_closes(self, entry_form, session_manager, identity):
        await sign_in(session_manager, identity)
        entry_form.open()
        fill(entry_form, type=TransactionType.INCOME, category="Salary", amount="1000")

        await entry_form.submit()
        state = entry_form.snapshot()

        assert state.amount == ""
        assert state.type == TransactionType.EXPENSE
        assert state.category == ""
        assert state.description == ""
        assert state.date == datetime.utcnow().date()
        assert state.is_open is False
        assert state.submitting is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_income_message(self, entry_form, session_manager, identity, notifications):
        await sign_in(session_manager, identity)
        fill(entry_form, type=TransactionType.INCOME, category="Freelance")

        result = await entry_form.submit()

        assert result.message == "Income added successfully!"
        assert notifications.pending()[-1].level == NotificationLevel.SUCCESS

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["-5", "0", "", "abc", "NaN", "Infinity"])
    async def test_invalid_amount_is_rejected_before_write(
        self, amount, entry_form, session_manager, identity, test_db, notifications
    ):
        await sign_in(session_manager, identity)
        fill(entry_form, amount=amount)

        result = await entry_form.submit()

        assert result.status == SubmissionStatus.REJECTED
        assert result.error_code == "INVALID_AMOUNT"
        assert test_db.writes == []
        assert entry_form.submitting is False
        notification = notifications.pending()[-1]
        assert notification.level == NotificationLevel.ERROR
        assert notification.message == "Please enter a valid amount greater than 0"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_rejection_keeps_fields(self, entry_form, session_manager, identity):
        await sign_in(session_manager, identity)
        entry_form.open()
        fill(entry_form, amount="-5")

        await entry_form.submit()

        assert entry_form.amount == "-5"
        assert entry_form.category == "Food & Dining"
        assert entry_form.is_open is True

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_category_from_other_type_is_rejected(self, entry_form, session_manager, identity, test_db):
        await sign_in(session_manager, identity)
        fill(entry_form, category="Salary")

        result = await entry_form.submit()

        assert result.status == SubmissionStatus.REJECTED
        assert result.error_code == "INVALID_CATEGORY"
        assert test_db.writes == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_blank_description_is_rejected(self, entry_form, session_manager, identity, test_db):
        await sign_in(session_manager, identity)
        fill(entry_form, description="   ")

        result = await entry_form.submit()

        assert result.status == SubmissionStatus.REJECTED
        assert result.error_code == "MISSING_DESCRIPTION"
        assert test_db.writes == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_without_user_nothing_happens(self, entry_form, test_db, notifications):
        fill(entry_form)

        result = await entry_form.submit()

        assert result.status == SubmissionStatus.SKIPPED
        assert test_db.writes == []
        assert notifications.pending() == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_write_failure_notifies_and_keeps_fields(
        self, entry_form, session_manager, identity, test_db, notifications
    ):
        await sign_in(session_manager, identity)
        entry_form.open()
        fill(entry_form)
        test_db.fail("add_document")

        result = await entry_form.submit()

        assert result.status == SubmissionStatus.FAILED
        assert result.error_code == "TEST_FAILURE"
        assert result.message == "Failed to add expense. Please try again."
        assert notifications.pending()[-1].message == "Failed to add expense. Please try again."
        assert entry_form.amount == "25.50"
        assert entry_form.is_open is True
        assert entry_form.submitting is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_submitting_is_set_during_write(self, entry_form, session_manager, identity, test_db):
        await sign_in(session_manager, identity)
        fill(entry_form)
        observed = []
        original_add = test_db.add_document

        async def add_document(collection, data):
            observed.append(entry_form.submitting)
            return await original_add(collection, data)

        test_db.add_document = add_document

        await entry_form.submit()

        assert observed == [True]
        assert entry_form.submitting is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_uses_active_currency(self, entry_form, session_manager, identity, currency_service, test_db):
        await sign_in(session_manager, identity)
        await currency_service.set_currency("EUR")
        fill(entry_form)

        await entry_form.submit()

        assert test_db.writes[-1][2]["currency"] == "EUR"
