"""Tests for Database interface returning domain models."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy.exc import OperationalError

from bookit.domain import entities
from bookit.domain.entities import EntryDraft, EntryKind, LineDraft, TransactionStatus
from bookit.domain.errors import ConflictError, NotFoundError, StorageError


def _bank_entry(bank_id, target_id, amount="50.00"):
    return EntryDraft(
        entry_date=date(2024, 3, 1),
        description="Fuel",
        kind=EntryKind.BANK,
        lines=(
            LineDraft(account_id=target_id, debit=Decimal(amount), credit=Decimal("0")),
            LineDraft(account_id=bank_id, debit=Decimal("0"), credit=Decimal(amount)),
        ),
    )


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_ledger_accounts_are_domain_models(self, temp_db):
        account_id = temp_db.create_ledger_account("1100", "Bank", entities.AccountType.ASSET)

        account = temp_db.get_ledger_account(account_id)

        assert isinstance(account, entities.LedgerAccount)
        assert temp_db.get_ledger_account_by_code("1100") == account
        assert isinstance(account.created_at, datetime)
        assert temp_db.get_ledger_account_by_code("9999") is None

    def test_bank_transaction_is_domain_model(self, temp_db):
        transaction_id = temp_db.create_bank_transaction(
            date=date(2024, 3, 1), amount=Decimal("-50.00"), description="Fuel"
        )

        txn = temp_db.get_bank_transaction(transaction_id)

        assert isinstance(txn, entities.BankTransaction)
        assert isinstance(txn.amount, Decimal)
        assert txn.status == TransactionStatus.UNMATCHED

    def test_store_suggestion(self, temp_db):
        transaction_id = temp_db.create_bank_transaction(
            date=date(2024, 3, 1), amount=Decimal("-50.00"), description="Fuel"
        )

        temp_db.update_transaction_suggestion(transaction_id, {"score": 40}, 40)

        txn = temp_db.get_bank_transaction(transaction_id)
        assert txn.suggestion == {"score": 40}
        assert txn.confidence_score == 40

    def test_bank_rule_lookup_ignores_case(self, temp_db):
        account_id = temp_db.create_ledger_account("4400", "Travel", entities.AccountType.EXPENSE)
        temp_db.create_bank_rule("Shell", account_id)

        rule = temp_db.get_bank_rule_by_keyword("SHELL")

        assert isinstance(rule, entities.BankRule)
        assert rule.keyword == "Shell"


class TestPostBooking:
    """Tests for the atomic booking write."""

    @pytest.fixture
    def accounts(self, temp_db):
        bank = temp_db.create_ledger_account("1100", "Bank", entities.AccountType.ASSET)
        travel = temp_db.create_ledger_account("4400", "Travel", entities.AccountType.EXPENSE)
        return bank, travel

    @pytest.fixture
    def transaction_id(self, temp_db):
        return temp_db.create_bank_transaction(
            date=date(2024, 3, 1), amount=Decimal("-50.00"), description="Fuel"
        )

    def test_writes_entry_link_and_rule(self, temp_db, accounts, transaction_id):
        bank, travel = accounts

        entry_ids = temp_db.post_booking(
            transaction_id, [_bank_entry(bank, travel)], 0, rule=("Fuel", travel)
        )

        txn = temp_db.get_bank_transaction(transaction_id)
        entry = temp_db.get_journal_entry(entry_ids[0])
        assert txn.status == TransactionStatus.BOOKED
        assert txn.journal_entry_id == entry.id
        assert entry.is_balanced
        assert [line.account_id for line in entry.lines] == [travel, bank]
        assert temp_db.get_bank_rule_by_keyword("fuel").target_account_id == travel

    def test_failure_writes_nothing(self, temp_db, accounts, transaction_id):
        bank, travel = accounts

        with pytest.raises(NotFoundError):
            temp_db.post_booking(
                transaction_id,
                [_bank_entry(bank, travel)],
                0,
                default_account=(404, travel),
                rule=("Fuel", travel),
            )

        txn = temp_db.get_bank_transaction(transaction_id)
        assert not txn.is_posted
        assert txn.status == TransactionStatus.UNMATCHED
        assert temp_db.list_journal_entries() == []
        assert temp_db.list_bank_rules() == []

    def test_second_booking_conflicts(self, temp_db, accounts, transaction_id):
        bank, travel = accounts
        temp_db.post_booking(transaction_id, [_bank_entry(bank, travel)], 0)

        with pytest.raises(ConflictError):
            temp_db.post_booking(transaction_id, [_bank_entry(bank, travel)], 0)

        assert len(temp_db.list_journal_entries()) == 1

    def test_unknown_transaction(self, temp_db, accounts):
        with pytest.raises(NotFoundError):
            temp_db.post_booking(999, [_bank_entry(*accounts)], 0)

    def test_rejected_rule_insert_writes_nothing(self, temp_db, accounts, transaction_id):
        bank, travel = accounts

        with pytest.raises(StorageError):
            temp_db.post_booking(
                transaction_id, [_bank_entry(bank, travel)], 0, rule=("Fuel", 9999)
            )

        txn = temp_db.get_bank_transaction(transaction_id)
        assert txn.status == TransactionStatus.UNMATCHED
        assert txn.journal_entry_id is None
        assert temp_db.list_journal_entries() == []
        assert temp_db.list_bank_rules() == []

    def test_rejected_journal_line_writes_nothing(self, temp_db, accounts, transaction_id):
        bank, _ = accounts

        with pytest.raises(StorageError):
            temp_db.post_booking(transaction_id, [_bank_entry(bank, 9999)], 0)

        assert not temp_db.get_bank_transaction(transaction_id).is_posted
        assert temp_db.list_journal_entries() == []


class TestReadFailures:
    """Driver errors on reads surface as StorageError."""

    @pytest.fixture
    def locked(self, temp_db, monkeypatch):
        def query(*args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        monkeypatch.setattr(temp_db._get_session(), "query", query)

    @pytest.mark.parametrize(
        "read",
        [
            lambda db: db.get_ledger_account(1),
            lambda db: db.get_ledger_account_by_code("1100"),
            lambda db: db.list_ledger_accounts(),
            lambda db: db.get_contact(1),
            lambda db: db.get_contact_by_iban("NL91ABNA0417164300"),
            lambda db: db.list_contacts(),
            lambda db: db.get_bank_transaction(1),
            lambda db: db.list_bank_transactions(),
            lambda db: db.get_journal_entry(1),
            lambda db: db.list_journal_entries(),
            lambda db: db.get_bank_rule_by_keyword("shell"),
            lambda db: db.list_bank_rules(),
            lambda db: db.delete_bank_rule(1),
            lambda db: db.update_contact_default_account(1, None),
        ],
    )
    def test_read_errors_are_storage_errors(self, temp_db, locked, read):
        with pytest.raises(StorageError, match="database is locked"):
            read(temp_db)


def test_contact_iban_lookup(temp_db):
    old = temp_db.create_contact(
        "Acme", entities.RelationType.SUPPLIER, iban="NL91ABNA0417164300"
    )
    temp_db.create_contact(
        "Acme Old", entities.RelationType.SUPPLIER, iban="NL91ABNA0417164300", is_active=False
    )

    contact = temp_db.get_contact_by_iban("NL91ABNA0417164300")

    assert contact.id == old
    assert contact.iban == "NL91ABNA0417164300"
    assert temp_db.get_contact_by_iban("NL02RABO0123456789") is None
