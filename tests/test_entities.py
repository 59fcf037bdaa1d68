"""Tests for domain entities."""

import dataclasses
import pytest
from datetime import datetime, date, UTC
from decimal import Decimal

from bookit.domain.entities import (
    BankTransaction,
    BatchSummary,
    BookingMode,
    ClassificationResult,
    EntryKind,
    JournalEntry,
    JournalLine,
    Suggestion,
    TransactionStatus,
)


def _transaction(**overrides):
    values = dict(
        id=1,
        date=date(2024, 3, 1),
        amount=Decimal("100.00"),
        description="Invoice 123",
        counterparty_name=None,
        counterparty_account=None,
        reference=None,
        status=TransactionStatus.UNMATCHED,
        journal_entry_id=None,
        suggestion=None,
        confidence_score=None,
        imported_at=datetime.now(UTC),
    )
    values.update(overrides)
    return BankTransaction(**values)


class TestBankTransaction:
    """Tests for BankTransaction entity."""

    def test_posted_follows_journal_link_not_status(self):
        assert not _transaction(status=TransactionStatus.BOOKED).is_posted
        assert _transaction(status=TransactionStatus.MATCHED, journal_entry_id=4).is_posted

    def test_direction(self):
        assert _transaction().is_inflow
        assert not _transaction(amount=Decimal("-1.00")).is_inflow

    def test_immutability(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            _transaction().amount = Decimal("1")


def _line(line_id, debit="0", credit="0"):
    return JournalLine(
        id=line_id,
        journal_entry_id=1,
        account_id=line_id,
        debit=Decimal(debit),
        credit=Decimal(credit),
        memo=None,
    )


def test_journal_entry_totals():
    entry = JournalEntry(
        id=1,
        entry_date=date(2024, 3, 1),
        description="Sales",
        reference=None,
        kind=EntryKind.BANK,
        contact_id=None,
        created_at=datetime.now(UTC),
        lines=(_line(1, debit="50.00"), _line(2, credit="30.00"), _line(3, credit="20.00")),
    )

    assert entry.total_debit == Decimal("50.00")
    assert entry.total_credit == Decimal("50.00")
    assert entry.is_balanced
    assert not dataclasses.replace(entry, lines=entry.lines[:2]).is_balanced


def test_classification_result_to_dict():
    result = ClassificationResult(
        score=90,
        suggestion=Suggestion(account_id=4, contact_id=2, mode=BookingMode.VIA_RELATIE),
        source="rules",
    )

    assert result.to_dict() == {
        "score": 90,
        "suggestion": {"account_id": 4, "contact_id": 2, "description": None, "mode": "relation"},
        "reason": None,
        "source": "rules",
    }


def test_batch_summary_total():
    assert BatchSummary(booked_private=2, booked_classified=3, skipped=1).total_booked == 5
