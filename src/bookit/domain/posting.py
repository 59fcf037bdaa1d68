"""Journal line planning for bank transaction bookings.

Pure functions: given a transaction and the accounts involved, build the
journal entry drafts a booking writes. Nothing here touches the database.

Amounts are always positive on the line; the sign of the transaction decides
which side is debited.

Direct, money in::

    Dr cash      Cr target

Direct, money out::

    Dr target    Cr cash

Via relation, money in (customer)::

    Sales:       Dr debtors     Cr target
    Bank:        Dr cash        Cr debtors

Via relation, money out (supplier)::

    Purchase:    Dr target      Cr creditors
    Bank:        Dr creditors   Cr cash
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from bookit.domain.entities import BankTransaction, EntryDraft, EntryKind, LineDraft
from bookit.domain.errors import ValidationError

ZERO = Decimal("0")


@dataclass(frozen=True)
class PostingPlan:
    """Entries to write for one booking.

    ``link_index`` points at the entry the transaction links to.
    """

    entries: tuple[EntryDraft, ...]
    link_index: int

    @property
    def link_entry(self) -> EntryDraft:
        return self.entries[self.link_index]


def entry_description(description: Optional[str], transaction: BankTransaction) -> str:
    """Caller's description, or the transaction's own when blank."""
    description = (description or "").strip()
    return description or transaction.description


def entry_reference(transaction: BankTransaction) -> Optional[str]:
    """Transaction reference, or the counterparty account when absent."""
    return transaction.reference or transaction.counterparty_account or None


def _transfer(
    debit_account_id: int, credit_account_id: int, amount: Decimal, memo: Optional[str] = None
) -> tuple[LineDraft, LineDraft]:
    return (
        LineDraft(account_id=debit_account_id, debit=amount, credit=ZERO, memo=memo),
        LineDraft(account_id=credit_account_id, debit=ZERO, credit=amount, memo=memo),
    )


def _booking_amount(transaction: BankTransaction) -> Decimal:
    if transaction.amount == 0:
        raise ValidationError(f"Transaction {transaction.id} has a zero amount")
    return abs(transaction.amount)


def plan_direct(
    transaction: BankTransaction,
    cash_account_id: int,
    target_account_id: int,
    description: Optional[str] = None,
) -> PostingPlan:
    """Plan a single bank entry between the cash account and the target."""
    amount = _booking_amount(transaction)
    if transaction.is_inflow:
        lines = _transfer(cash_account_id, target_account_id, amount)
    else:
        lines = _transfer(target_account_id, cash_account_id, amount)

    entry = EntryDraft(
        entry_date=transaction.date,
        description=entry_description(description, transaction),
        kind=EntryKind.BANK,
        lines=lines,
        reference=entry_reference(transaction),
    )
    return PostingPlan(entries=(entry,), link_index=0)


def plan_via_relatie(
    transaction: BankTransaction,
    cash_account_id: int,
    clearing_account_id: int,
    target_account_id: int,
    contact_id: int,
    description: Optional[str] = None,
) -> PostingPlan:
    """Plan a recognition entry plus a settlement entry through a clearing account.

    ``clearing_account_id`` is the debtors account for money in and the
    creditors account for money out. The transaction links to the settlement.
    """
    amount = _booking_amount(transaction)
    text = entry_description(description, transaction)
    reference = entry_reference(transaction)

    if transaction.is_inflow:
        recognition_kind = EntryKind.SALES
        recognition = _transfer(clearing_account_id, target_account_id, amount)
        settlement = _transfer(cash_account_id, clearing_account_id, amount)
    else:
        recognition_kind = EntryKind.PURCHASE
        recognition = _transfer(target_account_id, clearing_account_id, amount)
        settlement = _transfer(clearing_account_id, cash_account_id, amount)

    entries = (
        EntryDraft(
            entry_date=transaction.date,
            description=text,
            kind=recognition_kind,
            lines=recognition,
            reference=reference,
            contact_id=contact_id,
        ),
        EntryDraft(
            entry_date=transaction.date,
            description=text,
            kind=EntryKind.BANK,
            lines=settlement,
            reference=reference,
            contact_id=contact_id,
        ),
    )
    return PostingPlan(entries=entries, link_index=1)


def assert_balanced(entries: Sequence[EntryDraft]) -> None:
    """Raise ValidationError unless every entry's debits equal its credits."""
    for entry in entries:
        if len(entry.lines) < 2:
            raise ValidationError(f"Journal entry '{entry.description}' needs at least two lines")
        for line in entry.lines:
            if line.debit < 0 or line.credit < 0:
                raise ValidationError("Journal line amounts must not be negative")
            if (line.debit > 0) == (line.credit > 0):
                raise ValidationError("Journal line must be either a debit or a credit")
        debit = sum((line.debit for line in entry.lines), ZERO)
        credit = sum((line.credit for line in entry.lines), ZERO)
        if debit != credit:
            raise ValidationError(
                f"Journal entry '{entry.description}' is unbalanced: "
                f"debit {debit} != credit {credit}"
            )
