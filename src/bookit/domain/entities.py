"""Domain model entities for bookit.

These are pure data classes representing business concepts, independent of
database schema. Services and the orchestrator only ever see these types; the
SQLAlchemy models stay behind the Database interface.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class AccountType(str, Enum):
    """Ledger account classification."""

    ASSET = "Asset"
    LIABILITY = "Liability"
    EQUITY = "Equity"
    REVENUE = "Revenue"
    EXPENSE = "Expense"


class RelationType(str, Enum):
    """Counterparty relation type."""

    CUSTOMER = "Customer"
    SUPPLIER = "Supplier"
    BOTH = "Both"


class TransactionStatus(str, Enum):
    """Bank transaction status before and after booking."""

    UNMATCHED = "Unmatched"
    MATCHED = "Matched"
    BOOKED = "Booked"


class BookingMode(str, Enum):
    """How a bank transaction is posted to the ledger."""

    DIRECT = "direct"
    VIA_RELATIE = "relation"


class EntryKind(str, Enum):
    """Journal entry type."""

    BANK = "Bank"
    SALES = "Sales"
    PURCHASE = "Purchase"


@dataclass(frozen=True)
class LedgerAccount:
    """Chart of accounts entry."""

    id: int
    code: str
    name: str
    account_type: AccountType
    is_active: bool
    created_at: datetime

    @property
    def label(self) -> str:
        return f"{self.code} - {self.name}"


@dataclass(frozen=True)
class Contact:
    """Counterparty (customer, supplier or both)."""

    id: int
    name: str
    relation_type: RelationType
    is_active: bool
    default_account_id: Optional[int]
    created_at: datetime
    iban: Optional[str] = None


@dataclass(frozen=True)
class BankTransaction:
    """Imported bank transaction.

    ``amount`` is signed: positive for money in, negative for money out.
    """

    id: int
    date: date
    amount: Decimal
    description: str
    counterparty_name: Optional[str]
    counterparty_account: Optional[str]
    reference: Optional[str]
    status: TransactionStatus
    journal_entry_id: Optional[int]
    suggestion: Optional[dict[str, Any]]
    confidence_score: Optional[int]
    imported_at: datetime

    @property
    def is_posted(self) -> bool:
        """Whether the transaction is fully posted to the ledger.

        Derived from the journal entry link only, never from ``status``.
        """
        return self.journal_entry_id is not None

    @property
    def is_inflow(self) -> bool:
        return self.amount > 0


@dataclass(frozen=True)
class JournalLine:
    """Single debit or credit posting on a ledger account."""

    id: int
    journal_entry_id: int
    account_id: int
    debit: Decimal
    credit: Decimal
    memo: Optional[str]


@dataclass(frozen=True)
class JournalEntry:
    """Balanced group of journal lines."""

    id: int
    entry_date: date
    description: str
    reference: Optional[str]
    kind: EntryKind
    contact_id: Optional[int]
    created_at: datetime
    lines: tuple[JournalLine, ...] = ()

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit for line in self.lines), Decimal("0"))

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit for line in self.lines), Decimal("0"))

    @property
    def is_balanced(self) -> bool:
        return self.total_debit == self.total_credit


@dataclass(frozen=True)
class BankRule:
    """Keyword to ledger account mapping."""

    id: int
    keyword: str
    target_account_id: int
    created_at: datetime


@dataclass(frozen=True)
class LineDraft:
    """Journal line that has not been persisted yet."""

    account_id: int
    debit: Decimal
    credit: Decimal
    memo: Optional[str] = None


@dataclass(frozen=True)
class EntryDraft:
    """Journal entry that has not been persisted yet."""

    entry_date: date
    description: str
    kind: EntryKind
    lines: tuple[LineDraft, ...]
    reference: Optional[str] = None
    contact_id: Optional[int] = None


@dataclass(frozen=True)
class Suggestion:
    """Posting suggested by a classifier."""

    account_id: Optional[int] = None
    contact_id: Optional[int] = None
    description: Optional[str] = None
    mode: Optional[BookingMode] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "account_id": self.account_id,
            "contact_id": self.contact_id,
            "description": self.description,
            "mode": self.mode.value if self.mode is not None else None,
        }


@dataclass(frozen=True)
class ClassificationResult:
    """Classifier output: a 0..100 confidence score and a suggestion."""

    score: int
    suggestion: Suggestion = field(default_factory=Suggestion)
    reason: Optional[str] = None
    source: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "suggestion": self.suggestion.to_dict(),
            "reason": self.reason,
            "source": self.source,
        }


@dataclass(frozen=True)
class BatchRequest:
    """Input for a bulk reconciliation run.

    An empty ``transaction_ids`` means all unmatched transactions.
    """

    transaction_ids: tuple[int, ...] = ()
    private_ids: frozenset[int] = frozenset()


class BatchPhase(str, Enum):
    """Bulk reconciliation phase."""

    PRIVATE = "private"
    CLASSIFIED = "classified"


@dataclass(frozen=True)
class ProgressEvent:
    """Progress report emitted after each processed batch item."""

    current: int
    total: int
    phase: BatchPhase
    transaction_id: int
    label: str


@dataclass(frozen=True)
class BatchSummary:
    """Aggregate counts of a finished bulk run."""

    booked_private: int = 0
    booked_classified: int = 0
    skipped: int = 0

    @property
    def total_booked(self) -> int:
        return self.booked_private + self.booked_classified


@dataclass(frozen=True)
class ReconciliationStatus:
    """Completeness report over all bank transactions."""

    total: int
    posted: int
    unposted: int
    unmatched: int
