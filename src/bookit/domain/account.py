"""Ledger account directory service."""

from typing import Optional

import structlog

from bookit.database.base import Database
from bookit.domain.entities import AccountType, LedgerAccount
from bookit.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_code_not_found,
    account_inactive,
    account_not_found,
)
from bookit.settings import BookingSettings

logger = structlog.get_logger(__name__)

# Code ranges that are never offered as a booking target for bank transactions
# (depreciation and internal allocations are year-end journal material).
BLACKLISTED_CODE_RANGES = ((4200, 4299), (4900, 4999))
BLACKLISTED_NAME_KEYWORDS = ("afschrijving", "depreciation", "amortization")


def code_sort_key(code: str) -> tuple[int, int, str]:
    """Sort key ordering numeric codes numerically, others after them."""
    if code.isdigit():
        return (0, int(code), code)
    return (1, 0, code)


def code_in_range(code: str, code_range: tuple[int, int]) -> bool:
    """Check whether a numeric account code lies in an inclusive range."""
    if not code.isdigit():
        return False
    low, high = code_range
    return low <= int(code) <= high


class AccountService:
    """Service for looking up ledger accounts."""

    def __init__(self, db: Database, settings: Optional[BookingSettings] = None):
        """Initialize account service.

        Args:
            db: Database instance
            settings: Booking settings (system account codes, cash range)
        """
        self.db = db
        self.settings = settings or BookingSettings()

    def create_account(
        self, code: str, name: str, account_type: AccountType | str, is_active: bool = True
    ) -> int:
        """Create a ledger account.

        Args:
            code: Numeric account code (e.g., "8000")
            name: Account name
            account_type: Asset, Liability, Equity, Revenue or Expense
            is_active: Whether the account can be booked against

        Returns:
            Account ID

        Raises:
            ValidationError: If code or name is empty or type is unknown
            ConflictError: If an account with the same code exists
        """
        code = code.strip()
        name = name.strip()
        if not code:
            raise ValidationError("Account code is required")
        if not name:
            raise ValidationError("Account name is required")
        try:
            account_type = AccountType(account_type)
        except ValueError:
            raise ValidationError(f"Unknown account type '{account_type}'")

        if self.db.get_ledger_account_by_code(code) is not None:
            raise ConflictError(f"Account with code {code} already exists")

        return self.db.create_ledger_account(
            code=code, name=name, account_type=account_type, is_active=is_active
        )

    def get_account(self, account_id: int) -> Optional[LedgerAccount]:
        """Get ledger account by ID."""
        return self.db.get_ledger_account(account_id)

    def get_account_by_code(self, code: str) -> Optional[LedgerAccount]:
        """Get ledger account by code."""
        return self.db.get_ledger_account_by_code(code)

    def list_accounts(
        self, active_only: bool = False, account_type: Optional[AccountType] = None
    ) -> list[LedgerAccount]:
        """List ledger accounts ordered by numeric code.

        Args:
            active_only: Only return active accounts
            account_type: Optional type filter

        Returns:
            List of ledger accounts
        """
        accounts = self.db.list_ledger_accounts(active_only=active_only)
        if account_type is not None:
            accounts = [acc for acc in accounts if acc.account_type == account_type]
        return sorted(accounts, key=lambda acc: code_sort_key(acc.code))

    def group_by_type(
        self, active_only: bool = True, account_type: Optional[AccountType] = None
    ) -> dict[AccountType, list[LedgerAccount]]:
        """Group accounts by type, in chart-of-accounts order."""
        groups: dict[AccountType, list[LedgerAccount]] = {t: [] for t in AccountType}
        for account in self.list_accounts(active_only=active_only, account_type=account_type):
            groups[account.account_type].append(account)
        return groups

    def require_active_account(self, account_id: Optional[int]) -> LedgerAccount:
        """Return an active account or raise.

        Raises:
            ValidationError: If the ID is missing, unknown or the account is inactive
        """
        if account_id is None:
            raise ValidationError("A target ledger account is required")
        account = self.db.get_ledger_account(account_id)
        if account is None:
            raise ValidationError(account_not_found(account_id))
        if not account.is_active:
            raise ValidationError(account_inactive(account_id))
        return account

    def require_account_by_code(self, code: str) -> LedgerAccount:
        """Return the account with the given code or raise NotFoundError."""
        account = self.db.get_ledger_account_by_code(code)
        if account is None:
            raise NotFoundError(account_code_not_found(code))
        return account

    def is_cash_account(self, account: LedgerAccount) -> bool:
        """Whether the account is a bank/cash account.

        Cash accounts are Asset accounts whose code lies in the configured
        cash code range.
        """
        return account.account_type == AccountType.ASSET and code_in_range(
            account.code, self.settings.cash_code_range
        )

    def bank_account(self) -> LedgerAccount:
        """The cash account every bank transaction posts against."""
        return self.require_account_by_code(self.settings.bank_account_code)

    def debtors_account(self) -> LedgerAccount:
        """Clearing account for customer receipts."""
        return self.require_account_by_code(self.settings.debtors_account_code)

    def creditors_account(self) -> LedgerAccount:
        """Clearing account for supplier payments."""
        return self.require_account_by_code(self.settings.creditors_account_code)

    def private_withdrawal_account(self) -> Optional[LedgerAccount]:
        """The Equity account for private withdrawals, if configured and present."""
        account = self.db.get_ledger_account_by_code(self.settings.private_account_code)
        if account is None or account.account_type != AccountType.EQUITY:
            return None
        if not account.is_active:
            return None
        return account

    def is_suggestable(self, account: LedgerAccount) -> bool:
        """Whether a classifier may propose this account for a bank transaction.

        Inactive accounts, cash accounts and depreciation accounts never are.
        """
        if not account.is_active or self.is_cash_account(account):
            return False
        for code_range in BLACKLISTED_CODE_RANGES:
            if code_in_range(account.code, code_range):
                return False
        name = account.name.lower()
        return not any(keyword in name for keyword in BLACKLISTED_NAME_KEYWORDS)

    def suggestable_accounts(self) -> list[LedgerAccount]:
        """Active accounts a classifier may propose, cash accounts excluded."""
        active = self.list_accounts(active_only=True)
        accounts = [acc for acc in active if self.is_suggestable(acc)]
        excluded = len(active) - len(accounts)
        if excluded:
            logger.debug("accounts_excluded_from_suggestions", count=excluded)
        return accounts
