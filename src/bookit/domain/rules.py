"""Bank rule engine: keyword to ledger account mappings."""

from enum import Enum
from typing import Iterable, Optional

import structlog

from bookit.database.base import Database
from bookit.domain.entities import BankRule, BankTransaction
from bookit.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    duplicate_rule_keyword,
)

logger = structlog.get_logger(__name__)


class RuleMatchPolicy(str, Enum):
    """Order in which rules are tried against a description."""

    FIRST_CREATED = "first_created"
    LONGEST_KEYWORD = "longest_keyword"


def order_rules(rules: Iterable[BankRule], policy: RuleMatchPolicy) -> list[BankRule]:
    """Order rules for matching.

    ``rules`` must be in creation order. The sort is stable, so rules with
    equally long keywords keep their creation order.
    """
    rules = list(rules)
    if policy == RuleMatchPolicy.LONGEST_KEYWORD:
        return sorted(rules, key=lambda rule: len(rule.keyword), reverse=True)
    return rules


def find_matching_rule(
    rules: Iterable[BankRule],
    text: str,
    policy: RuleMatchPolicy = RuleMatchPolicy.FIRST_CREATED,
) -> Optional[BankRule]:
    """Return the first rule whose keyword occurs in the text, ignoring case."""
    haystack = (text or "").lower()
    if not haystack:
        return None
    for rule in order_rules(rules, policy):
        if rule.keyword.lower() in haystack:
            return rule
    return None


def transaction_match_text(transaction: BankTransaction) -> str:
    """Text a transaction is matched on: description plus counterparty name."""
    parts = [transaction.description or "", transaction.counterparty_name or ""]
    return " ".join(part for part in parts if part)


class RuleService:
    """Service for creating and matching bank rules."""

    def __init__(self, db: Database, policy: RuleMatchPolicy = RuleMatchPolicy.FIRST_CREATED):
        """Initialize rule service.

        Args:
            db: Database instance
            policy: Default match policy
        """
        self.db = db
        self.policy = policy

    def validate_new_rule(self, keyword: Optional[str], target_account_id: Optional[int]) -> str:
        """Check that a rule could be created, without writing anything.

        Returns:
            The stripped keyword

        Raises:
            ValidationError: If the keyword is blank or the account doesn't exist
            ConflictError: If a rule with the same keyword exists
        """
        keyword = (keyword or "").strip()
        if not keyword:
            raise ValidationError("Rule keyword must not be empty")
        if target_account_id is None or self.db.get_ledger_account(target_account_id) is None:
            raise ValidationError(account_not_found(target_account_id))
        if self.db.get_bank_rule_by_keyword(keyword) is not None:
            raise ConflictError(duplicate_rule_keyword(keyword))
        return keyword

    def create_rule(self, keyword: str, target_account_id: int) -> int:
        """Create a bank rule.

        Args:
            keyword: Substring to look for in transaction descriptions
            target_account_id: Ledger account to suggest on a match

        Returns:
            Rule ID

        Raises:
            ValidationError: If the keyword is blank or the account doesn't exist
            ConflictError: If a rule with the same keyword exists
        """
        keyword = self.validate_new_rule(keyword, target_account_id)
        rule_id = self.db.create_bank_rule(keyword=keyword, target_account_id=target_account_id)
        logger.info("rule_created", rule_id=rule_id, keyword=keyword, account_id=target_account_id)
        return rule_id

    def list_rules(self) -> list[BankRule]:
        """List rules in creation order."""
        return self.db.list_bank_rules()

    def delete_rule(self, rule_id: int) -> None:
        """Delete a bank rule.

        Raises:
            NotFoundError: If the rule doesn't exist
        """
        if not any(rule.id == rule_id for rule in self.db.list_bank_rules()):
            raise NotFoundError(f"Bank rule {rule_id} not found")
        self.db.delete_bank_rule(rule_id)
        logger.info("rule_deleted", rule_id=rule_id)

    def match_rule(
        self, description: str, policy: Optional[RuleMatchPolicy] = None
    ) -> Optional[BankRule]:
        """Return the rule matching a description, or None."""
        return find_matching_rule(self.db.list_bank_rules(), description, policy or self.policy)

    def match(self, description: str, policy: Optional[RuleMatchPolicy] = None) -> Optional[int]:
        """Suggest a ledger account for a description.

        Args:
            description: Transaction description
            policy: Match policy, defaults to the service's policy

        Returns:
            Target account ID of the matching rule, or None
        """
        rule = self.match_rule(description, policy)
        return rule.target_account_id if rule is not None else None

    def match_transaction(
        self, transaction: BankTransaction, policy: Optional[RuleMatchPolicy] = None
    ) -> Optional[BankRule]:
        """Match a transaction on its description and counterparty name."""
        return self.match_rule(transaction_match_text(transaction), policy)
