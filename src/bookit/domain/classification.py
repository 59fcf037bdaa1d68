"""Classifier capability and the built-in classifiers.

A classifier looks at one bank transaction and returns a confidence score
(0..100, higher is more trustworthy) together with a suggested posting.
"""

from dataclasses import replace
from typing import Optional, Protocol, Sequence

import structlog

from bookit.database.base import Database
from bookit.domain.account import AccountService
from bookit.domain.contact import ContactService, relation_accepts
from bookit.domain.entities import (
    BankTransaction,
    BookingMode,
    ClassificationResult,
    Contact,
    Suggestion,
)
from bookit.domain.errors import ExternalServiceError, ValidationError
from bookit.domain.rules import RuleMatchPolicy, RuleService
from bookit.domain.vendors import VENDOR_DEFAULTS, VendorDefault, match_vendor
from bookit.settings import BookingSettings
from bookit.utils.description_cleaner import clean_description

logger = structlog.get_logger(__name__)

MAX_SCORE = 100


class Classifier(Protocol):
    """Anything that can score and suggest a posting for a transaction."""

    def analyze(self, transaction: BankTransaction) -> ClassificationResult:
        ...


def coerce_result(result: ClassificationResult) -> ClassificationResult:
    """Normalize a classifier result.

    The score is clamped to 0..100, and a relation suggestion without a
    contact is downgraded to a direct posting.
    """
    score = max(0, min(MAX_SCORE, int(result.score)))
    suggestion = result.suggestion
    if suggestion.mode == BookingMode.VIA_RELATIE and suggestion.contact_id is None:
        logger.debug("relation_suggestion_without_contact", source=result.source)
        suggestion = replace(suggestion, mode=BookingMode.DIRECT)
    if score == result.score and suggestion is result.suggestion:
        return result
    return replace(result, score=score, suggestion=suggestion)


def search_text(transaction: BankTransaction) -> str:
    """Cleaned text used to recognise contacts and vendors.

    The counterparty name when it is longer than two characters, the
    description otherwise.
    """
    name = (transaction.counterparty_name or "").strip()
    return clean_description(name if len(name) > 2 else transaction.description or "")


class RuleClassifier:
    """Deterministic classifier backed by bank rules, contacts and vendors.

    Tries, in order:

    1. A bank rule whose keyword occurs in the description or counterparty
       name. Suggests a direct posting to the rule's account.
    2. An active contact that fits the payment direction, found by IBAN, by
       exact counterparty name, or by name in the cleaned search text. With a
       default account it suggests posting via that contact; without one it
       names the contact but scores 0.
    3. A built-in vendor keyword in the cleaned search text whose account
       exists and may be suggested. Suggests a direct posting.

    Every match gives full confidence; anything else scores 0.
    """

    name = "rules"

    def __init__(
        self,
        db: Database,
        policy: RuleMatchPolicy = RuleMatchPolicy.FIRST_CREATED,
        settings: Optional[BookingSettings] = None,
        vendors: Sequence[VendorDefault] = VENDOR_DEFAULTS,
    ):
        self.rules = RuleService(db, policy=policy)
        self.contacts = ContactService(db)
        self.accounts = AccountService(db, settings)
        self.vendors = vendors

    def analyze(self, transaction: BankTransaction) -> ClassificationResult:
        rule = self.rules.match_transaction(transaction)
        if rule is not None:
            return ClassificationResult(
                score=MAX_SCORE,
                suggestion=Suggestion(
                    account_id=rule.target_account_id,
                    description=transaction.description or None,
                    mode=BookingMode.DIRECT,
                ),
                reason=f"Matched bank rule '{rule.keyword}'",
                source=self.name,
            )

        text = search_text(transaction)
        contact, matched_on = self._match_contact(transaction, text)
        if contact is not None:
            return self._contact_result(transaction, contact, matched_on)

        vendor_result = self._match_vendor(transaction, text)
        if vendor_result is not None:
            return vendor_result

        return ClassificationResult(score=0, reason="No rule, contact or vendor matched", source=self.name)

    def _match_contact(
        self, transaction: BankTransaction, text: str
    ) -> tuple[Optional[Contact], Optional[str]]:
        matchers = (
            ("IBAN", self.contacts.match_by_account),
            ("name", self.contacts.match_counterparty),
            ("description", lambda txn: self.contacts.find_in_text(text)),
        )
        for matched_on, matcher in matchers:
            contact = matcher(transaction)
            if contact is None:
                continue
            if relation_accepts(contact.relation_type, transaction.is_inflow):
                return contact, matched_on
            logger.debug(
                "contact_direction_mismatch",
                transaction_id=transaction.id,
                contact_id=contact.id,
                matched_on=matched_on,
            )
        return None, None

    def _contact_result(
        self, transaction: BankTransaction, contact: Contact, matched_on: str
    ) -> ClassificationResult:
        if contact.default_account_id is None:
            return ClassificationResult(
                score=0,
                suggestion=Suggestion(contact_id=contact.id, mode=BookingMode.VIA_RELATIE),
                reason=f"Contact '{contact.name}' matched on {matched_on} has no default account",
                source=self.name,
            )
        return ClassificationResult(
            score=MAX_SCORE,
            suggestion=Suggestion(
                account_id=contact.default_account_id,
                contact_id=contact.id,
                description=transaction.description or None,
                mode=BookingMode.VIA_RELATIE,
            ),
            reason=f"Default account of contact '{contact.name}' (matched on {matched_on})",
            source=self.name,
        )

    def _match_vendor(
        self, transaction: BankTransaction, text: str
    ) -> Optional[ClassificationResult]:
        match = match_vendor(text, self.vendors)
        if match is None:
            return None
        vendor, keyword = match
        account = self.accounts.get_account_by_code(vendor.account_code)
        if account is None or not self.accounts.is_suggestable(account):
            logger.debug(
                "vendor_account_unavailable", keyword=keyword, account_code=vendor.account_code
            )
            return None
        return ClassificationResult(
            score=MAX_SCORE,
            suggestion=Suggestion(
                account_id=account.id, description=vendor.description, mode=BookingMode.DIRECT
            ),
            reason=f"Known vendor '{keyword}'",
            source=self.name,
        )



class ChainClassifier:
    """Consult classifiers in order until one is confident enough.

    Returns the first result scoring at least ``threshold``. When none does,
    the highest-scoring result is returned (the earliest one on a tie).
    A classifier that raises is skipped; only when every classifier fails
    does the chain raise ExternalServiceError.
    """

    name = "chain"

    def __init__(self, classifiers: Sequence[Classifier], threshold: int = 70):
        if not classifiers:
            raise ValidationError("ChainClassifier needs at least one classifier")
        self.classifiers = list(classifiers)
        self.threshold = threshold

    def analyze(self, transaction: BankTransaction) -> ClassificationResult:
        best: Optional[ClassificationResult] = None
        failure: Optional[Exception] = None
        for classifier in self.classifiers:
            try:
                result = coerce_result(classifier.analyze(transaction))
            except Exception as exc:
                failure = exc
                logger.warning(
                    "classifier_failed",
                    classifier=getattr(classifier, "name", type(classifier).__name__),
                    transaction_id=transaction.id,
                    error=str(exc),
                )
                continue
            if result.score >= self.threshold:
                return result
            if best is None or result.score > best.score:
                best = result
        if best is None:
            raise ExternalServiceError(f"All classifiers failed: {failure}") from failure
        return best
