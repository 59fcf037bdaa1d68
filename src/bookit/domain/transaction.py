"""Bank transaction domain service."""

from datetime import date
from decimal import Decimal
from typing import Optional

import structlog

from bookit.database.base import Database
from bookit.domain.classification import Classifier, coerce_result
from bookit.domain.entities import (
    BankTransaction,
    ClassificationResult,
    ReconciliationStatus,
    TransactionStatus,
)
from bookit.domain.errors import NotFoundError, ValidationError, transaction_not_found

logger = structlog.get_logger(__name__)


class TransactionService:
    """Service for managing bank transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_transaction(
        self,
        date: date,
        amount: Decimal,
        description: str,
        counterparty_name: Optional[str] = None,
        counterparty_account: Optional[str] = None,
        reference: Optional[str] = None,
    ) -> int:
        """Create an unmatched bank transaction.

        Args:
            date: Transaction date
            amount: Signed amount (positive = money in, negative = money out)
            description: Free-text description from the bank
            counterparty_name: Optional counterparty name
            counterparty_account: Optional counterparty IBAN
            reference: Optional payment reference

        Returns:
            Transaction ID

        Raises:
            ValidationError: If the amount is zero
        """
        if amount == 0:
            raise ValidationError("Transaction amount must not be zero")

        return self.db.create_bank_transaction(
            date=date,
            amount=amount,
            description=(description or "").strip(),
            counterparty_name=counterparty_name or None,
            counterparty_account=counterparty_account or None,
            reference=reference or None,
        )

    def get_transaction(self, transaction_id: int) -> Optional[BankTransaction]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            BankTransaction entity or None if not found
        """
        return self.db.get_bank_transaction(transaction_id)

    def require_transaction(self, transaction_id: int) -> BankTransaction:
        """Get transaction by ID or raise NotFoundError."""
        transaction = self.db.get_bank_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return transaction

    def list_transactions(
        self,
        status: Optional[TransactionStatus] = None,
        posted: Optional[bool] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[BankTransaction]:
        """List transactions ordered by date.

        Args:
            status: Optional status filter
            posted: Optional filter on whether a journal entry is linked
            start_date: Optional first date (inclusive)
            end_date: Optional last date (inclusive)

        Returns:
            List of bank transactions
        """
        transactions = self.db.list_bank_transactions(status=status)
        if posted is not None:
            transactions = [txn for txn in transactions if txn.is_posted == posted]
        if start_date is not None:
            transactions = [txn for txn in transactions if txn.date >= start_date]
        if end_date is not None:
            transactions = [txn for txn in transactions if txn.date <= end_date]
        return transactions

    def list_unmatched(self) -> list[BankTransaction]:
        """Transactions still waiting for a booking."""
        return self.db.list_bank_transactions(status=TransactionStatus.UNMATCHED)

    def reconciliation_status(self) -> ReconciliationStatus:
        """Report how many transactions are posted to the ledger.

        Completeness is based on the journal entry link alone.
        """
        transactions = self.db.list_bank_transactions()
        posted = sum(1 for txn in transactions if txn.is_posted)
        unmatched = sum(
            1
            for txn in transactions
            if not txn.is_posted and txn.status == TransactionStatus.UNMATCHED
        )
        return ReconciliationStatus(
            total=len(transactions),
            posted=posted,
            unposted=len(transactions) - posted,
            unmatched=unmatched,
        )

    def classify_and_store(
        self, transaction_id: int, classifier: Classifier
    ) -> ClassificationResult:
        """Run a classifier on a transaction and store its suggestion.

        Args:
            transaction_id: Transaction ID
            classifier: Classifier to consult

        Returns:
            The classification result

        Raises:
            NotFoundError: If the transaction doesn't exist
            ExternalServiceError: If the classifier fails
        """
        transaction = self.require_transaction(transaction_id)
        result = coerce_result(classifier.analyze(transaction))
        self.db.update_transaction_suggestion(transaction_id, result.to_dict(), result.score)
        logger.info(
            "suggestion_stored",
            transaction_id=transaction_id,
            score=result.score,
            source=result.source,
        )
        return result
