"""Bulk reconciliation: book many unmatched transactions in one run.

A run has two phases, processed one transaction at a time:

1. Private: transactions the user flagged as private withdrawals are booked
   directly against the private withdrawal (equity) account.
2. Classified: every other transaction is sent to a classifier and booked
   when the suggestion is confident enough.

A failing transaction is counted as skipped and the run moves on. The only
error that stops a run is a missing private withdrawal account when private
transactions were selected, which is checked before anything is booked.
"""

import time
from typing import Callable, Iterator, Optional, Union

import structlog

from bookit.database.base import Database
from bookit.domain.booking import BookingService
from bookit.domain.classification import Classifier, coerce_result
from bookit.domain.entities import (
    BankTransaction,
    BatchPhase,
    BatchRequest,
    BatchSummary,
    BookingMode,
    ProgressEvent,
)
from bookit.domain.errors import BatchPreconditionError, DomainError
from bookit.domain.transaction import TransactionService
from bookit.settings import BookingSettings

logger = structlog.get_logger(__name__)

PRIVATE_DESCRIPTION = "Private withdrawal"

ProgressCallback = Callable[[ProgressEvent], None]


class Throttle:
    """Wait a fixed delay between consecutive calls to ``wait``.

    The first call never sleeps.
    """

    def __init__(self, delay: float, sleep: Callable[[float], None] = time.sleep):
        self.delay = delay
        self.sleep = sleep
        self._started = False

    def wait(self) -> None:
        if self._started and self.delay > 0:
            self.sleep(self.delay)
        self._started = True


class BulkReconciliationService:
    """Drive the booking engine over a batch of transactions."""

    def __init__(
        self,
        db: Database,
        classifier: Classifier,
        settings: Optional[BookingSettings] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize bulk reconciliation.

        Args:
            db: Database instance
            classifier: Classifier used for non-private transactions
            settings: Threshold, delays and system account codes
            sleep: Sleep function used by the throttles
        """
        self.db = db
        self.classifier = classifier
        self.settings = settings or BookingSettings()
        self.booking = BookingService(db, self.settings)
        self.transactions = TransactionService(db)
        self.sleep = sleep

    def select(self, request: BatchRequest) -> tuple[list[BankTransaction], list[BankTransaction]]:
        """Split a request into private and classified transactions.

        Only unmatched, unposted transactions are kept, each once, in request
        order (or date order when the request lists no IDs).
        """
        unmatched = [txn for txn in self.transactions.list_unmatched() if not txn.is_posted]
        if request.transaction_ids:
            by_id = {txn.id: txn for txn in unmatched}
            seen = set()
            selected = []
            for transaction_id in request.transaction_ids:
                if transaction_id in by_id and transaction_id not in seen:
                    seen.add(transaction_id)
                    selected.append(by_id[transaction_id])
        else:
            selected = unmatched

        private = [txn for txn in selected if txn.id in request.private_ids]
        remainder = [txn for txn in selected if txn.id not in request.private_ids]
        return private, remainder

    def iter_run(self, request: BatchRequest) -> Iterator[Union[ProgressEvent, BatchSummary]]:
        """Process a batch, yielding a progress event per transaction.

        The last item yielded is the BatchSummary.

        Raises:
            BatchPreconditionError: Before anything is booked, if private
                transactions were selected but the private withdrawal account
                is missing
        """
        private, remainder = self.select(request)
        total = len(private) + len(remainder)

        private_account = None
        if private:
            private_account = self.booking.accounts.private_withdrawal_account()
            if private_account is None:
                raise BatchPreconditionError(
                    f"Private withdrawal account {self.settings.private_account_code} "
                    "(Equity) not found; nothing was booked"
                )

        logger.info(
            "bulk_run_started", total=total, private=len(private), classified=len(remainder)
        )
        booked_private = booked_classified = skipped = 0
        current = 0

        throttle = Throttle(self.settings.private_delay, self.sleep)
        for transaction in private:
            throttle.wait()
            current += 1
            try:
                self.booking.book(
                    transaction.id,
                    private_account.id,
                    description=transaction.description or PRIVATE_DESCRIPTION,
                    mode=BookingMode.DIRECT,
                )
                booked_private += 1
            except DomainError as exc:
                skipped += 1
                logger.warning(
                    "bulk_item_skipped",
                    phase=BatchPhase.PRIVATE.value,
                    transaction_id=transaction.id,
                    error=str(exc),
                )
            except Exception as exc:
                skipped += 1
                logger.error(
                    "bulk_item_failed",
                    phase=BatchPhase.PRIVATE.value,
                    transaction_id=transaction.id,
                    error=str(exc),
                    exc_info=True,
                )
            yield ProgressEvent(
                current=current,
                total=total,
                phase=BatchPhase.PRIVATE,
                transaction_id=transaction.id,
                label="Processing private withdrawals",
            )

        throttle = Throttle(self.settings.classify_delay, self.sleep)
        for transaction in remainder:
            throttle.wait()
            current += 1
            if self._book_classified(transaction):
                booked_classified += 1
            else:
                skipped += 1
            yield ProgressEvent(
                current=current,
                total=total,
                phase=BatchPhase.CLASSIFIED,
                transaction_id=transaction.id,
                label="Classifying transactions",
            )

        summary = BatchSummary(
            booked_private=booked_private,
            booked_classified=booked_classified,
            skipped=skipped,
        )
        logger.info(
            "bulk_run_finished",
            booked_private=summary.booked_private,
            booked_classified=summary.booked_classified,
            skipped=summary.skipped,
        )
        yield summary

    def _book_classified(self, transaction: BankTransaction) -> bool:
        """Classify and book one transaction. Returns False when skipped."""
        log = logger.bind(phase=BatchPhase.CLASSIFIED.value, transaction_id=transaction.id)
        try:
            result = coerce_result(self.classifier.analyze(transaction))
        except DomainError as exc:
            log.warning("bulk_item_skipped", reason="classifier_failed", error=str(exc))
            return False
        except Exception as exc:
            log.error("bulk_item_failed", reason="classifier_failed", error=str(exc), exc_info=True)
            return False

        if result.score < self.settings.confidence_threshold:
            log.info("bulk_item_skipped", reason="low_confidence", score=result.score)
            return False
        suggestion = result.suggestion
        if suggestion.account_id is None:
            log.info("bulk_item_skipped", reason="no_account", score=result.score)
            return False
        account = self.booking.accounts.get_account(suggestion.account_id)
        if account is not None and not self.booking.accounts.is_suggestable(account):
            log.info(
                "bulk_item_skipped", reason="account_not_suggestable", account_code=account.code
            )
            return False

        try:
            if suggestion.mode == BookingMode.VIA_RELATIE:
                self.booking.book_via_relatie(
                    transaction.id,
                    suggestion.account_id,
                    suggestion.contact_id,
                    description=suggestion.description or transaction.description,
                )
            else:
                self.booking.book_direct(
                    transaction.id,
                    suggestion.account_id,
                    description=suggestion.description or transaction.description,
                )
        except DomainError as exc:
            log.warning("bulk_item_skipped", reason="booking_failed", error=str(exc))
            return False
        except Exception as exc:
            log.error("bulk_item_failed", reason="booking_failed", error=str(exc), exc_info=True)
            return False
        return True

    def run(
        self, request: BatchRequest, on_progress: Optional[ProgressCallback] = None
    ) -> BatchSummary:
        """Process a batch and return its summary.

        Args:
            request: Transactions to process and which of them are private
            on_progress: Called with a ProgressEvent after each transaction;
                raising from it stops the run (bookings made so far stay)

        Returns:
            BatchSummary with booked and skipped counts

        Raises:
            BatchPreconditionError: If the private withdrawal account is missing
        """
        for item in self.iter_run(request):
            if isinstance(item, BatchSummary):
                return item
            if on_progress is not None:
                on_progress(item)
        raise RuntimeError("bulk run ended without a summary")
