"""HTTP client for an external transaction classification service.

The service receives one transaction as JSON::

    {"id": 7, "date": "2024-03-01", "amount": "-120.00",
     "description": "...", "counterparty_name": "...",
     "counterparty_account": "...", "reference": "..."}

and answers with::

    {"score": 85,
     "suggestion": {"accountId": 12, "contactId": 3,
                    "description": "...", "mode": "relation"},
     "reason": "..."}

Suggestion keys may also be snake_case (``account_id``, ``contact_id``).
"""

from typing import Any, Optional

import httpx
import structlog

from bookit.domain.entities import BankTransaction, BookingMode, ClassificationResult, Suggestion
from bookit.domain.errors import ExternalServiceError
from bookit.settings import BookingSettings

logger = structlog.get_logger(__name__)


def transaction_payload(transaction: BankTransaction) -> dict[str, Any]:
    """Serialize a transaction for the classification service."""
    return {
        "id": transaction.id,
        "date": transaction.date.isoformat(),
        "amount": str(transaction.amount),
        "description": transaction.description,
        "counterparty_name": transaction.counterparty_name,
        "counterparty_account": transaction.counterparty_account,
        "reference": transaction.reference,
    }


def _optional_int(data: dict[str, Any], *keys: str) -> Optional[int]:
    for key in keys:
        value = data.get(key)
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            raise ExternalServiceError(f"Invalid {key} in classifier response: {value!r}")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ExternalServiceError(f"Invalid {key} in classifier response: {value!r}")
    return None


def parse_result(data: Any, source: str = "http") -> ClassificationResult:
    """Validate a classifier response body.

    Raises:
        ExternalServiceError: If the body doesn't follow the contract
    """
    if not isinstance(data, dict):
        raise ExternalServiceError("Classifier response is not a JSON object")

    score = data.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ExternalServiceError(f"Classifier response has no numeric score: {score!r}")
    if not 0 <= score <= 100:
        raise ExternalServiceError(f"Classifier score out of range: {score}")

    raw = data.get("suggestion") or {}
    if not isinstance(raw, dict):
        raise ExternalServiceError("Classifier suggestion is not a JSON object")

    mode = raw.get("mode")
    if mode is not None:
        try:
            mode = BookingMode(mode)
        except ValueError:
            raise ExternalServiceError(f"Unknown booking mode in classifier response: {mode!r}")

    description = raw.get("description")
    suggestion = Suggestion(
        account_id=_optional_int(raw, "accountId", "account_id"),
        contact_id=_optional_int(raw, "contactId", "contact_id"),
        description=str(description) if description else None,
        mode=mode,
    )
    reason = data.get("reason")
    return ClassificationResult(
        score=int(score),
        suggestion=suggestion,
        reason=str(reason) if reason else None,
        source=source,
    )


class HttpClassifier:
    """Classifier backed by a JSON-over-HTTP service."""

    name = "http"

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
    ):
        """Initialize the HTTP classifier.

        Args:
            url: Endpoint the transaction is POSTed to
            timeout: Request timeout in seconds
            client: Optional preconfigured httpx client (used in tests)
        """
        self.url = url
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, settings: BookingSettings) -> "HttpClassifier":
        if not settings.classifier_url:
            raise ExternalServiceError("BOOKIT_CLASSIFIER_URL is not configured")
        return cls(settings.classifier_url, timeout=settings.classifier_timeout)

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(timeout=httpx.Timeout(self.timeout))
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def analyze(self, transaction: BankTransaction) -> ClassificationResult:
        """Ask the service to classify a transaction.

        Raises:
            ExternalServiceError: On network errors, error statuses and
                malformed responses
        """
        client = self._get_client()
        try:
            response = client.post(self.url, json=transaction_payload(transaction))
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as exc:
            logger.warning("classifier_request_failed", url=self.url, error=str(exc))
            raise ExternalServiceError(f"Classifier request failed: {exc}") from exc

        if response.status_code >= 400:
            logger.warning(
                "classifier_error_status",
                url=self.url,
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise ExternalServiceError(
                f"Classifier returned HTTP {response.status_code} "
                f"for transaction {transaction.id}"
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ExternalServiceError("Classifier response is not valid JSON") from exc

        result = parse_result(data, source=self.name)
        logger.debug(
            "transaction_classified",
            transaction_id=transaction.id,
            score=result.score,
            account_id=result.suggestion.account_id,
        )
        return result
