"""Tests for the HTTP classification client."""

import json
import pytest
from datetime import date, datetime, UTC
from decimal import Decimal

import click
import httpx

from bookit.cli.classifiers import build_classifier
from bookit.clients.classifier_http import HttpClassifier, parse_result
from bookit.domain.classification import ChainClassifier, RuleClassifier
from bookit.domain.entities import BankTransaction, BookingMode, TransactionStatus
from bookit.domain.errors import ExternalServiceError
from bookit.settings import BookingSettings

URL = "http://classifier.test/analyze"


@pytest.fixture
def transaction():
    return BankTransaction(
        id=12,
        date=date(2024, 3, 1),
        amount=Decimal("-120.00"),
        description="Acme order",
        counterparty_name="Acme",
        counterparty_account="NL91ABNA0417164300",
        reference="INV-9",
        status=TransactionStatus.UNMATCHED,
        journal_entry_id=None,
        suggestion=None,
        confidence_score=None,
        imported_at=datetime.now(UTC),
    )


def _classifier(handler):
    return HttpClassifier(URL, client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_posts_transaction_and_parses_response(transaction):
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "score": 85,
                "suggestion": {
                    "accountId": 14,
                    "contactId": 3,
                    "description": "Office chairs",
                    "mode": "relation",
                },
                "reason": "Known supplier",
            },
        )

    result = _classifier(handler).analyze(transaction)

    assert seen["method"] == "POST"
    assert seen["url"] == URL
    assert seen["body"] == {
        "id": 12,
        "date": "2024-03-01",
        "amount": "-120.00",
        "description": "Acme order",
        "counterparty_name": "Acme",
        "counterparty_account": "NL91ABNA0417164300",
        "reference": "INV-9",
    }
    assert result.score == 85
    assert result.suggestion.account_id == 14
    assert result.suggestion.contact_id == 3
    assert result.suggestion.mode == BookingMode.VIA_RELATIE
    assert result.reason == "Known supplier"
    assert result.source == "http"


def test_error_status_raises(transaction):
    classifier = _classifier(lambda request: httpx.Response(503, text="maintenance"))

    with pytest.raises(ExternalServiceError, match="503"):
        classifier.analyze(transaction)


def test_network_error_raises(transaction):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ExternalServiceError, match="request failed"):
        _classifier(handler).analyze(transaction)


def test_invalid_url_raises(transaction):
    transport = httpx.MockTransport(lambda request: httpx.Response(200))
    classifier = HttpClassifier(
        "http://classifier.test/\x00analyze", client=httpx.Client(transport=transport)
    )

    with pytest.raises(ExternalServiceError, match="request failed"):
        classifier.analyze(transaction)


def test_stream_error_raises(transaction):
    def handler(request):
        raise httpx.StreamConsumed()

    with pytest.raises(ExternalServiceError, match="request failed"):
        _classifier(handler).analyze(transaction)


def test_invalid_json_raises(transaction):
    classifier = _classifier(lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(ExternalServiceError, match="not valid JSON"):
        classifier.analyze(transaction)


class TestParseResult:
    """Tests for response validation."""

    def test_snake_case_keys(self):
        result = parse_result({"score": 70, "suggestion": {"account_id": "8", "mode": "direct"}})

        assert result.suggestion.account_id == 8
        assert result.suggestion.mode == BookingMode.DIRECT

    def test_missing_suggestion_is_empty(self):
        result = parse_result({"score": 10})

        assert result.suggestion.account_id is None
        assert result.suggestion.mode is None

    @pytest.mark.parametrize(
        "body",
        [
            [],
            {},
            {"score": "high"},
            {"score": True},
            {"score": 101},
            {"score": 50, "suggestion": "4300"},
            {"score": 50, "suggestion": {"mode": "invoice"}},
            {"score": 50, "suggestion": {"accountId": "abc"}},
        ],
    )
    def test_malformed_bodies(self, body):
        with pytest.raises(ExternalServiceError):
            parse_result(body)


def test_from_settings_requires_url():
    with pytest.raises(ExternalServiceError):
        HttpClassifier.from_settings(BookingSettings())

    classifier = HttpClassifier.from_settings(
        BookingSettings(classifier_url=URL, classifier_timeout=5)
    )
    assert classifier.url == URL
    assert classifier.timeout == 5


class TestBuildClassifier:
    """Tests for picking the classifier used by CLI commands."""

    def test_rules_only_without_service_url(self, temp_db, settings):
        ctx = click.Context(click.Command("suggest"))

        assert isinstance(build_classifier(ctx, temp_db, settings), RuleClassifier)

    def test_rules_only_when_service_disabled(self, temp_db):
        ctx = click.Context(click.Command("suggest"))
        settings = BookingSettings(classifier_url=URL)

        classifier = build_classifier(ctx, temp_db, settings, use_service=False)

        assert isinstance(classifier, RuleClassifier)

    def test_http_client_closed_with_command_context(self, temp_db):
        settings = BookingSettings(classifier_url=URL, confidence_threshold=80)
        ctx = click.Context(click.Command("reconcile"))

        with ctx:
            classifier = build_classifier(ctx, temp_db, settings)
            assert isinstance(classifier, ChainClassifier)
            assert classifier.threshold == 80
            http = classifier.classifiers[-1]
            http._get_client()
            assert http._client is not None

        assert http._client is None
