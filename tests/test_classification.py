"""Tests for classifiers and stored suggestions."""

import pytest

from bookit.domain.classification import ChainClassifier, RuleClassifier, coerce_result
from bookit.domain.entities import BookingMode, ClassificationResult, Suggestion
from bookit.domain.errors import ExternalServiceError, NotFoundError, ValidationError


class TestCoerceResult:
    """Tests for result normalization."""

    def test_relation_without_contact_becomes_direct(self):
        result = ClassificationResult(
            score=90, suggestion=Suggestion(account_id=5, mode=BookingMode.VIA_RELATIE)
        )

        coerced = coerce_result(result)

        assert coerced.suggestion.mode == BookingMode.DIRECT
        assert coerced.suggestion.account_id == 5
        assert coerced.score == 90

    def test_score_is_clamped(self):
        assert coerce_result(ClassificationResult(score=140)).score == 100
        assert coerce_result(ClassificationResult(score=-3)).score == 0

    def test_valid_result_unchanged(self):
        result = ClassificationResult(
            score=80,
            suggestion=Suggestion(account_id=5, contact_id=2, mode=BookingMode.VIA_RELATIE),
        )

        assert coerce_result(result) is result


class TestRuleClassifier:
    """Tests for the rule and contact based classifier."""

    def test_rule_match_gives_direct_suggestion(self, temp_db, rule_service, ledger, make_transaction):
        rule_service.create_rule("ziggo", ledger["4600"])
        txn = make_transaction("-55.00", description="ZIGGO internet maart")

        result = RuleClassifier(temp_db).analyze(txn)

        assert result.score == 100
        assert result.suggestion.account_id == ledger["4600"]
        assert result.suggestion.mode == BookingMode.DIRECT
        assert result.suggestion.description == "ZIGGO internet maart"
        assert "ziggo" in result.reason

    def test_contact_default_gives_relation_suggestion(
        self, temp_db, contact_service, acme, ledger, make_transaction
    ):
        contact_service.set_default_account(acme.id, ledger["4300"])
        txn = make_transaction("-120.00", description="Order 77", counterparty_name=" ACME ")

        result = RuleClassifier(temp_db).analyze(txn)

        assert result.score == 100
        assert result.suggestion.mode == BookingMode.VIA_RELATIE
        assert result.suggestion.contact_id == acme.id
        assert result.suggestion.account_id == ledger["4300"]

    def test_contact_without_default_is_named_but_not_scored(
        self, temp_db, acme, ledger, make_transaction
    ):
        txn = make_transaction("-120.00", counterparty_name="Acme")

        result = RuleClassifier(temp_db).analyze(txn)

        assert result.score == 0
        assert result.suggestion.account_id is None
        assert result.suggestion.contact_id == acme.id
        assert "no default account" in result.reason

    def test_contact_found_by_iban(self, temp_db, contact_service, ledger, make_transaction):
        contact_id = contact_service.create_contact(
            "Acme Holding", "Supplier", ledger["4300"], iban="NL91ABNA0417164300"
        )
        txn = make_transaction(
            "-120.00", counterparty_name="ACME HLDG", counterparty_account="NL91 ABNA 0417 1643 00"
        )

        result = RuleClassifier(temp_db).analyze(txn)

        assert result.score == 100
        assert result.suggestion.contact_id == contact_id
        assert "IBAN" in result.reason

    def test_contact_found_in_cleaned_description(
        self, temp_db, contact_service, ledger, make_transaction
    ):
        contact_id = contact_service.create_contact("Bakkerij de Vries", "Supplier", ledger["4300"])
        txn = make_transaction("-8.40", description="BEA 08:12 Apple Pay BAKKERIJ DE VRIES 123456")

        result = RuleClassifier(temp_db).analyze(txn)

        assert result.score == 100
        assert result.suggestion.contact_id == contact_id
        assert result.suggestion.mode == BookingMode.VIA_RELATIE

    def test_contact_in_wrong_direction_is_skipped(
        self, temp_db, contact_service, big_client, ledger, make_transaction
    ):
        contact_service.set_default_account(big_client.id, ledger["8000"])
        txn = make_transaction("-30.00", counterparty_name=big_client.name)

        result = RuleClassifier(temp_db).analyze(txn)

        assert result.score == 0
        assert result.suggestion.contact_id is None

    def test_vendor_default(self, temp_db, ledger, make_transaction):
        txn = make_transaction("-45.10", description="BEA 12:00 24-12-2024 SHELL UTRECHT NR 12345")

        result = RuleClassifier(temp_db).analyze(txn)

        assert result.score == 100
        assert result.suggestion.account_id == ledger["4400"]
        assert result.suggestion.mode == BookingMode.DIRECT
        assert result.suggestion.description == "Fuel"
        assert "shell" in result.reason

    def test_vendor_prefers_counterparty_name(self, temp_db, ledger, make_transaction):
        txn = make_transaction("-55.00", description="Factuur 2024-03", counterparty_name="Ziggo B.V.")

        result = RuleClassifier(temp_db).analyze(txn)

        assert result.suggestion.account_id == ledger["4600"]

    def test_vendor_needs_suggestable_account(self, temp_db, account_service, make_transaction):
        account_service.create_account("4400", "Travel Expenses", "Expense", is_active=False)
        txn = make_transaction("-45.10", description="SHELL UTRECHT")

        result = RuleClassifier(temp_db).analyze(txn)

        assert result.score == 0

    def test_contact_beats_vendor(self, temp_db, contact_service, ledger, make_transaction):
        contact_id = contact_service.create_contact("Shell Nederland", "Supplier", ledger["4300"])
        txn = make_transaction("-45.10", counterparty_name="Shell Nederland")

        result = RuleClassifier(temp_db).analyze(txn)

        assert result.suggestion.contact_id == contact_id
        assert result.suggestion.account_id == ledger["4300"]

    def test_nothing_matches(self, temp_db, ledger, make_transaction):
        result = RuleClassifier(temp_db).analyze(make_transaction("19.99", description="Refund"))

        assert result.score == 0
        assert result.suggestion.account_id is None


    def test_rule_beats_contact(
        self, temp_db, rule_service, contact_service, acme, ledger, make_transaction
    ):
        contact_service.set_default_account(acme.id, ledger["4300"])
        rule_service.create_rule("acme", ledger["4800"])
        txn = make_transaction("-120.00", counterparty_name="Acme")

        result = RuleClassifier(temp_db).analyze(txn)

        assert result.suggestion.account_id == ledger["4800"]
        assert result.suggestion.mode == BookingMode.DIRECT


class TestChainClassifier:
    """Tests for chained classifiers."""

    def test_first_confident_result_wins(self, stub_classifier, make_transaction, ledger):
        txn = make_transaction("10")
        first = stub_classifier(default=ClassificationResult(score=70, source="first"))
        second = stub_classifier(default=ClassificationResult(score=95, source="second"))

        result = ChainClassifier([first, second], threshold=70).analyze(txn)

        assert result.source == "first"
        assert second.calls == []

    def test_best_result_when_none_confident(self, stub_classifier, make_transaction, ledger):
        txn = make_transaction("10")
        low = stub_classifier(default=ClassificationResult(score=20, source="low"))
        better = stub_classifier(default=ClassificationResult(score=60, source="better"))
        also = stub_classifier(default=ClassificationResult(score=60, source="also"))

        result = ChainClassifier([low, better, also], threshold=70).analyze(txn)

        assert result.source == "better"

    def test_errors_propagate(self, stub_classifier, make_transaction, ledger):
        txn = make_transaction("10")
        failing = stub_classifier(default=ExternalServiceError("down"))

        with pytest.raises(ExternalServiceError):
            ChainClassifier([failing]).analyze(txn)

    def test_failing_classifier_is_skipped(self, stub_classifier, make_transaction, ledger):
        txn = make_transaction("10")
        broken = stub_classifier(default=ConnectionError("reset"))
        backup = stub_classifier(default=ClassificationResult(score=80, source="backup"))

        result = ChainClassifier([broken, backup], threshold=70).analyze(txn)

        assert result.source == "backup"
        assert broken.calls == [txn.id]

    def test_low_result_kept_when_later_classifier_fails(
        self, stub_classifier, make_transaction, ledger
    ):
        txn = make_transaction("10")
        low = stub_classifier(default=ClassificationResult(score=30, source="low"))
        broken = stub_classifier(default=ExternalServiceError("down"))

        result = ChainClassifier([low, broken], threshold=70).analyze(txn)

        assert result.source == "low"

    def test_all_failing_raises_service_error(self, stub_classifier, make_transaction, ledger):
        txn = make_transaction("10")
        broken = stub_classifier(default=KeyError("score"))

        with pytest.raises(ExternalServiceError, match="All classifiers failed"):
            ChainClassifier([broken, broken]).analyze(txn)

    def test_needs_a_classifier(self):
        with pytest.raises(ValidationError):
            ChainClassifier([])


class TestClassifyAndStore:
    """Tests for storing suggestions on a transaction."""

    def test_suggestion_is_stored(self, transaction_service, stub_classifier, make_transaction):
        txn = make_transaction("-42.00")
        classifier = stub_classifier(
            default=ClassificationResult(
                score=88,
                suggestion=Suggestion(account_id=3, description="Lunch", mode=BookingMode.DIRECT),
                source="stub",
            )
        )

        result = transaction_service.classify_and_store(txn.id, classifier)

        stored = transaction_service.get_transaction(txn.id)
        assert result.score == 88
        assert stored.confidence_score == 88
        assert stored.suggestion["suggestion"] == {
            "account_id": 3,
            "contact_id": None,
            "description": "Lunch",
            "mode": "direct",
        }
        assert stored.suggestion["source"] == "stub"
        assert not stored.is_posted

    def test_unknown_transaction(self, transaction_service, stub_classifier):
        with pytest.raises(NotFoundError):
            transaction_service.classify_and_store(404, stub_classifier())
