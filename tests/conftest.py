"""Shared pytest fixtures for bookit tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from bookit.database.factories import create_sqlite_database
from bookit.domain.account import AccountService
from bookit.domain.booking import BookingService
from bookit.domain.contact import ContactService
from bookit.domain.entities import ClassificationResult, RelationType
from bookit.domain.reclassification import ReclassificationService
from bookit.domain.rules import RuleService
from bookit.domain.transaction import TransactionService
from bookit.settings import BookingSettings


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def settings():
    """Default settings without throttling delays."""
    return BookingSettings(private_delay=0, classify_delay=0)


@pytest.fixture
def account_service(temp_db, settings):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db, settings)


@pytest.fixture
def contact_service(temp_db):
    """Create a ContactService with a temporary database."""
    return ContactService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def rule_service(temp_db):
    """Create a RuleService with a temporary database."""
    return RuleService(temp_db)


@pytest.fixture
def booking_service(temp_db, settings):
    """Create a BookingService with a temporary database."""
    return BookingService(temp_db, settings)


@pytest.fixture
def reclassification_service(temp_db, settings):
    """Create a ReclassificationService with a temporary database."""
    return ReclassificationService(temp_db, settings)


@pytest.fixture
def ledger(account_service):
    """Seed the default chart of accounts and return account IDs by code."""
    from bookit.cli.commands.init_ledger import DEFAULT_CHART

    return {
        code: account_service.create_account(code=code, name=name, account_type=account_type)
        for code, name, account_type in DEFAULT_CHART
    }


@pytest.fixture
def acme(contact_service):
    """A supplier contact without default account."""
    contact_id = contact_service.create_contact(name="Acme", relation_type=RelationType.SUPPLIER)
    return contact_service.get_contact(contact_id)


@pytest.fixture
def big_client(contact_service):
    """A customer contact without default account."""
    contact_id = contact_service.create_contact(
        name="Big Client", relation_type=RelationType.CUSTOMER
    )
    return contact_service.get_contact(contact_id)


@pytest.fixture
def make_transaction(transaction_service):
    """Factory creating an unmatched bank transaction and returning it."""

    def _make(amount, description="", counterparty_name=None, **kwargs):
        transaction_id = transaction_service.create_transaction(
            date=kwargs.pop("date", date(2024, 3, 1)),
            amount=Decimal(str(amount)),
            description=description,
            counterparty_name=counterparty_name,
            **kwargs,
        )
        return transaction_service.get_transaction(transaction_id)

    return _make


class StubClassifier:
    """Classifier returning canned results per transaction ID.

    A value that is an exception instance is raised instead of returned.
    """

    def __init__(self, results=None, default=None):
        self.results = dict(results or {})
        self.default = default if default is not None else ClassificationResult(score=0)
        self.calls = []

    def analyze(self, transaction):
        self.calls.append(transaction.id)
        result = self.results.get(transaction.id, self.default)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def stub_classifier():
    """Return the StubClassifier class for building per-test classifiers."""
    return StubClassifier


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def cli_env():
    """Environment for CLI invocations: no throttling, no classifier service."""
    return {
        "BOOKIT_PRIVATE_DELAY": "0",
        "BOOKIT_CLASSIFY_DELAY": "0",
        "BOOKIT_CLASSIFIER_URL": "",
    }


@pytest.fixture
def reopen(temp_db):
    """Drop cached ORM state so reads see writes made by CLI invocations."""

    def _reopen():
        temp_db.disconnect()
        return temp_db

    return _reopen
