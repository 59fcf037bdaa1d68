"""Tests for CLI date filter helper."""

from datetime import date

import click
import pytest

from bookit.cli.date_filters import resolve_cli_date_range
from bookit.utils.date_parser import get_date_range


def _ctx() -> click.Context:
    return click.Context(click.Command("test"))


def test_resolve_cli_date_range_rejects_period_with_start_end(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_cli_date_range(
            _ctx(),
            start_date="2024-01-01",
            end_date=None,
            period="this-month",
        )

    assert excinfo.value.exit_code == 1
    err = capsys.readouterr().err
    assert "cannot be combined" in err


def test_resolve_cli_date_range_returns_period_range():
    result = resolve_cli_date_range(_ctx(), start_date=None, end_date=None, period="last-year")

    assert result == get_date_range("last-year")


def test_resolve_cli_date_range_parses_explicit_dates():
    result = resolve_cli_date_range(
        _ctx(), start_date="01-02-2024", end_date="2024-02-29", period=None
    )

    assert result == (date(2024, 2, 1), date(2024, 2, 29))


def test_resolve_cli_date_range_without_filters():
    assert resolve_cli_date_range(_ctx(), start_date=None, end_date=None, period=None) == (
        None,
        None,
    )


def test_resolve_cli_date_range_rejects_invalid_date(capsys):
    with pytest.raises(click.exceptions.Exit):
        resolve_cli_date_range(_ctx(), start_date="someday", end_date=None, period=None)

    assert "Invalid start date" in capsys.readouterr().err


def test_resolve_cli_date_range_rejects_reversed_range(capsys):
    with pytest.raises(click.exceptions.Exit):
        resolve_cli_date_range(
            _ctx(), start_date="2024-03-01", end_date="2024-02-01", period=None
        )

    assert "after" in capsys.readouterr().err
