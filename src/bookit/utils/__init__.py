"""Utility functions for bookit."""

from bookit.utils.date_parser import parse_date, get_date_range
from bookit.utils.amount_parser import parse_amount
from bookit.utils.ledger_resolver import resolve_ledger_account, resolve_contact

__all__ = [
    "parse_date",
    "get_date_range",
    "parse_amount",
    "resolve_ledger_account",
    "resolve_contact",
]
