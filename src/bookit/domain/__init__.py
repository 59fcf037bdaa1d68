"""Domain layer for bookit application."""

# Services import the database interface, which imports domain entities;
# resolve them lazily so `bookit.domain.entities` can load on its own.
_SERVICES = {
    "AccountService": "bookit.domain.account",
    "ContactService": "bookit.domain.contact",
    "TransactionService": "bookit.domain.transaction",
    "RuleService": "bookit.domain.rules",
    "BookingService": "bookit.domain.booking",
    "ReclassificationService": "bookit.domain.reclassification",
    "BulkReconciliationService": "bookit.domain.bulk",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
