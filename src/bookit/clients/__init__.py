"""Clients for external services."""

from bookit.clients.classifier_http import HttpClassifier

__all__ = ["HttpClassifier"]
