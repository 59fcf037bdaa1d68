"""Classifier selection for CLI commands."""

import click
from bookit.clients.classifier_http import HttpClassifier
from bookit.database.base import Database
from bookit.domain.classification import ChainClassifier, Classifier, RuleClassifier
from bookit.settings import BookingSettings


def build_classifier(
    ctx: click.Context, db: Database, settings: BookingSettings, use_service: bool = True
) -> Classifier:
    """Rule classifier, followed by the HTTP service when one is configured.

    The HTTP client is closed together with the command context.
    """
    rules = RuleClassifier(db, settings=settings)
    if not use_service or not settings.classifier_url:
        return rules
    service = HttpClassifier.from_settings(settings)
    ctx.call_on_close(service.close)
    return ChainClassifier([rules, service], threshold=settings.confidence_threshold)
