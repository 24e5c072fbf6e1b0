"""Notification reconciliation: correlate service events back to repository items."""

from __future__ import annotations

from .classifiers import (
    DEFAULT_CLASSIFIERS,
    ClassifierOutcome,
    NotificationClassifier,
    NotificationPayloadError,
    PassContext,
    PolicyOverrideClassifier,
    PolicyViolationClassifier,
    RuleClearedClassifier,
    VulnerabilityClassifier,
)
from .correlator import RepositoryCorrelator
from .dispatcher import (
    NotificationDispatcher,
    ReconciliationSettings,
    UnknownEventKindError,
    build_dispatcher,
)
from .status import StatusLookup

__all__ = [
    "DEFAULT_CLASSIFIERS",
    "ClassifierOutcome",
    "NotificationClassifier",
    "NotificationDispatcher",
    "NotificationPayloadError",
    "PassContext",
    "PolicyOverrideClassifier",
    "PolicyViolationClassifier",
    "ReconciliationSettings",
    "RepositoryCorrelator",
    "RuleClearedClassifier",
    "StatusLookup",
    "UnknownEventKindError",
    "VulnerabilityClassifier",
    "build_dispatcher",
]
