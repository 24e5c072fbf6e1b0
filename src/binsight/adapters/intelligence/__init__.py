"""Public interface for the intelligence service adapter."""

from __future__ import annotations

from .client import IntelligenceAPIError, IntelligenceClient, format_timestamp
from .schema import NotificationPage, NotificationPayload, PolicyStatusPayload, RiskProfilePayload
from .translator import (
    IntelligenceTranslationError,
    parse_notification,
    parse_policy_status,
    parse_vulnerability_counts,
)

__all__ = [
    "IntelligenceAPIError",
    "IntelligenceClient",
    "IntelligenceTranslationError",
    "NotificationPage",
    "NotificationPayload",
    "PolicyStatusPayload",
    "RiskProfilePayload",
    "format_timestamp",
    "parse_notification",
    "parse_policy_status",
    "parse_vulnerability_counts",
]
