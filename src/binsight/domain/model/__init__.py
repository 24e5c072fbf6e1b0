"""Domain model for repository artifacts, identities and notifications."""

from __future__ import annotations

from .enums import (
    ArtifactProperty,
    Ecosystem,
    ExtractionFailureKind,
    InspectionStatus,
    NotificationKind,
    PolicyApprovalStatus,
    PolicySeverity,
    forge_for,
)
from .identity import CanonicalIdentity, ExtractionFailure, ExtractionResult
from .locations import ArtifactLocation, ArtifactMetadata, LayoutInfo
from .notifications import (
    AffectedProjectVersion,
    ComponentVersionRef,
    NotificationContent,
    NotificationFailure,
    PolicyEventContent,
    PolicyRuleInfo,
    PolicyStatusReport,
    ProcessedNotification,
    ProcessedPolicyNotification,
    ProcessedVulnerabilityNotification,
    RawNotificationEvent,
    ReconciliationResult,
    VulnerabilityCounts,
    VulnerabilityEventContent,
    VulnerabilityRef,
)

__all__ = [
    "AffectedProjectVersion",
    "ArtifactLocation",
    "ArtifactMetadata",
    "ArtifactProperty",
    "CanonicalIdentity",
    "ComponentVersionRef",
    "Ecosystem",
    "ExtractionFailure",
    "ExtractionFailureKind",
    "ExtractionResult",
    "InspectionStatus",
    "LayoutInfo",
    "NotificationContent",
    "NotificationFailure",
    "NotificationKind",
    "PolicyApprovalStatus",
    "PolicyEventContent",
    "PolicyRuleInfo",
    "PolicySeverity",
    "PolicyStatusReport",
    "ProcessedNotification",
    "ProcessedPolicyNotification",
    "ProcessedVulnerabilityNotification",
    "RawNotificationEvent",
    "ReconciliationResult",
    "VulnerabilityCounts",
    "VulnerabilityEventContent",
    "VulnerabilityRef",
    "forge_for",
]
