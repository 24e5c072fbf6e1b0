"""Notification events from the intelligence service and their processed form.

Events arrive already deserialized from the notification-fetch adapter. The
classifiers turn them into ``ProcessedNotification`` records tied to concrete
repository locations; the caller persists those records as item properties.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from .enums import NotificationKind, PolicyApprovalStatus, PolicySeverity
    from .locations import ArtifactLocation


@dataclass(frozen=True, slots=True)
class ComponentVersionRef:
    """One component version referenced by a policy notification."""

    component_name: str
    component_version_name: str
    component_version_key: str | None = None
    policy_status_key: str | None = None

    @property
    def status_key(self) -> str:
        """Key under which fresh status lookups are deduplicated within a pass."""

        return (
            self.policy_status_key
            or self.component_version_key
            or f"{self.component_name}/{self.component_version_name}"
        )


@dataclass(frozen=True, slots=True)
class PolicyRuleInfo:
    name: str
    severity: PolicySeverity


@dataclass(frozen=True, slots=True)
class PolicyEventContent:
    project_name: str
    project_version_name: str
    components: tuple[ComponentVersionRef, ...] = ()
    policies: tuple[PolicyRuleInfo, ...] = ()


@dataclass(frozen=True, slots=True)
class VulnerabilityRef:
    vulnerability_id: str
    source: str | None = None


@dataclass(frozen=True, slots=True)
class AffectedProjectVersion:
    project_name: str
    project_version_name: str


@dataclass(frozen=True, slots=True)
class VulnerabilityEventContent:
    component_name: str
    component_version_name: str
    component_version_key: str | None = None
    affected_project_versions: tuple[AffectedProjectVersion, ...] = ()
    new_vulnerabilities: tuple[VulnerabilityRef, ...] = ()
    updated_vulnerabilities: tuple[VulnerabilityRef, ...] = ()
    deleted_vulnerabilities: tuple[VulnerabilityRef, ...] = ()

    @property
    def component(self) -> ComponentVersionRef:
        return ComponentVersionRef(
            component_name=self.component_name,
            component_version_name=self.component_version_name,
            component_version_key=self.component_version_key,
        )


type NotificationContent = PolicyEventContent | VulnerabilityEventContent | Mapping[str, object]


@dataclass(frozen=True, slots=True)
class RawNotificationEvent:
    """One undifferentiated event as emitted by the intelligence service.

    ``kind`` stays a plain string so kinds unknown to this release reach the
    dispatcher instead of failing inside the adapter.
    """

    kind: str
    project_name: str | None
    project_version_name: str | None
    content: NotificationContent
    notification_id: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class PolicyStatusReport:
    status: PolicyApprovalStatus
    severities: tuple[PolicySeverity, ...] = ()

    @classmethod
    def from_severities(
        cls,
        status: PolicyApprovalStatus,
        severities: Iterable[PolicySeverity],
    ) -> PolicyStatusReport:
        return cls(status=status, severities=tuple(dict.fromkeys(severities)))


@dataclass(frozen=True, slots=True)
class VulnerabilityCounts:
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0

    @property
    def total(self) -> int:
        return self.critical + self.high + self.medium + self.low


def _require_locations(locations: frozenset[ArtifactLocation]) -> None:
    if not locations:
        raise ValueError("Processed notifications must reference at least one location")


@dataclass(frozen=True, slots=True)
class ProcessedPolicyNotification:
    """Policy outcome for one component version.

    Records for a cleared rule carry no ``report``: the event says nothing about
    the component's other rules, so no approval status is recorded for it.
    """

    kind: NotificationKind
    component_name: str
    component_version_name: str
    report: PolicyStatusReport | None
    locations: frozenset[ArtifactLocation]
    cleared_rules: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _require_locations(self.locations)


@dataclass(frozen=True, slots=True)
class ProcessedVulnerabilityNotification:
    component_name: str
    component_version_name: str
    counts: VulnerabilityCounts
    locations: frozenset[ArtifactLocation]
    vulnerability_ids: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _require_locations(self.locations)


type ProcessedNotification = ProcessedPolicyNotification | ProcessedVulnerabilityNotification


@dataclass(frozen=True, slots=True)
class NotificationFailure:
    """A component whose fresh status could not be fetched during a pass."""

    kind: NotificationKind
    project_name: str | None
    project_version_name: str | None
    component_name: str
    component_version_name: str
    reason: str


@dataclass(slots=True)
class ReconciliationResult:
    """Aggregate output of one dispatcher pass."""

    notifications: list[ProcessedNotification] = field(
        default_factory=list["ProcessedNotification"]
    )
    failures: list[NotificationFailure] = field(default_factory=list["NotificationFailure"])
    timed_out: bool = False
