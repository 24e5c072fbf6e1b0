"""Turn raw notification events into processed, location-bound records.

One classifier per notification kind. Classifiers share no state; everything a
pass needs (correlator, status lookup) travels in the ``PassContext``.

Status fetch failures are per component: they become ``NotificationFailure``
records next to the records already produced for the other components of the
same event.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar, Protocol

from binsight.domain.model import (
    NotificationFailure,
    NotificationKind,
    PolicyEventContent,
    PolicyStatusReport,
    ProcessedPolicyNotification,
    ProcessedVulnerabilityNotification,
    VulnerabilityEventContent,
)
from binsight.domain.ports import StatusFetchError

if TYPE_CHECKING:
    from binsight.domain.model import (
        ArtifactLocation,
        ComponentVersionRef,
        PolicySeverity,
        ProcessedNotification,
        RawNotificationEvent,
    )

    from .correlator import RepositoryCorrelator
    from .status import StatusLookup

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PassContext:
    """Collaborators shared by every classifier during one pass."""

    correlator: RepositoryCorrelator
    status: StatusLookup


@dataclass(slots=True)
class ClassifierOutcome:
    notifications: list[ProcessedNotification] = field(
        default_factory=list["ProcessedNotification"]
    )
    failures: list[NotificationFailure] = field(default_factory=list["NotificationFailure"])


class NotificationClassifier(Protocol):
    """Consume one event of ``kind`` and emit zero or more records."""

    kind: ClassVar[NotificationKind]

    def __call__(
        self, event: RawNotificationEvent, *, context: PassContext
    ) -> ClassifierOutcome: ...


class NotificationPayloadError(TypeError):
    """Raised when an event's content does not match its kind."""


def _policy_content(event: RawNotificationEvent) -> PolicyEventContent:
    content = event.content
    if not isinstance(content, PolicyEventContent):
        raise NotificationPayloadError(
            f"{event.kind} notification {event.notification_id} carries "
            f"{type(content).__name__}, expected PolicyEventContent"
        )
    return content


def _vulnerability_content(event: RawNotificationEvent) -> VulnerabilityEventContent:
    content = event.content
    if not isinstance(content, VulnerabilityEventContent):
        raise NotificationPayloadError(
            f"{event.kind} notification {event.notification_id} carries "
            f"{type(content).__name__}, expected VulnerabilityEventContent"
        )
    return content


def _fetch_failure(
    kind: NotificationKind,
    component: ComponentVersionRef,
    exc: StatusFetchError,
    *,
    project_name: str | None,
    project_version_name: str | None,
) -> NotificationFailure:
    log.warning(
        "Could not fetch status for %s %s: %s",
        component.component_name,
        component.component_version_name,
        exc,
    )
    return NotificationFailure(
        kind=kind,
        project_name=project_name,
        project_version_name=project_version_name,
        component_name=component.component_name,
        component_version_name=component.component_version_name,
        reason=str(exc),
    )


class _FreshStatusPolicyClassifier(ABC):
    """Shared flow for policy events whose approval status must be re-fetched."""

    kind: ClassVar[NotificationKind]

    def __call__(self, event: RawNotificationEvent, *, context: PassContext) -> ClassifierOutcome:
        content = _policy_content(event)
        outcome = ClassifierOutcome()
        locations = context.correlator.find_locations(
            content.project_name, content.project_version_name
        )
        if not locations:
            return outcome

        severities = self._severities(content)
        for component in content.components:
            try:
                status = context.status.approval_status(component)
            except StatusFetchError as exc:
                outcome.failures.append(
                    _fetch_failure(
                        self.kind,
                        component,
                        exc,
                        project_name=content.project_name,
                        project_version_name=content.project_version_name,
                    )
                )
                continue
            outcome.notifications.append(
                ProcessedPolicyNotification(
                    kind=self.kind,
                    component_name=component.component_name,
                    component_version_name=component.component_version_name,
                    report=PolicyStatusReport.from_severities(status, severities),
                    locations=locations,
                )
            )
        return outcome

    @abstractmethod
    def _severities(self, content: PolicyEventContent) -> tuple[PolicySeverity, ...]:
        """Severities carried into the status report."""
        ...


class PolicyViolationClassifier(_FreshStatusPolicyClassifier):
    kind = NotificationKind.POLICY_VIOLATION

    def _severities(self, content: PolicyEventContent) -> tuple[PolicySeverity, ...]:
        return tuple(policy.severity for policy in content.policies)


class PolicyOverrideClassifier(_FreshStatusPolicyClassifier):
    """An override changes the disposition of an earlier violation.

    The overridden rules no longer apply, so their severities are not carried.
    """

    kind = NotificationKind.POLICY_OVERRIDE

    def _severities(self, content: PolicyEventContent) -> tuple[PolicySeverity, ...]:
        del content
        return ()


class RuleClearedClassifier:
    """A previously violated rule no longer applies.

    Nothing is fetched and no approval status is recorded: other rules may still
    be violated by the same component.
    """

    kind = NotificationKind.RULE_VIOLATION_CLEARED

    def __call__(self, event: RawNotificationEvent, *, context: PassContext) -> ClassifierOutcome:
        content = _policy_content(event)
        outcome = ClassifierOutcome()
        locations = context.correlator.find_locations(
            content.project_name, content.project_version_name
        )
        if not locations:
            return outcome

        cleared_rules = tuple(dict.fromkeys(policy.name for policy in content.policies))
        for component in content.components:
            outcome.notifications.append(
                ProcessedPolicyNotification(
                    kind=self.kind,
                    component_name=component.component_name,
                    component_version_name=component.component_version_name,
                    report=None,
                    locations=locations,
                    cleared_rules=cleared_rules,
                )
            )
        return outcome


class VulnerabilityClassifier:
    """Vulnerability changes on one component version, across affected projects."""

    kind = NotificationKind.VULNERABILITY

    def __call__(self, event: RawNotificationEvent, *, context: PassContext) -> ClassifierOutcome:
        content = _vulnerability_content(event)
        outcome = ClassifierOutcome()

        locations: set[ArtifactLocation] = set()
        for affected in content.affected_project_versions:
            locations.update(
                context.correlator.find_locations(
                    affected.project_name, affected.project_version_name
                )
            )
        if not locations:
            return outcome

        component = content.component
        try:
            counts = context.status.vulnerability_counts(component)
        except StatusFetchError as exc:
            outcome.failures.append(
                _fetch_failure(
                    self.kind,
                    component,
                    exc,
                    project_name=event.project_name,
                    project_version_name=event.project_version_name,
                )
            )
            return outcome

        vulnerability_ids = tuple(
            dict.fromkeys(
                ref.vulnerability_id
                for ref in (*content.new_vulnerabilities, *content.updated_vulnerabilities)
            )
        )
        outcome.notifications.append(
            ProcessedVulnerabilityNotification(
                component_name=content.component_name,
                component_version_name=content.component_version_name,
                counts=counts,
                locations=frozenset(locations),
                vulnerability_ids=vulnerability_ids,
            )
        )
        return outcome


DEFAULT_CLASSIFIERS: tuple[NotificationClassifier, ...] = (
    PolicyViolationClassifier(),
    PolicyOverrideClassifier(),
    RuleClearedClassifier(),
    VulnerabilityClassifier(),
)
