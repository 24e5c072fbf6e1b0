"""Translate intelligence service payloads into domain notification events."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from binsight.domain.model import (
    AffectedProjectVersion,
    ComponentVersionRef,
    NotificationKind,
    PolicyApprovalStatus,
    PolicyEventContent,
    PolicyRuleInfo,
    PolicySeverity,
    RawNotificationEvent,
    VulnerabilityCounts,
    VulnerabilityEventContent,
    VulnerabilityRef,
)

from .schema import PolicyContentPayload, VulnerabilityContentPayload

if TYPE_CHECKING:
    from binsight.domain.model import NotificationContent

    from .schema import (
        NotificationPayload,
        PolicyStatusPayload,
        RiskProfilePayload,
        VulnerabilitySourcePayload,
    )

log = getLogger(__name__)

_POLICY_KINDS = frozenset(
    {
        NotificationKind.POLICY_VIOLATION,
        NotificationKind.POLICY_OVERRIDE,
        NotificationKind.RULE_VIOLATION_CLEARED,
    }
)


class IntelligenceTranslationError(ValueError):
    """Raised when a payload value has no domain counterpart."""


def parse_notification(payload: NotificationPayload) -> RawNotificationEvent:
    """Build a ``RawNotificationEvent``; unknown kinds keep their raw content."""

    content: NotificationContent
    project_name: str | None = None
    project_version_name: str | None = None

    kind = _known_kind(payload.type)
    if kind in _POLICY_KINDS:
        policy = _parse_policy_content(PolicyContentPayload.model_validate(payload.content))
        content = policy
        project_name = policy.project_name
        project_version_name = policy.project_version_name
    elif kind is NotificationKind.VULNERABILITY:
        content = _parse_vulnerability_content(
            VulnerabilityContentPayload.model_validate(payload.content)
        )
    else:
        log.debug("Passing through notification of unrecognised type %r", payload.type)
        content = dict(payload.content)

    return RawNotificationEvent(
        kind=payload.type,
        project_name=project_name,
        project_version_name=project_version_name,
        content=content,
        notification_id=payload.notification_id,
        created_at=payload.created_at,
    )


def _known_kind(value: str) -> NotificationKind | None:
    try:
        return NotificationKind(value)
    except ValueError:
        return None


def parse_policy_status(payload: PolicyStatusPayload) -> PolicyApprovalStatus:
    try:
        return PolicyApprovalStatus(payload.approval_status.upper())
    except ValueError:
        raise IntelligenceTranslationError(
            f"Unknown approval status {payload.approval_status!r}"
        ) from None


def parse_vulnerability_counts(payload: RiskProfilePayload) -> VulnerabilityCounts:
    counts = payload.vulnerabilities
    return VulnerabilityCounts(
        critical=counts.critical,
        high=counts.high,
        medium=counts.medium,
        low=counts.low,
    )


def _parse_policy_content(payload: PolicyContentPayload) -> PolicyEventContent:
    return PolicyEventContent(
        project_name=payload.project_name,
        project_version_name=payload.project_version_name,
        components=tuple(
            ComponentVersionRef(
                component_name=status.component_name,
                component_version_name=status.component_version_name,
                component_version_key=status.component_version,
                policy_status_key=status.policy_status,
            )
            for status in payload.component_version_statuses
        ),
        policies=tuple(
            PolicyRuleInfo(name=info.policy_name, severity=_parse_severity(info.severity))
            for info in payload.policy_infos
        ),
    )


def _parse_severity(value: str | None) -> PolicySeverity:
    if not value:
        return PolicySeverity.UNSPECIFIED
    try:
        return PolicySeverity(value.upper())
    except ValueError:
        log.debug("Unknown policy severity %r, treating as unspecified", value)
        return PolicySeverity.UNSPECIFIED


def _parse_vulnerability_content(payload: VulnerabilityContentPayload) -> VulnerabilityEventContent:
    return VulnerabilityEventContent(
        component_name=payload.component_name,
        component_version_name=payload.version_name,
        component_version_key=payload.component_version,
        affected_project_versions=tuple(
            AffectedProjectVersion(
                project_name=affected.project_name,
                project_version_name=affected.project_version_name,
            )
            for affected in payload.affected_project_versions
        ),
        new_vulnerabilities=_vulnerability_refs(payload.new_vulnerability_ids),
        updated_vulnerabilities=_vulnerability_refs(payload.updated_vulnerability_ids),
        deleted_vulnerabilities=_vulnerability_refs(payload.deleted_vulnerability_ids),
    )


def _vulnerability_refs(
    payloads: list[VulnerabilitySourcePayload],
) -> tuple[VulnerabilityRef, ...]:
    return tuple(
        VulnerabilityRef(vulnerability_id=item.vulnerability_id, source=item.source)
        for item in payloads
    )
