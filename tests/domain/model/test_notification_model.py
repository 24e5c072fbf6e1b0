from __future__ import annotations

import pytest

from binsight.domain.model import (
    ArtifactLocation,
    ComponentVersionRef,
    NotificationKind,
    PolicyApprovalStatus,
    PolicySeverity,
    PolicyStatusReport,
    ProcessedPolicyNotification,
    ProcessedVulnerabilityNotification,
    VulnerabilityCounts,
)


def test_status_key_prefers_policy_status_link() -> None:
    full = ComponentVersionRef("log4j", "2.14.1", "cv-key", "status-key")
    version_only = ComponentVersionRef("log4j", "2.14.1", "cv-key")
    bare = ComponentVersionRef("log4j", "2.14.1")

    assert full.status_key == "status-key"
    assert version_only.status_key == "cv-key"
    assert bare.status_key == "log4j/2.14.1"


def test_report_deduplicates_severities_in_order() -> None:
    report = PolicyStatusReport.from_severities(
        PolicyApprovalStatus.IN_VIOLATION,
        [PolicySeverity.MAJOR, PolicySeverity.BLOCKER, PolicySeverity.MAJOR],
    )

    assert report.severities == (PolicySeverity.MAJOR, PolicySeverity.BLOCKER)


def test_vulnerability_counts_total() -> None:
    assert VulnerabilityCounts(critical=1, high=2, medium=3, low=4).total == 10


def test_processed_records_require_locations() -> None:
    report = PolicyStatusReport(PolicyApprovalStatus.NOT_IN_VIOLATION)

    with pytest.raises(ValueError, match="at least one location"):
        ProcessedPolicyNotification(
            kind=NotificationKind.POLICY_VIOLATION,
            component_name="log4j",
            component_version_name="2.14.1",
            report=report,
            locations=frozenset(),
        )
    with pytest.raises(ValueError, match="at least one location"):
        ProcessedVulnerabilityNotification(
            component_name="log4j",
            component_version_name="2.14.1",
            counts=VulnerabilityCounts(),
            locations=frozenset(),
        )


def test_policy_kind_wire_value() -> None:
    assert NotificationKind("RULE_VIOLATION") is NotificationKind.POLICY_VIOLATION
