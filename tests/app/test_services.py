from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from binsight.app import (
    extraction_settings,
    identify_artifacts,
    reconciliation_settings,
    run_notification_pass,
    update_metadata,
)
from binsight.config import ConfigurationError, InspectionConfig
from binsight.domain.model import (
    ArtifactLocation,
    ArtifactProperty,
    Ecosystem,
    LayoutInfo,
    NotificationKind,
    PolicyApprovalStatus,
    PolicySeverity,
    PolicyStatusReport,
    ProcessedPolicyNotification,
    ProcessedVulnerabilityNotification,
    ReconciliationResult,
    VulnerabilityCounts,
)
from binsight.domain.time_windows import TimeWindow
from tests.helpers.notifications import (
    FakeLocationIndex,
    FakeStatusService,
    component,
    policy_event,
    vulnerability_event,
)

if TYPE_CHECKING:
    from binsight.adapters.sqlalchemy import SqlAlchemyPropertyStore
    from binsight.domain.model import RawNotificationEvent

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)

CONFIG = InspectionConfig(
    repositories={
        "npm-local": "npm",
        "libs-release": "maven",
        "pypi-local": "pypi",
    },
    enabled_ecosystems=("npm", "maven"),
    max_workers=1,
)

LEFT_PAD = ArtifactLocation("npm-local", "left-pad/-/left-pad-1.3.0.tgz")
BROKEN = ArtifactLocation("npm-local", "broken/-/broken.tgz")
CORE_JAR = ArtifactLocation("libs-release", "org/acme/core/1.0/core-1.0.jar")
WHEEL = ArtifactLocation("pypi-local", "six/six-1.16.0-py2.py3-none-any.whl")
STRAY = ArtifactLocation("generic-local", "notes.txt")


def _properties(store: SqlAlchemyPropertyStore, location: ArtifactLocation) -> dict[str, str]:
    metadata = store.read(location)
    return {} if metadata is None else dict(metadata.properties)


def test_extraction_settings_maps_tags_to_ecosystems() -> None:
    settings = extraction_settings(CONFIG)

    assert settings.repositories["libs-release"] is Ecosystem.MAVEN
    assert settings.enabled_ecosystems == frozenset({Ecosystem.NPM, Ecosystem.MAVEN})


def test_extraction_settings_enables_everything_by_default() -> None:
    settings = extraction_settings(InspectionConfig(repositories={"npm-local": "npm"}))

    assert settings.enabled_ecosystems == frozenset(Ecosystem)


@pytest.mark.parametrize(
    "config",
    [
        InspectionConfig(repositories={"npm-local": "leftpad"}),
        InspectionConfig(enabled_ecosystems=("npm", "cobol")),
    ],
)
def test_extraction_settings_rejects_unknown_tags(config: InspectionConfig) -> None:
    with pytest.raises(ConfigurationError):
        extraction_settings(config)


def test_reconciliation_settings_follow_config() -> None:
    settings = reconciliation_settings(InspectionConfig(fetch_retry_count=0, max_workers=8))

    assert settings.fetch_retry_count == 0
    assert settings.max_workers == 8


def test_identify_artifacts_records_outcomes(property_store: SqlAlchemyPropertyStore) -> None:
    property_store.register_item(
        LEFT_PAD,
        properties={
            "npm.name": "left-pad",
            "npm.version": "1.3.0",
            ArtifactProperty.INSPECTION_STATUS_MESSAGE: "previous failure",
        },
    )
    property_store.register_item(
        CORE_JAR, layout=LayoutInfo(organization="org.acme", module="core", base_revision="1.0")
    )
    property_store.register_item(BROKEN)
    property_store.register_item(WHEEL, properties={"pypi.name": "six", "pypi.version": "1.16.0"})

    result = identify_artifacts(
        [LEFT_PAD, CORE_JAR, BROKEN, WHEEL, STRAY],
        config=CONFIG,
        metadata_reader=property_store,
        manifest_locator=property_store,
        writer=property_store,
        clock=lambda: NOW,
    )

    assert {location: identity.external_id for location, identity in result.identities.items()} == {
        LEFT_PAD: "npmjs:left-pad/1.3.0",
        CORE_JAR: "maven:org.acme:core:1.0",
    }
    assert _properties(property_store, LEFT_PAD) == {
        "npm.name": "left-pad",
        "npm.version": "1.3.0",
        "binsight.externalId": "npmjs:left-pad/1.3.0",
        "binsight.inspectionStatus": "SUCCESS",
        "binsight.inspectionTime": NOW.isoformat(),
    }
    broken = _properties(property_store, BROKEN)
    assert broken["binsight.inspectionStatus"] == "FAILURE"
    assert "npm.name" in broken["binsight.inspectionStatusMessage"]
    # disabled ecosystems and unconfigured repositories are left alone
    assert "binsight.inspectionStatus" not in _properties(property_store, WHEEL)
    assert property_store.read(STRAY) is None
    assert len(result.failures) == 3


def _policy_record(
    location: ArtifactLocation, severities: tuple[PolicySeverity, ...]
) -> ProcessedPolicyNotification:
    return ProcessedPolicyNotification(
        kind=NotificationKind.POLICY_VIOLATION,
        component_name="log4j-core",
        component_version_name="2.14.1",
        report=PolicyStatusReport(status=PolicyApprovalStatus.IN_VIOLATION, severities=severities),
        locations=frozenset({location}),
    )


def test_update_metadata_writes_policy_and_vulnerability_properties(
    property_store: SqlAlchemyPropertyStore,
) -> None:
    result = ReconciliationResult(
        notifications=[
            _policy_record(CORE_JAR, (PolicySeverity.BLOCKER, PolicySeverity.MAJOR)),
            ProcessedVulnerabilityNotification(
                component_name="left-pad",
                component_version_name="1.3.0",
                counts=VulnerabilityCounts(critical=1, high=2, medium=3, low=4),
                locations=frozenset({LEFT_PAD, CORE_JAR}),
            ),
        ]
    )

    touched = update_metadata(result, property_store, now=NOW)

    assert touched == 2
    assert _properties(property_store, CORE_JAR) == {
        "binsight.policyStatus": "IN_VIOLATION",
        "binsight.policySeverityTypes": "BLOCKER,MAJOR",
        "binsight.criticalVulnerabilities": "1",
        "binsight.highVulnerabilities": "2",
        "binsight.mediumVulnerabilities": "3",
        "binsight.lowVulnerabilities": "4",
        "binsight.lastUpdate": NOW.isoformat(),
    }
    assert _properties(property_store, LEFT_PAD)["binsight.criticalVulnerabilities"] == "1"


def test_update_metadata_clears_stale_severities(property_store: SqlAlchemyPropertyStore) -> None:
    update_metadata(
        ReconciliationResult(notifications=[_policy_record(CORE_JAR, (PolicySeverity.MINOR,))]),
        property_store,
        now=NOW,
    )
    later = NOW + timedelta(hours=1)

    update_metadata(
        ReconciliationResult(notifications=[_policy_record(CORE_JAR, ())]),
        property_store,
        now=later,
    )

    properties = _properties(property_store, CORE_JAR)
    assert "binsight.policySeverityTypes" not in properties
    assert properties["binsight.lastUpdate"] == later.isoformat()


class RecordingSource:
    def __init__(self, events: list[RawNotificationEvent]) -> None:
        self.events = events
        self.windows: list[tuple[datetime | None, datetime | None]] = []

    def __call__(
        self, *, start: datetime | None, end: datetime | None
    ) -> list[RawNotificationEvent]:
        self.windows.append((start, end))
        return self.events


def test_run_notification_pass_reconciles_window(property_store: SqlAlchemyPropertyStore) -> None:
    source = RecordingSource(
        [
            policy_event(
                NotificationKind.POLICY_VIOLATION,
                components=[component("log4j-core", "2.14.1")],
                policies=[("no-critical", PolicySeverity.CRITICAL)],
            ),
            vulnerability_event("left-pad", version="1.3.0", affected=[("webapp", "1.0")]),
            vulnerability_event("orphan", affected=[("unknown", "0.1")]),
        ]
    )
    service = FakeStatusService(
        counts={"left-pad": VulnerabilityCounts(high=2)},
        statuses={"log4j-core": PolicyApprovalStatus.IN_VIOLATION},
    )

    summary = run_notification_pass(
        TimeWindow(lookback=timedelta(hours=6)),
        source=source,
        status_service=service,
        index=FakeLocationIndex({("webapp", "1.0"): [CORE_JAR]}),
        writer=property_store,
        config=CONFIG,
        clock=lambda: NOW,
    )

    assert source.windows == [(NOW - timedelta(hours=6), NOW)]
    assert (summary.start, summary.end) == (NOW - timedelta(hours=6), NOW)
    assert summary.fetched == 3
    assert summary.records == 2
    assert summary.failures == 0
    assert summary.updated_locations == 1
    assert not summary.timed_out
    properties = _properties(property_store, CORE_JAR)
    assert properties["binsight.policyStatus"] == "IN_VIOLATION"
    assert properties["binsight.policySeverityTypes"] == "CRITICAL"
    assert properties["binsight.highVulnerabilities"] == "2"


def test_run_notification_pass_reports_fetch_failures(
    property_store: SqlAlchemyPropertyStore,
) -> None:
    source = RecordingSource(
        [
            policy_event(
                NotificationKind.POLICY_OVERRIDE,
                components=[component("log4j-core", "2.14.1"), component("zlib", "1.3")],
            )
        ]
    )
    service = FakeStatusService(failures={"zlib": 10})

    summary = run_notification_pass(
        TimeWindow(start=NOW - timedelta(hours=1), end=NOW),
        source=source,
        status_service=service,
        index=FakeLocationIndex({("webapp", "1.0"): [CORE_JAR]}),
        writer=property_store,
        config=InspectionConfig(fetch_retry_count=1, max_workers=1),
        clock=lambda: NOW,
    )

    assert summary.records == 1
    assert summary.failures == 1
    assert service.approval_calls["zlib"] == 2
    assert _properties(property_store, CORE_JAR)["binsight.policyStatus"] == "IN_VIOLATION"


def test_cleared_rule_keeps_status_of_remaining_violation(
    property_store: SqlAlchemyPropertyStore,
) -> None:
    log4j = component("log4j-core", "2.14.1")
    source = RecordingSource(
        [
            policy_event(
                NotificationKind.POLICY_VIOLATION,
                components=[log4j],
                policies=[("no-critical", PolicySeverity.CRITICAL)],
            ),
            policy_event(
                NotificationKind.RULE_VIOLATION_CLEARED,
                components=[log4j],
                policies=[("license", PolicySeverity.MINOR)],
            ),
        ]
    )
    service = FakeStatusService(statuses={"log4j-core": PolicyApprovalStatus.IN_VIOLATION})

    summary = run_notification_pass(
        TimeWindow(start=NOW - timedelta(hours=1), end=NOW),
        source=source,
        status_service=service,
        index=FakeLocationIndex({("webapp", "1.0"): [CORE_JAR]}),
        writer=property_store,
        config=CONFIG,
        clock=lambda: NOW,
    )

    assert summary.records == 2
    properties = _properties(property_store, CORE_JAR)
    assert properties["binsight.policyStatus"] == "IN_VIOLATION"
    assert properties["binsight.policySeverityTypes"] == "CRITICAL"
    assert properties["binsight.clearedPolicyRules"] == "license"
    assert service.approval_calls == {"log4j-core": 1}
