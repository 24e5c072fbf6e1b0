"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from binsight.adapters.intelligence import IntelligenceClient
from binsight.adapters.sqlalchemy import SqlAlchemyPropertyStore, is_started, startup
from binsight.config import (
    ConfigurationError,
    get_inspection_config,
    get_intelligence_config,
)
from binsight.domain.identity import ExtractionSettings, IdentityResolver
from binsight.domain.model import (
    ArtifactProperty,
    Ecosystem,
    ExtractionFailureKind,
    InspectionStatus,
    ProcessedPolicyNotification,
)
from binsight.domain.notifications import (
    ReconciliationSettings,
    RepositoryCorrelator,
    build_dispatcher,
)
from binsight.domain.time_windows import TimeWindow, utcnow

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from binsight.config import InspectionConfig
    from binsight.domain.identity import IdentificationResult
    from binsight.domain.model import ArtifactLocation, ReconciliationResult
    from binsight.domain.ports import (
        ArtifactMetadataReader,
        ComponentStatusService,
        LocationIndex,
        ManifestLocator,
        NotificationSource,
        PropertyWriter,
    )
    from binsight.domain.time_windows import Clock


log = getLogger(__name__)

# Items outside the configured repositories are left untouched.
_UNINSPECTED_FAILURES = frozenset(
    {ExtractionFailureKind.UNKNOWN_REPOSITORY, ExtractionFailureKind.ECOSYSTEM_DISABLED}
)


@dataclass(frozen=True, slots=True)
class PassSummary:
    start: datetime
    end: datetime
    fetched: int
    records: int
    failures: int
    updated_locations: int
    timed_out: bool


def extraction_settings(config: InspectionConfig) -> ExtractionSettings:
    """Translate configured ecosystem tags into resolver settings."""

    repositories = {
        repo_key: _parse_ecosystem(tag, source=f"repository {repo_key}")
        for repo_key, tag in config.repositories.items()
    }
    enabled = (
        frozenset(
            _parse_ecosystem(tag, source="enabled ecosystems") for tag in config.enabled_ecosystems
        )
        if config.enabled_ecosystems
        else frozenset(Ecosystem)
    )
    return ExtractionSettings(
        repositories=repositories,
        enabled_ecosystems=enabled,
        conda_extensions=config.conda_extensions,
    )


def reconciliation_settings(config: InspectionConfig) -> ReconciliationSettings:
    return ReconciliationSettings(
        fetch_retry_count=config.fetch_retry_count,
        max_workers=config.max_workers,
    )


def _parse_ecosystem(tag: str, *, source: str) -> Ecosystem:
    try:
        return Ecosystem(tag)
    except ValueError:
        raise ConfigurationError(f"Unknown ecosystem {tag!r} in {source}") from None


def open_property_store() -> SqlAlchemyPropertyStore:
    if not is_started():
        startup()
    return SqlAlchemyPropertyStore()


def identify_artifacts(
    locations: Iterable[ArtifactLocation],
    *,
    config: InspectionConfig | None = None,
    metadata_reader: ArtifactMetadataReader | None = None,
    manifest_locator: ManifestLocator | None = None,
    writer: PropertyWriter | None = None,
    clock: Clock = utcnow,
) -> IdentificationResult:
    """Resolve identities for ``locations`` and record the outcome on each item."""

    effective_config = config or get_inspection_config()
    store = None
    if metadata_reader is None or manifest_locator is None or writer is None:
        store = open_property_store()
    resolver = IdentityResolver(
        extraction_settings(effective_config),
        metadata_reader=metadata_reader or store,
        manifest_locator=manifest_locator or store,
    )
    effective_writer = writer or store

    result = resolver.resolve_many(locations)
    inspected_at = clock().isoformat()

    for location, identity in result.identities.items():
        effective_writer.set_properties(
            location,
            {
                ArtifactProperty.EXTERNAL_ID: identity.external_id,
                ArtifactProperty.INSPECTION_STATUS: InspectionStatus.SUCCESS,
                ArtifactProperty.INSPECTION_TIME: inspected_at,
            },
        )
        effective_writer.delete_properties(location, (ArtifactProperty.INSPECTION_STATUS_MESSAGE,))

    for failure in result.failures:
        if failure.kind in _UNINSPECTED_FAILURES:
            continue
        effective_writer.set_properties(
            failure.location,
            {
                ArtifactProperty.INSPECTION_STATUS: InspectionStatus.FAILURE,
                ArtifactProperty.INSPECTION_STATUS_MESSAGE: failure.message,
                ArtifactProperty.INSPECTION_TIME: inspected_at,
            },
        )

    log.info(
        "Identified %s artifacts, %s failures",
        len(result.identities),
        len(result.failures),
    )
    return result


def update_metadata(
    result: ReconciliationResult,
    writer: PropertyWriter,
    *,
    now: datetime,
) -> int:
    """Persist processed notifications as item properties.

    Records are applied in order, so a later record for the same item wins.
    Returns the number of distinct items touched.
    """

    touched: set[ArtifactLocation] = set()
    last_update = now.isoformat()
    for record in result.notifications:
        stale: tuple[str, ...] = ()
        if isinstance(record, ProcessedPolicyNotification):
            report = record.report
            if report is None:
                # a cleared rule says nothing about the component's other rules
                values = {
                    ArtifactProperty.CLEARED_POLICY_RULES: ",".join(record.cleared_rules),
                    ArtifactProperty.LAST_UPDATE: last_update,
                }
            else:
                values = {
                    ArtifactProperty.POLICY_STATUS: report.status,
                    ArtifactProperty.LAST_UPDATE: last_update,
                }
                if report.severities:
                    values[ArtifactProperty.POLICY_SEVERITY_TYPES] = ",".join(report.severities)
                else:
                    stale = (ArtifactProperty.POLICY_SEVERITY_TYPES,)
        else:
            counts = record.counts
            values = {
                ArtifactProperty.CRITICAL_VULNERABILITIES: str(counts.critical),
                ArtifactProperty.HIGH_VULNERABILITIES: str(counts.high),
                ArtifactProperty.MEDIUM_VULNERABILITIES: str(counts.medium),
                ArtifactProperty.LOW_VULNERABILITIES: str(counts.low),
                ArtifactProperty.LAST_UPDATE: last_update,
            }

        for location in sorted(record.locations):
            writer.set_properties(location, values)
            if stale:
                writer.delete_properties(location, stale)
            touched.add(location)
    return len(touched)


def run_notification_pass(
    window: TimeWindow | None = None,
    *,
    source: NotificationSource | None = None,
    status_service: ComponentStatusService | None = None,
    index: LocationIndex | None = None,
    writer: PropertyWriter | None = None,
    config: InspectionConfig | None = None,
    deadline: float | None = None,
    clock: Clock = utcnow,
) -> PassSummary:
    """Fetch the notifications of ``window``, reconcile them and persist the outcome."""

    effective_config = config or get_inspection_config()
    start, end = (window or TimeWindow()).resolve(clock=clock)

    client = None
    if source is None or status_service is None:
        client = IntelligenceClient(config=get_intelligence_config())
    store = None
    if index is None or writer is None:
        store = open_property_store()

    log.info("Starting notification pass: start=%s, end=%s", start, end)
    try:
        events = (source or client)(start=start, end=end)
        dispatcher = build_dispatcher(
            correlator=RepositoryCorrelator(index or store),
            status_service=status_service or client,
            settings=reconciliation_settings(effective_config),
        )
        result = dispatcher.process(
            events,
            deadline=deadline if deadline is not None else effective_config.deadline_seconds,
        )
    finally:
        if client is not None:
            client.close()
    updated = update_metadata(result, writer or store, now=clock())

    summary = PassSummary(
        start=start,
        end=end,
        fetched=len(events),
        records=len(result.notifications),
        failures=len(result.failures),
        updated_locations=updated,
        timed_out=result.timed_out,
    )
    log.info(
        "Finished notification pass: fetched=%s, records=%s, failures=%s, updated=%s, "
        "timed_out=%s",
        summary.fetched,
        summary.records,
        summary.failures,
        summary.updated_locations,
        summary.timed_out,
    )
    return summary
