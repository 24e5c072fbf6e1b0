"""Single entry point for one reconciliation pass over a batch of notifications.

Routing is a table keyed by notification kind. Every kind in the batch is
checked before any classifier runs: an unknown kind means the classifier set is
out of date with the event producer, and the whole batch is rejected.

Classification of separate events is independent, so it may run on a bounded
thread pool. Results are always returned in batch order. When the pass deadline
expires, unfinished events are abandoned and the finished ones are returned.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from binsight.domain.model import NotificationKind, ReconciliationResult

from .classifiers import DEFAULT_CLASSIFIERS, ClassifierOutcome, PassContext
from .status import StatusLookup

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from concurrent.futures import Future

    from binsight.domain.model import RawNotificationEvent
    from binsight.domain.ports import ComponentStatusService

    from .classifiers import NotificationClassifier
    from .correlator import RepositoryCorrelator

log = getLogger(__name__)

type RoutedEvent = tuple[RawNotificationEvent, NotificationClassifier]


class UnknownEventKindError(RuntimeError):
    """Raised when a batch contains a notification kind no classifier handles."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"No classifier registered for notification kind {kind!r}")
        self.kind = kind


@dataclass(frozen=True, slots=True)
class ReconciliationSettings:
    fetch_retry_count: int = 3
    max_workers: int = 1

    def __post_init__(self) -> None:
        if self.fetch_retry_count < 0:
            raise ValueError("fetch_retry_count must be non-negative")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")


class NotificationDispatcher:
    """Fan a heterogeneous batch out to the classifier for each kind."""

    def __init__(
        self,
        *,
        correlator: RepositoryCorrelator,
        status_service: ComponentStatusService,
        classifiers: Iterable[NotificationClassifier] = DEFAULT_CLASSIFIERS,
        settings: ReconciliationSettings | None = None,
    ) -> None:
        self._correlator = correlator
        self._status_service = status_service
        self._settings = settings or ReconciliationSettings()
        self._routes: dict[NotificationKind, NotificationClassifier] = {
            classifier.kind: classifier for classifier in classifiers
        }

    @property
    def kinds(self) -> frozenset[NotificationKind]:
        return frozenset(self._routes)

    def process(
        self,
        batch: Sequence[RawNotificationEvent],
        *,
        deadline: float | None = None,
    ) -> ReconciliationResult:
        """Classify ``batch``; ``deadline`` is the time allowed for the pass, in seconds."""

        routed = [self._route(event) for event in batch]
        context = PassContext(
            correlator=self._correlator,
            status=StatusLookup(
                self._status_service, retry_count=self._settings.fetch_retry_count
            ),
        )

        # a deadline needs a worker thread so a running classification can be abandoned
        if deadline is None and (self._settings.max_workers == 1 or len(routed) <= 1):
            outcomes, timed_out = self._run_inline(routed, context), False
        else:
            outcomes, timed_out = self._run_pooled(routed, context, deadline)

        result = ReconciliationResult(timed_out=timed_out)
        for outcome in outcomes:
            if outcome is None:
                continue
            result.notifications.extend(outcome.notifications)
            result.failures.extend(outcome.failures)

        log.info(
            "Processed %s notifications: records=%s, failures=%s, timed_out=%s",
            len(batch),
            len(result.notifications),
            len(result.failures),
            timed_out,
        )
        return result

    def _route(self, event: RawNotificationEvent) -> RoutedEvent:
        try:
            kind = NotificationKind(event.kind)
        except ValueError:
            log.error(
                "Unknown notification kind %r (notification %s)", event.kind, event.notification_id
            )
            raise UnknownEventKindError(event.kind) from None
        classifier = self._routes.get(kind)
        if classifier is None:
            log.error("No classifier registered for %s", kind)
            raise UnknownEventKindError(event.kind)
        return event, classifier

    @staticmethod
    def _run_inline(
        routed: list[RoutedEvent], context: PassContext
    ) -> list[ClassifierOutcome | None]:
        return [classifier(event, context=context) for event, classifier in routed]

    def _run_pooled(
        self,
        routed: list[RoutedEvent],
        context: PassContext,
        deadline: float | None,
    ) -> tuple[list[ClassifierOutcome | None], bool]:
        executor = ThreadPoolExecutor(
            max_workers=self._settings.max_workers,
            thread_name_prefix="binsight-classify",
        )
        pending: set[Future[ClassifierOutcome]] = set()
        try:
            futures = [
                executor.submit(classifier, event, context=context)
                for event, classifier in routed
            ]
            _, pending = wait(futures, timeout=deadline)
            for future in pending:
                future.cancel()
            if pending:
                log.warning(
                    "Pass deadline reached; %s notifications abandoned", len(pending)
                )
            outcomes = [None if future in pending else future.result() for future in futures]
        finally:
            # abandoned tasks finish in the background, their output is discarded
            executor.shutdown(wait=not pending, cancel_futures=True)
        return outcomes, bool(pending)


def build_dispatcher(
    *,
    correlator: RepositoryCorrelator,
    status_service: ComponentStatusService,
    settings: ReconciliationSettings | None = None,
) -> NotificationDispatcher:
    """Dispatcher wired with the default classifier for every known kind."""

    return NotificationDispatcher(
        correlator=correlator,
        status_service=status_service,
        classifiers=DEFAULT_CLASSIFIERS,
        settings=settings,
    )
