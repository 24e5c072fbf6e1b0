"""Fresh status lookups, deduplicated per component version within one pass.

Each lookup key is fetched at most once per pass. Concurrent callers for the
same key wait on the first caller's future instead of issuing their own call.
The lock only guards the future map; service calls always run outside it.
"""

from __future__ import annotations

from concurrent.futures import Future
from logging import getLogger
from threading import Lock
from typing import TYPE_CHECKING

from binsight.domain.ports import StatusFetchError

if TYPE_CHECKING:
    from collections.abc import Callable

    from binsight.domain.model import (
        ComponentVersionRef,
        PolicyApprovalStatus,
        VulnerabilityCounts,
    )
    from binsight.domain.ports import ComponentStatusService

log = getLogger(__name__)


class _SingleFlight[TValue]:
    def __init__(self) -> None:
        self._lock = Lock()
        self._futures: dict[str, Future[TValue]] = {}

    def get(self, key: str, fetch: Callable[[], TValue]) -> TValue:
        with self._lock:
            future = self._futures.get(key)
            owner = future is None
            if future is None:
                future = Future()
                self._futures[key] = future

        if owner:
            try:
                future.set_result(fetch())
            except BaseException as exc:
                # resolve before leaving so waiters never block on an orphaned future
                future.set_exception(exc)
                raise
        return future.result()

    def __len__(self) -> int:
        with self._lock:
            return len(self._futures)


class StatusLookup:
    """Per-pass cache in front of a ``ComponentStatusService``.

    ``retry_count`` bounds the extra attempts made inside a single flight after
    a ``StatusFetchError``; the final failure is cached and raised to every
    caller of that key for the rest of the pass.
    """

    def __init__(self, service: ComponentStatusService, *, retry_count: int = 0) -> None:
        if retry_count < 0:
            raise ValueError("retry_count must be non-negative")
        self._service = service
        self._retry_count = retry_count
        self._approval: _SingleFlight[PolicyApprovalStatus] = _SingleFlight()
        self._vulnerabilities: _SingleFlight[VulnerabilityCounts] = _SingleFlight()

    def approval_status(self, component: ComponentVersionRef) -> PolicyApprovalStatus:
        return self._approval.get(
            component.status_key,
            lambda: self._with_retries(self._service.fetch_approval_status, component),
        )

    def vulnerability_counts(self, component: ComponentVersionRef) -> VulnerabilityCounts:
        key = component.component_version_key or (
            f"{component.component_name}/{component.component_version_name}"
        )
        return self._vulnerabilities.get(
            key,
            lambda: self._with_retries(self._service.fetch_vulnerability_counts, component),
        )

    @property
    def fetched_keys(self) -> int:
        return len(self._approval) + len(self._vulnerabilities)

    def _with_retries[TValue](
        self,
        fetch: Callable[[ComponentVersionRef], TValue],
        component: ComponentVersionRef,
    ) -> TValue:
        attempt = 0
        while True:
            try:
                return fetch(component)
            except StatusFetchError as exc:
                if attempt >= self._retry_count:
                    raise
                attempt += 1
                log.warning(
                    "Retrying status fetch for %s %s (attempt %s of %s): %s",
                    component.component_name,
                    component.component_version_name,
                    attempt,
                    self._retry_count,
                    exc,
                )
