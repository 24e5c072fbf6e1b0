"""HTTP client for the component intelligence service."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from logging import getLogger
from threading import Lock, Thread
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from binsight.adapters.http_resilience import ResilientClient
from binsight.domain.ports import StatusFetchError

from .schema import NotificationPage, PolicyStatusPayload, RiskProfilePayload
from .translator import (
    IntelligenceTranslationError,
    parse_notification,
    parse_policy_status,
    parse_vulnerability_counts,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine
    from types import TracebackType

    from binsight.config.http_resilience import ResilienceConfig
    from binsight.config.intelligence import IntelligenceConfig
    from binsight.domain.model import (
        ComponentVersionRef,
        PolicyApprovalStatus,
        RawNotificationEvent,
        VulnerabilityCounts,
    )

log = getLogger(__name__)

NOTIFICATIONS_PATH = "/api/notifications"
RISK_PROFILE_SUFFIX = "/risk-profile"


class IntelligenceAPIError(RuntimeError):
    """Raised when the intelligence service returns an unexpected response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def format_timestamp(value: datetime) -> str:
    """Render ``value`` in the service's millisecond UTC format."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


class IntelligenceClient:
    """Synchronous facade over the intelligence service endpoints.

    Status lookups are issued from classifier threads. All of them run on one
    event loop owned by the client, in a background thread, through a single
    ``ResilientClient``, so the configured rate limit and the connection pool
    are shared by every caller. ``close`` stops the loop; the client is also a
    context manager.
    """

    def __init__(
        self,
        *,
        config: IntelligenceConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._lock = Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: Thread | None = None
        # created and used on the loop thread only
        self._http: ResilientClient | None = None

    def __enter__(self) -> IntelligenceClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop = self._thread = None
        if loop is None or thread is None:
            return
        try:
            asyncio.run_coroutine_threadsafe(self._shutdown(), loop).result()
        finally:
            loop.call_soon_threadsafe(loop.stop)
            thread.join()
            loop.close()

    # ComponentStatusService

    def fetch_approval_status(self, component: ComponentVersionRef) -> PolicyApprovalStatus:
        href = component.policy_status_key
        if not href:
            raise StatusFetchError(
                f"No policy status link for {component.component_name} "
                f"{component.component_version_name}"
            )
        try:
            payload = self._run(self._get_json(href))
            return parse_policy_status(PolicyStatusPayload.model_validate(payload))
        except (
            httpx.HTTPError,
            IntelligenceAPIError,
            IntelligenceTranslationError,
            ValidationError,
        ) as exc:
            raise StatusFetchError(f"Policy status request to {href} failed: {exc}") from exc

    def fetch_vulnerability_counts(self, component: ComponentVersionRef) -> VulnerabilityCounts:
        href = component.component_version_key
        if not href:
            raise StatusFetchError(
                f"No component version link for {component.component_name} "
                f"{component.component_version_name}"
            )
        url = href.rstrip("/") + RISK_PROFILE_SUFFIX
        try:
            payload = self._run(self._get_json(url))
            return parse_vulnerability_counts(RiskProfilePayload.model_validate(payload))
        except (
            httpx.HTTPError,
            IntelligenceAPIError,
            IntelligenceTranslationError,
            ValidationError,
        ) as exc:
            raise StatusFetchError(f"Risk profile request to {url} failed: {exc}") from exc

    # NotificationSource

    def __call__(
        self,
        *,
        start: datetime | None,
        end: datetime | None,
    ) -> list[RawNotificationEvent]:
        return self._run(self._fetch_notifications_async(start=start, end=end))

    def _run[TResult](self, coro: Coroutine[object, object, TResult]) -> TResult:
        return asyncio.run_coroutine_threadsafe(coro, self._running_loop()).result()

    def _running_loop(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is None:
                loop = asyncio.new_event_loop()
                thread = Thread(
                    target=loop.run_forever,
                    name=f"binsight-{self._resilience.name}",
                    daemon=True,
                )
                thread.start()
                self._loop, self._thread = loop, thread
            return self._loop

    async def _shared_http(self) -> ResilientClient:
        if self._http is None:
            self._http = self._client_factory(self._resilience)
        return self._http

    async def _shutdown(self) -> None:
        # requests of abandoned callers are cancelled so no caller waits on a stopped loop
        others = [task for task in asyncio.all_tasks() if task is not asyncio.current_task()]
        for task in others:
            task.cancel()
        await asyncio.gather(*others, return_exceptions=True)
        http, self._http = self._http, None
        if http is not None:
            await http.aclose()

    async def _fetch_notifications_async(
        self,
        *,
        start: datetime | None,
        end: datetime | None,
    ) -> list[RawNotificationEvent]:
        page_size = self._config.page_size
        params: dict[str, str] = {"limit": str(page_size)}
        if start is not None:
            params["startDate"] = format_timestamp(start)
        if end is not None:
            params["endDate"] = format_timestamp(end)

        client = await self._shared_http()
        events: list[RawNotificationEvent] = []
        offset = 0
        while True:
            params["offset"] = str(offset)
            payload = await self._request_json(client, NOTIFICATIONS_PATH, params=params)
            page = NotificationPage.model_validate(payload)
            events.extend(parse_notification(item) for item in page.items)
            offset += len(page.items)
            if not page.items or offset >= page.total_count:
                break

        log.info("Fetched %s notifications between %s and %s", len(events), start, end)
        return events

    async def _get_json(self, url: str) -> dict[str, object]:
        return await self._request_json(await self._shared_http(), url)

    async def _request_json(
        self,
        client: ResilientClient,
        url: str,
        *,
        params: dict[str, str] | None = None,
    ) -> dict[str, object]:
        response = await client.get(url, params=params)
        if response.status_code >= 400:
            log.error("Intelligence service returned %s for %s", response.status_code, url)
            raise IntelligenceAPIError(
                f"Unexpected status {response.status_code} for {url}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise IntelligenceAPIError(
                f"Intelligence service sent a non-JSON body for {url}",
                status_code=response.status_code,
            ) from exc
        if not isinstance(payload, dict):
            raise IntelligenceAPIError(f"Unexpected intelligence payload from {url}")
        return payload
