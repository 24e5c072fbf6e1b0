"""Ports onto the component-intelligence service."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from binsight.domain.model import (
        ComponentVersionRef,
        PolicyApprovalStatus,
        RawNotificationEvent,
        VulnerabilityCounts,
    )


class StatusFetchError(RuntimeError):
    """Raised when a fresh status cannot be obtained from the intelligence service."""


@runtime_checkable
class ComponentStatusService(Protocol):
    """Fetch time-sensitive component state.

    Implementations raise ``StatusFetchError`` for transport or payload failures.
    Calls must be idempotent: the status layer may retry them.
    """

    def fetch_approval_status(self, component: ComponentVersionRef) -> PolicyApprovalStatus: ...

    def fetch_vulnerability_counts(
        self, component: ComponentVersionRef
    ) -> VulnerabilityCounts: ...


@runtime_checkable
class NotificationSource(Protocol):
    """Callable port returning the notifications emitted within a time window."""

    def __call__(
        self,
        *,
        start: datetime | None,
        end: datetime | None,
    ) -> list[RawNotificationEvent]: ...
