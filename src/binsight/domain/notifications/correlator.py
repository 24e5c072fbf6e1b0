"""Map intelligence-service projects back to the repository items that produced them."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from binsight.domain.model import ArtifactLocation
    from binsight.domain.ports import LocationIndex

log = getLogger(__name__)


class RepositoryCorrelator:
    """Read-only lookups against the project/version index built at scan time."""

    def __init__(self, index: LocationIndex) -> None:
        self._index = index

    def find_locations(
        self, project_name: str | None, project_version_name: str | None
    ) -> frozenset[ArtifactLocation]:
        """Return every location scanned into ``project_name``/``project_version_name``.

        A miss is not an error: the project may come from a source this
        repository no longer tracks, or the items may have been deleted.
        """

        if not project_name or not project_version_name:
            return frozenset()
        locations = frozenset(self._index.locations_for(project_name, project_version_name))
        if not locations:
            log.debug(
                "No repository items correlate to project %s version %s",
                project_name,
                project_version_name,
            )
        return locations
