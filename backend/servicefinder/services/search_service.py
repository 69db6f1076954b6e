"""Search service: skill search over the provider directory, then location filtering.

Two stages:
- fetch: one directory read, keep providers with a skill containing the query
- filter_by_location: narrow an already fetched list by location text

SearchSession keeps the fetched list in memory so location edits never hit
the directory, and only lets the most recently dispatched fetch land.
"""

import enum
import logging

from servicefinder.core.errors import ProviderFetchError
from servicefinder.schemas.provider import ProviderRecord
from servicefinder.services.provider_directory import ProviderDirectory

logger = logging.getLogger("servicefinder.search")

NO_RESULTS_MESSAGE = "No service providers found matching your criteria"


def _contains(values: list[str], needle: str) -> bool:
    needle = needle.lower()
    return any(needle in value.lower() for value in values)


def matches_skill(record: ProviderRecord, query: str) -> bool:
    """True when any skill contains ``query``, ignoring case. Empty query matches all."""
    if not query:
        return True
    return _contains(record.skills, query)


def matches_location(record: ProviderRecord, location_filter: str) -> bool:
    """True when any location contains ``location_filter``, ignoring case.

    A blank filter matches every record.
    """
    if not location_filter.strip():
        return True
    return _contains(record.locations, location_filter)


async def fetch_providers(directory: ProviderDirectory, query: str) -> list[ProviderRecord]:
    """Read the directory once and keep skill matches, in directory order.

    Raises ProviderFetchError when the directory read fails.
    """
    records = await directory.list_providers()
    if not query:
        return records
    return [r for r in records if matches_skill(r, query)]


async def search(directory: ProviderDirectory, query: str) -> list[ProviderRecord]:
    """Skill search that never raises on a failed read: failures become an empty list."""
    try:
        return await fetch_providers(directory, query)
    except ProviderFetchError:
        logger.warning("Provider fetch failed query=%r", query, exc_info=True)
        return []


def filter_by_location(records: list[ProviderRecord], location_filter: str) -> list[ProviderRecord]:
    """Keep records with a location containing ``location_filter``.

    A blank filter returns a copy of the input, same elements and order.
    """
    if not location_filter.strip():
        return list(records)
    return [r for r in records if matches_location(r, location_filter)]


class SearchState(str, enum.Enum):
    idle = "idle"
    fetching = "fetching"
    fetched = "fetched"
    fetch_failed = "fetch_failed"
    filtered = "filtered"


class SearchSession:
    """In-memory state for one search view.

    ``submit_query`` reads the directory; ``set_location_filter`` only
    re-derives the displayed list from the cached results. Fetches are
    numbered; a fetch that resolves after a newer one was dispatched is
    dropped.
    """

    def __init__(self, directory: ProviderDirectory, *, location_filter: str = ""):
        self._directory = directory
        self.query = ""
        self.location_filter = location_filter
        self.state = SearchState.idle
        self.results: list[ProviderRecord] = []
        self.displayed: list[ProviderRecord] = []
        self.last_error: ProviderFetchError | None = None
        self._dispatched = 0

    @property
    def loading(self) -> bool:
        return self.state == SearchState.fetching

    @property
    def message(self) -> str | None:
        """Empty-state text. Failed fetches and zero matches read the same."""
        if self.state in (SearchState.idle, SearchState.fetching) or self.displayed:
            return None
        return NO_RESULTS_MESSAGE

    async def submit_query(self, query: str) -> list[ProviderRecord]:
        self._dispatched += 1
        seq = self._dispatched
        self.query = query
        self.state = SearchState.fetching

        try:
            records = await fetch_providers(self._directory, query)
        except ProviderFetchError as exc:
            if seq < self._dispatched:
                logger.debug("Dropping stale fetch failure seq=%d latest=%d", seq, self._dispatched)
                return self.displayed
            logger.warning("Provider fetch failed query=%r", query, exc_info=True)
            self.last_error = exc
            self.results = []
            self.displayed = []
            self.state = SearchState.fetch_failed
            return self.displayed

        if seq < self._dispatched:
            logger.debug("Dropping stale fetch result seq=%d latest=%d", seq, self._dispatched)
            return self.displayed

        self.last_error = None
        self.results = records
        self.displayed = filter_by_location(records, self.location_filter)
        self.state = SearchState.fetched
        return self.displayed

    def set_location_filter(self, location_filter: str) -> list[ProviderRecord]:
        self.location_filter = location_filter
        self.displayed = filter_by_location(self.results, location_filter)
        if self.state in (SearchState.fetched, SearchState.filtered):
            self.state = SearchState.filtered
        return self.displayed
