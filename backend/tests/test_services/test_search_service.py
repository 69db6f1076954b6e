import asyncio
import uuid

import pytest

from servicefinder.core.errors import ProviderFetchError
from servicefinder.schemas.provider import ProviderRecord
from servicefinder.services import search_service
from servicefinder.services.provider_directory import InMemoryProviderDirectory, ProviderDirectory
from servicefinder.services.search_service import SearchSession, SearchState


def _record(skills: list[str], locations: list[str], email: str | None = None) -> ProviderRecord:
    uid = uuid.uuid4()
    return ProviderRecord(
        user_id=uid,
        email=email or f"{uid.hex[:8]}@example.com",
        skills=skills,
        locations=locations,
    )


PLUMBER = _record(["Plumbing"], ["Brooklyn"], "plumber@example.com")
TUTOR = _record(["Tutoring"], ["Queens"], "tutor@example.com")
HANDYMAN = _record(["Carpentry", "Pipe Repair"], ["Queens", "NYC Metro"], "handy@example.com")


# ── Fetcher ──────────────────────────────────────────────


@pytest.mark.asyncio
async def test_skill_query_keeps_matching_providers():
    """'plumb' finds only the plumber."""
    directory = InMemoryProviderDirectory([PLUMBER, TUTOR])
    assert await search_service.search(directory, "plumb") == [PLUMBER]


@pytest.mark.asyncio
async def test_skill_query_is_case_insensitive_and_matches_any_skill():
    directory = InMemoryProviderDirectory([PLUMBER, TUTOR, HANDYMAN])
    assert await search_service.search(directory, "PIPE") == [HANDYMAN]
    assert await search_service.search(directory, "ing") == [PLUMBER, TUTOR]


@pytest.mark.asyncio
async def test_empty_query_returns_everything_in_directory_order():
    directory = InMemoryProviderDirectory([TUTOR, HANDYMAN, PLUMBER])
    assert await search_service.search(directory, "") == [TUTOR, HANDYMAN, PLUMBER]


@pytest.mark.asyncio
async def test_no_match_returns_empty_list():
    directory = InMemoryProviderDirectory([PLUMBER, TUTOR])
    assert await search_service.search(directory, "zzz") == []


@pytest.mark.asyncio
async def test_failed_read_resolves_to_empty_list():
    """The failure does not reach the caller."""
    directory = InMemoryProviderDirectory([PLUMBER])
    directory.fail_with = "connection refused"
    assert await search_service.search(directory, "plumb") == []


@pytest.mark.asyncio
async def test_fetch_providers_propagates_failure():
    directory = InMemoryProviderDirectory([PLUMBER])
    directory.fail_with = "boom"
    with pytest.raises(ProviderFetchError):
        await search_service.fetch_providers(directory, "")


@pytest.mark.asyncio
async def test_search_results_are_subset_with_matching_skill():
    records = [PLUMBER, TUTOR, HANDYMAN]
    directory = InMemoryProviderDirectory(records)
    for query in ["p", "ing", "Carp", "x", "o"]:
        found = await search_service.search(directory, query)
        assert all(r in records for r in found)
        assert all(any(query.lower() in s.lower() for s in r.skills) for r in found)


# ── Location filter ──────────────────────────────────────


def test_location_filter_keeps_matching_providers():
    assert search_service.filter_by_location([PLUMBER, TUTOR], "queens") == [TUTOR]


@pytest.mark.parametrize("blank", ["", "   ", "\t"])
def test_blank_location_filter_returns_input_unchanged(blank):
    records = [TUTOR, PLUMBER, HANDYMAN]
    assert search_service.filter_by_location(records, blank) == [TUTOR, PLUMBER, HANDYMAN]


def test_blank_location_filter_returns_a_new_list():
    records = [TUTOR, PLUMBER]
    filtered = search_service.filter_by_location(records, "")
    filtered.append(HANDYMAN)
    assert records == [TUTOR, PLUMBER]


def test_location_filter_is_case_insensitive():
    records = [PLUMBER, TUTOR, HANDYMAN]
    assert search_service.filter_by_location(records, "NYC") == search_service.filter_by_location(
        records, "nyc"
    ) == [HANDYMAN]


def test_location_filter_is_idempotent_and_a_subset():
    records = [PLUMBER, TUTOR, HANDYMAN]
    for text in ["queens", "k", "nowhere", "Q"]:
        once = search_service.filter_by_location(records, text)
        assert search_service.filter_by_location(once, text) == once
        assert all(r in records for r in once)


def test_location_filter_no_match_is_empty_not_error():
    assert search_service.filter_by_location([PLUMBER, TUTOR], "Chicago") == []


# ── SearchSession ────────────────────────────────────────


@pytest.mark.asyncio
async def test_session_state_flow_and_filter_without_refetch():
    directory = InMemoryProviderDirectory([PLUMBER, TUTOR, HANDYMAN])
    session = SearchSession(directory)
    assert session.state == SearchState.idle
    assert session.message is None

    displayed = await session.submit_query("")
    assert session.state == SearchState.fetched
    assert displayed == [PLUMBER, TUTOR, HANDYMAN]
    assert directory.reads == 1

    displayed = session.set_location_filter("queens")
    assert session.state == SearchState.filtered
    assert displayed == [TUTOR, HANDYMAN]
    assert session.results == [PLUMBER, TUTOR, HANDYMAN]
    assert directory.reads == 1

    session.set_location_filter("")
    assert session.state == SearchState.filtered
    assert session.displayed == [PLUMBER, TUTOR, HANDYMAN]
    session.displayed.clear()
    assert session.results == [PLUMBER, TUTOR, HANDYMAN]


@pytest.mark.asyncio
async def test_location_filter_persists_across_fetches():
    directory = InMemoryProviderDirectory([PLUMBER, TUTOR, HANDYMAN])
    session = SearchSession(directory)
    session.set_location_filter("queens")
    assert session.state == SearchState.idle

    assert await session.submit_query("") == [TUTOR, HANDYMAN]
    assert await session.submit_query("carp") == [HANDYMAN]
    assert session.location_filter == "queens"
    assert session.state == SearchState.fetched


@pytest.mark.asyncio
async def test_failed_fetch_shows_empty_state():
    directory = InMemoryProviderDirectory([PLUMBER])
    session = SearchSession(directory)
    await session.submit_query("plumb")

    directory.fail_with = "timeout"
    assert await session.submit_query("plumb") == []
    assert session.state == SearchState.fetch_failed
    assert isinstance(session.last_error, ProviderFetchError)
    assert session.results == []
    assert session.message == search_service.NO_RESULTS_MESSAGE

    session.set_location_filter("brooklyn")
    assert session.state == SearchState.fetch_failed


@pytest.mark.asyncio
async def test_zero_matches_and_failure_read_the_same():
    session = SearchSession(InMemoryProviderDirectory([PLUMBER]))
    await session.submit_query("zzz")
    assert session.state == SearchState.fetched
    assert session.message == search_service.NO_RESULTS_MESSAGE


class _GatedDirectory(ProviderDirectory):
    """Each read waits on its own gate, so tests control completion order."""

    def __init__(self, responses: list[tuple[asyncio.Event, object]]):
        self._responses = responses
        self.calls = 0

    async def list_providers(self):
        gate, outcome = self._responses[self.calls]
        self.calls += 1
        await gate.wait()
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def get_provider(self, user_id):
        return None


@pytest.mark.asyncio
async def test_latest_dispatched_fetch_wins_over_late_older_fetch():
    first_gate, second_gate = asyncio.Event(), asyncio.Event()
    directory = _GatedDirectory([(first_gate, [PLUMBER, TUTOR]), (second_gate, [TUTOR, HANDYMAN])])
    session = SearchSession(directory)

    first = asyncio.create_task(session.submit_query("plumb"))
    await asyncio.sleep(0)
    second = asyncio.create_task(session.submit_query("tutor"))
    await asyncio.sleep(0)
    assert session.loading

    second_gate.set()
    assert await second == [TUTOR]
    first_gate.set()
    await first

    assert session.query == "tutor"
    assert session.results == [TUTOR]
    assert session.displayed == [TUTOR]
    assert session.state == SearchState.fetched


@pytest.mark.asyncio
async def test_late_older_failure_does_not_clobber_newer_result():
    first_gate, second_gate = asyncio.Event(), asyncio.Event()
    directory = _GatedDirectory(
        [(first_gate, ProviderFetchError("stale")), (second_gate, [PLUMBER])]
    )
    session = SearchSession(directory)

    first = asyncio.create_task(session.submit_query(""))
    await asyncio.sleep(0)
    second = asyncio.create_task(session.submit_query(""))
    await asyncio.sleep(0)

    second_gate.set()
    await second
    first_gate.set()
    await first

    assert session.state == SearchState.fetched
    assert session.displayed == [PLUMBER]
    assert session.last_error is None
