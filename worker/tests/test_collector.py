import itertools

import pytest

from maps_leads.collect import collector
from maps_leads.collect.collector import CONVERGED, EXHAUSTED, STAGNANT, ListCollector
from maps_leads.core.errors import CollaboratorError
from maps_leads.models import RawRecord


def records(count, prefix="Biz"):
    return [RawRecord(title=f"{prefix} {i}") for i in range(count)]


class FakeSource:
    """Replays scripted snapshots and extents; the last value repeats once exhausted."""

    def __init__(self, snapshots, extents):
        self._snapshots = list(snapshots)
        self._extents = iter(extents)
        self._last_extent = None
        self.snapshot_calls = 0
        self.extent_calls = 0
        self.advances = 0
        self.closed = False

    def snapshot(self):
        index = min(self.snapshot_calls, len(self._snapshots) - 1)
        self.snapshot_calls += 1
        return self._snapshots[index]

    def extent(self):
        self.extent_calls += 1
        self._last_extent = next(self._extents, self._last_extent)
        return self._last_extent

    def advance(self):
        self.advances += 1

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    slept = []
    monkeypatch.setattr(collector.time, "sleep", lambda seconds: slept.append(seconds))
    return slept


def test_converges_on_first_poll():
    source = FakeSource([records(5)], [100])

    result = ListCollector(source).collect(5, 2000, 3)

    assert result.outcome == CONVERGED
    assert len(result.records) == 5
    assert result.polls == 1
    assert source.advances == 0
    assert source.closed is True


def test_converges_after_loading_more(no_sleep):
    source = FakeSource([records(2), records(4), records(7)], [100, 200, 300])

    result = ListCollector(source).collect(6, 1500, 3)

    assert result.outcome == CONVERGED
    assert len(result.records) == 7
    assert source.advances == 2
    assert no_sleep == [1.5, 1.5]


def test_strict_mode_stops_on_first_stagnant_poll():
    source = FakeSource([records(2)], [100])

    result = ListCollector(source, stagnation_mode="strict").collect(5, 10, 3)

    assert result.outcome == STAGNANT
    assert len(result.records) == 2
    assert result.polls == 1
    assert source.advances == 1
    assert source.closed is True


def test_tolerant_mode_retries_until_attempts_exhausted():
    source = FakeSource([records(2)], [100])

    result = ListCollector(source, stagnation_mode="tolerant").collect(5, 10, 3)

    assert result.outcome == EXHAUSTED
    assert result.polls == 3
    assert result.stagnant_attempts == 3
    assert len(result.records) == 2


def test_growth_does_not_count_against_attempts():
    snapshots = [records(n) for n in range(1, 10)]
    source = FakeSource(snapshots, [100, 200, 200, 300, 300, 300])

    result = ListCollector(source).collect(50, 10, 2)

    assert result.outcome == EXHAUSTED
    assert result.polls == 4
    assert result.stagnant_attempts == 2
    assert len(result.records) == 4


def test_each_snapshot_replaces_previous_records():
    first = records(2, prefix="First")
    second = records(1, prefix="Second")
    source = FakeSource([first, second], [100])

    result = ListCollector(source).collect(5, 10, 2)

    assert [record.title for record in result.records] == ["Second 0"]


def test_poll_ceiling_bounds_ever_growing_source():
    source = FakeSource([records(1)], itertools.count(start=100, step=10))

    result = ListCollector(source, max_polls=10).collect(5, 10, 3)

    assert result.outcome == EXHAUSTED
    assert result.polls == 10
    assert result.stagnant_attempts == 0
    assert source.closed is True


def test_never_returns_more_than_the_source_produced():
    source = FakeSource([records(1), records(3), records(2)], [100, 150, 150, 150, 150])

    result = ListCollector(source).collect(10, 10, 3)

    assert len(result.records) <= 3


def test_source_errors_are_wrapped_and_session_released():
    class BrokenSource(FakeSource):
        def snapshot(self):
            raise RuntimeError("selector not found")

    source = BrokenSource([records(1)], [100])

    with pytest.raises(CollaboratorError) as excinfo:
        ListCollector(source).collect(5, 10, 3)

    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert "selector not found" in str(excinfo.value)
    assert source.closed is True


def test_collaborator_errors_pass_through_unchanged():
    original = CollaboratorError("navigation timeout")

    class TimeoutSource(FakeSource):
        def advance(self):
            raise original

    source = TimeoutSource([records(1)], [100])

    with pytest.raises(CollaboratorError) as excinfo:
        ListCollector(source).collect(5, 10, 3)

    assert excinfo.value is original
    assert source.closed is True


def test_cancellation_still_releases_session():
    class CancelledSource(FakeSource):
        def advance(self):
            raise KeyboardInterrupt

    source = CancelledSource([records(1)], [100])

    with pytest.raises(KeyboardInterrupt):
        ListCollector(source).collect(5, 10, 3)

    assert source.closed is True


def test_close_failure_is_logged(caplog):
    class StickySource(FakeSource):
        def close(self):
            raise RuntimeError("browser already gone")

    with caplog.at_level("WARNING"):
        result = ListCollector(StickySource([records(3)], [100])).collect(3, 10, 3)

    assert result.outcome == CONVERGED
    assert "Failed to close listing source" in " ".join(caplog.messages)


def test_rejects_unknown_stagnation_mode():
    with pytest.raises(ValueError):
        ListCollector(FakeSource([records(1)], [1]), stagnation_mode="eager")
