"""Tests for per-player command usage tracking."""

import threading

from bmenus.clock import ManualClock
from bmenus.config import UsageSettings
from bmenus.usage.store import UsageEntry, UsageStore

DAY = 24 * 60 * 60 * 1000


def _store(defaults=("/spawn", "/home"), clock=None, **settings) -> UsageStore:
    store = UsageStore(clock or ManualClock())
    store.configure(list(defaults), UsageSettings(**settings))
    return store


class TestRecord:
    """Tests for counting command uses."""

    def test_new_table_is_seeded_with_defaults(self):
        store = _store()
        assert store.counts("p1") == {"/spawn": 0, "/home": 0}

    def test_record_counts_and_stamps(self):
        clock = ManualClock()
        store = _store(clock=clock)
        store.record("p1", "/spawn")
        clock.now += 5
        entry = store.record("p1", "/spawn")

        assert entry.count == 2
        assert store.get("p1", "/spawn") == UsageEntry(count=2, last=clock.now)

    def test_first_real_use_evicts_first_idle_default(self):
        store = _store(max_commands=2)
        store.record("p1", "/tpa bob")

        counts = store.counts("p1")
        assert len(counts) == 2
        assert counts["/tpa bob"] == 1
        assert counts == {"/home": 0, "/tpa bob": 1}

    def test_recording_a_default_keeps_other_defaults(self):
        store = _store()
        store.record("p1", "/home")
        assert store.counts("p1") == {"/spawn": 0, "/home": 1}

    def test_second_use_does_not_evict_again(self):
        store = _store()
        store.record("p1", "/tpa bob")
        store.record("p1", "/tpa bob")
        assert store.counts("p1") == {"/home": 0, "/tpa bob": 2}

    def test_used_defaults_are_not_evicted(self):
        store = _store()
        store.record("p1", "/spawn")
        store.record("p1", "/home")
        store.record("p1", "/warp")
        assert store.counts("p1") == {"/spawn": 1, "/home": 1, "/warp": 1}

    def test_players_are_independent(self):
        store = _store()
        store.record("p1", "/warp")
        assert store.counts("p2") == {"/spawn": 0, "/home": 0}

    def test_capacity_trims_lowest_counts_in_table_order(self):
        store = _store(defaults=(), max_commands=2)
        store.record("p1", "/a")
        store.record("p1", "/a")
        store.record("p1", "/b")
        store.record("p1", "/c")
        # /b and /c tie at 1; /b comes first in the table and goes first.
        assert store.counts("p1") == {"/a": 2, "/c": 1}

    def test_concurrent_records(self):
        store = _store(defaults=())

        def worker():
            for _ in range(200):
                store.record("p1", "/warp")

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert store.counts("p1") == {"/warp": 800}


class TestCleanup:
    """Tests for expiry."""

    def test_stale_entries_expire(self):
        clock = ManualClock()
        store = _store(clock=clock, expiry_seconds=7 * 24 * 60 * 60)
        store.record("p1", "/old")
        clock.now += 7 * DAY + 1
        store.record("p1", "/new")

        assert "/old" not in store.counts("p1")
        assert store.counts("p1")["/new"] == 1

    def test_entry_at_exact_expiry_is_kept(self):
        clock = ManualClock()
        store = _store(clock=clock, expiry_seconds=60)
        store.record("p1", "/old")
        clock.now += 60_000
        store.cleanup("p1")
        assert "/old" in store.counts("p1")

    def test_idle_defaults_never_expire(self):
        clock = ManualClock()
        store = _store(clock=clock, expiry_seconds=60)
        store.counts("p1")
        clock.now += 365 * DAY
        store.cleanup("p1")
        assert store.counts("p1") == {"/spawn": 0, "/home": 0}

    def test_used_defaults_expire(self):
        clock = ManualClock()
        store = _store(clock=clock, expiry_seconds=60)
        store.record("p1", "/spawn")
        clock.now += 61_000
        store.cleanup("p1")
        assert store.counts("p1") == {"/home": 0}


class TestRanking:
    """Tests for the most used commands list."""

    def test_ranked_by_count_then_table_order(self):
        store = _store(defaults=())
        for command, uses in [("/a", 1), ("/b", 3), ("/c", 1), ("/d", 2)]:
            for _ in range(uses):
                store.record("p1", command)
        assert store.ranked_top("p1", 10) == ["/b", "/d", "/a", "/c"]

    def test_limit(self):
        store = _store(defaults=())
        for command in ["/a", "/b", "/c"]:
            store.record("p1", command)
        assert store.ranked_top("p1", 2) == ["/a", "/b"]

    def test_defaults_listed_for_new_player(self):
        store = _store()
        assert store.ranked_top("p1", 10) == ["/spawn", "/home"]


class TestSnapshot:
    def test_snapshot_is_a_copy(self):
        store = _store()
        store.record("p1", "/spawn")
        snapshot = store.snapshot()
        snapshot["p1"]["/spawn"].count = 99
        assert store.counts("p1")["/spawn"] == 1

    def test_load_replaces_tables(self):
        store = _store()
        store.load({"p1": {"/warp": UsageEntry(count=4, last=1)}})
        assert store.counts("p1") == {"/warp": 4}
