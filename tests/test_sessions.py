"""Tests for the per-session registry and the shared entry-id counter."""

import threading

from toolseeker.sessions import SessionRegistry, next_entry_id


class TestEntryIds:
    """The process-wide entry-id counter."""

    def test_ids_increase(self):
        first = next_entry_id()
        second = next_entry_id()
        assert second > first

    def test_ids_unique_across_threads(self):
        ids = []
        ids_lock = threading.Lock()

        def take():
            local = [next_entry_id() for _ in range(200)]
            with ids_lock:
                ids.extend(local)

        threads = [threading.Thread(target=take) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(ids) == 1600
        assert len(set(ids)) == 1600


class TestSessionRegistry:
    """Creation, lookup, removal and eviction of session values."""

    def test_get_unknown_returns_none(self):
        registry = SessionRegistry(factory=lambda sid: [])
        assert registry.get("nope") is None
        assert "nope" not in registry

    def test_get_or_create_reuses_value(self):
        registry = SessionRegistry(factory=lambda sid: {"sid": sid})
        first = registry.get_or_create("s1")
        second = registry.get_or_create("s1")
        assert first is second
        assert first == {"sid": "s1"}
        assert len(registry) == 1

    def test_factory_runs_once_under_contention(self):
        """Concurrent first access creates exactly one value."""
        calls = []
        calls_lock = threading.Lock()

        def factory(sid):
            with calls_lock:
                calls.append(sid)
            return object()

        registry = SessionRegistry(factory=factory)
        start = threading.Barrier(10)
        results = []

        def worker():
            start.wait()
            results.append(registry.get_or_create("shared"))

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert calls == ["shared"]
        assert len({id(r) for r in results}) == 1

    def test_remove_calls_release_hook(self):
        released = []
        registry = SessionRegistry(factory=lambda sid: sid.upper(), on_remove=lambda sid, v: released.append((sid, v)))
        registry.get_or_create("s1")

        assert registry.remove("s1") == "S1"
        assert released == [("s1", "S1")]
        assert registry.get("s1") is None

    def test_remove_unknown_is_noop(self):
        released = []
        registry = SessionRegistry(factory=lambda sid: sid, on_remove=lambda sid, v: released.append(sid))

        assert registry.remove("missing") is None
        assert registry.remove("missing") is None
        assert released == []

    def test_evict_stale(self):
        released = []
        registry = SessionRegistry(factory=lambda sid: sid, on_remove=lambda sid, v: released.append(sid))
        registry.get_or_create("old")
        registry.get_or_create("fresh")

        # Pretend "fresh" was touched recently and "old" an hour ago
        registry._slots["old"].last_accessed = 1000.0
        registry._slots["fresh"].last_accessed = 4500.0

        evicted = registry.evict_stale(ttl_seconds=600, now=5000.0)

        assert evicted == ["old"]
        assert released == ["old"]
        assert registry.session_ids() == ["fresh"]

    def test_evict_stale_survives_release_error(self):
        def boom(sid, value):
            raise RuntimeError("release failed")

        registry = SessionRegistry(factory=lambda sid: sid, on_remove=boom)
        registry.get_or_create("a")
        registry._slots["a"].last_accessed = 0.0

        assert registry.evict_stale(ttl_seconds=1, now=100.0) == ["a"]
        assert len(registry) == 0

    def test_clear_releases_everything(self):
        released = []
        registry = SessionRegistry(factory=lambda sid: sid, on_remove=lambda sid, v: released.append(sid))
        for sid in ("a", "b", "c"):
            registry.get_or_create(sid)

        assert registry.clear() == 3
        assert sorted(released) == ["a", "b", "c"]
        assert len(registry) == 0
