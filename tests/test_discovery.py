"""
Unit tests for empirical minimum size discovery and the constraint cache.
"""

import threading

import pytest
from conftest import SimulatedWindowService
from gridwm import topics
from gridwm.discovery import CACHE_TTL, ConstraintCache, ConstraintDiscovery, ProbePolicy
from gridwm.objects import DiscoveredConstraint
from gridwm.protocol import Area


def no_sleep(seconds):
    pass


@pytest.fixture
def make_discovery(clock, bus):
    def factory(service, **policy):
        policy.setdefault("sleep", no_sleep)
        return ConstraintDiscovery(
            service,
            cache=ConstraintCache(clock=clock),
            policy=ProbePolicy(**policy),
            bus=bus,
        )

    return factory


@pytest.fixture
def stubborn_service(make_window):
    """Finder window at 1200x800 that refuses to go below 400x300."""
    window = make_window("Finder", 100, 50, 1200, 800, layer=1, window_id="finder-1")
    return SimulatedWindowService([window], min_sizes={"Finder": (400, 300)})


@pytest.mark.unit
class TestConstraintCache:
    """Test TTL cache behaviour."""

    def _constraint(self, app="Safari", at=1000.0):
        return DiscoveredConstraint(app, 500, 400, discovered_at=at)

    def test_case_insensitive_key(self, clock):
        cache = ConstraintCache(clock=clock)
        cache.put(self._constraint("Safari"))
        assert cache.get("safari") is not None
        assert cache.get("SAFARI").min_width == 500

    def test_fresh_entry_returned(self, clock):
        cache = ConstraintCache(clock=clock)
        cache.put(self._constraint())
        clock.advance(CACHE_TTL - 1)
        assert cache.get("Safari") is not None

    def test_expired_entry_evicted(self, clock):
        cache = ConstraintCache(clock=clock)
        cache.put(self._constraint())
        clock.advance(CACHE_TTL)
        assert cache.get("Safari") is None
        assert len(cache) == 0

    def test_put_replaces_wholesale(self, clock):
        cache = ConstraintCache(clock=clock)
        cache.put(self._constraint())
        cache.put(DiscoveredConstraint("safari", 600, 450, discovered_at=1000.0))
        assert len(cache) == 1
        assert cache.get("Safari").min_size.width == 600

    def test_invalidate_and_clear(self, clock):
        cache = ConstraintCache(clock=clock)
        cache.put(self._constraint("Safari"))
        cache.put(self._constraint("Notes"))
        assert cache.invalidate("notes")
        assert not cache.invalidate("notes")
        assert cache.clear() == 1
        assert len(cache) == 0

    def test_clear_drops_idle_key_locks(self, clock):
        cache = ConstraintCache(clock=clock)
        with cache.locked("Safari"):
            pass
        with cache.locked("Notes"):
            cache.clear()
            assert list(cache._key_locks) == ["notes"]
        cache.clear()
        assert cache._key_locks == {}

    def test_stats(self, clock):
        cache = ConstraintCache(clock=clock)
        assert cache.stats().oldest_age is None
        cache.put(self._constraint("Safari", at=1000.0))
        cache.put(self._constraint("Notes", at=1005.0))
        clock.advance(10)
        stats = cache.stats()
        assert stats.count == 2
        assert stats.oldest_age == 10


@pytest.mark.unit
class TestProbePolicy:
    """Test retry policy arithmetic."""

    def test_constant_delay_by_default(self):
        policy = ProbePolicy()
        assert policy.delay_for(0) == policy.delay_for(7) == 0.05

    def test_backoff_capped(self):
        policy = ProbePolicy(settle_delay=0.1, backoff=2.0, max_delay=0.3)
        assert policy.delay_for(0) == 0.1
        assert policy.delay_for(1) == 0.2
        assert policy.delay_for(5) == 0.3

    def test_settle_uses_injected_sleep(self):
        slept = []
        ProbePolicy(settle_delay=0.05, sleep=slept.append).settle(0)
        assert slept == [0.05]

    def test_honored_within_tolerance(self):
        policy = ProbePolicy(tolerance=10)
        assert policy.honored(400, 409)
        assert not policy.honored(400, 410)


@pytest.mark.unit
class TestConstraintDiscovery:
    """Test the binary search against a simulated window service."""

    def test_discovers_minimum_size(self, stubborn_service, make_discovery):
        discovery = make_discovery(stubborn_service)

        constraint = discovery.get_constraints("Finder")

        assert constraint is not None
        assert constraint.complete
        assert constraint.min_width == pytest.approx(400, abs=10)
        assert constraint.min_height == pytest.approx(300, abs=10)

    def test_probe_budget(self, stubborn_service, make_discovery):
        make_discovery(stubborn_service).get_constraints("Finder")
        # 8 width probes, 8 height probes, one restore
        assert len(stubborn_service.requests) == 17

    def test_other_dimension_held(self, stubborn_service, make_discovery):
        make_discovery(stubborn_service).get_constraints("Finder")
        width_probes = stubborn_service.requests[:8]
        height_probes = stubborn_service.requests[8:16]
        assert all(rect.height == 800 for _, rect in width_probes)
        assert all(rect.width == 1200 for _, rect in height_probes)

    def test_restores_original_bounds(self, stubborn_service, make_discovery):
        make_discovery(stubborn_service).get_constraints("Finder")
        assert stubborn_service.windows["finder-1"].frame == Area(100, 50, 1200, 800)

    def test_resizable_app_reaches_floor(self, make_window, make_discovery):
        service = SimulatedWindowService([make_window("Notes", 0, 0, 900, 700, layer=1)])
        constraint = make_discovery(service).get_constraints("Notes")
        assert constraint.min_width < 110
        assert constraint.min_height < 110

    def test_window_at_floor_is_not_probed(self, make_window, make_discovery):
        service = SimulatedWindowService([make_window("Notes", 0, 0, 100, 80, layer=1)])
        constraint = make_discovery(service).get_constraints("Notes")
        assert (constraint.min_width, constraint.min_height) == (100, 80)
        # Only the restore request
        assert len(service.requests) == 1

    def test_cached_after_discovery(self, stubborn_service, make_discovery, bus):
        discovery = make_discovery(stubborn_service)
        first = discovery.get_constraints("Finder")
        requests = len(stubborn_service.requests)

        second = discovery.get_constraints("finder")

        assert second is first
        assert len(stubborn_service.requests) == requests
        assert bus.last(topics.CONSTRAINTS_DISCOVERED) == {"constraint": first}
        assert bus.last(topics.CONSTRAINTS_CACHE_HIT) == {"constraint": first}

    def test_rediscovered_after_expiry(self, stubborn_service, make_discovery, clock):
        discovery = make_discovery(stubborn_service)
        first = discovery.get_constraints("Finder")
        clock.advance(CACHE_TTL + 1)

        second = discovery.get_constraints("Finder")

        assert second is not first
        assert second.discovered_at == first.discovered_at + CACHE_TTL + 1
        assert len(stubborn_service.requests) == 34

    def test_no_window_returns_none(self, make_discovery, bus):
        discovery = make_discovery(SimulatedWindowService())
        assert discovery.get_constraints("Xcode") is None
        assert bus.last(topics.CONSTRAINTS_WINDOW_NOT_FOUND) == {"app": "Xcode"}

    def test_minimized_window_not_probed(self, make_window, make_discovery):
        window = make_window("Notes", 0, 0, 900, 700, layer=1, is_minimized=True)
        service = SimulatedWindowService([window])
        assert make_discovery(service).get_constraints("Notes") is None
        assert service.requests == []

    def test_window_vanishes_mid_search(self, stubborn_service, make_discovery, bus):
        stubborn_service.vanish_after = 3
        discovery = make_discovery(stubborn_service)

        constraint = discovery.get_constraints("Finder")

        assert constraint is not None
        assert not constraint.complete
        # Best bound before the window went away
        assert constraint.min_width < 1200
        assert len(discovery.cache) == 0
        assert bus.last(topics.CONSTRAINTS_WINDOW_VANISHED) == {"app": "Finder"}
        # Search stopped at the vanishing probe and nothing was restored
        assert len(stubborn_service.requests) == 4

    def test_service_errors_treated_as_vanished(self, stubborn_service, make_discovery):
        stubborn_service.fail_on_set = True
        discovery = make_discovery(stubborn_service)

        constraint = discovery.get_constraints("Finder")

        assert not constraint.complete
        assert (constraint.min_width, constraint.min_height) == (1200, 800)
        assert len(discovery.cache) == 0

    def test_failed_read_back_still_restores(self, stubborn_service, make_discovery, bus):
        stubborn_service.fail_lookup_on = 3
        discovery = make_discovery(stubborn_service)

        constraint = discovery.get_constraints("Finder")

        assert not constraint.complete
        assert len(discovery.cache) == 0
        assert bus.last(topics.CONSTRAINTS_WINDOW_VANISHED) == {"app": "Finder"}
        # Three width probes, then the restore
        assert len(stubborn_service.requests) == 4
        assert stubborn_service.requests[-1] == ("finder-1", Area(100, 50, 1200, 800))
        assert stubborn_service.windows["finder-1"].frame == Area(100, 50, 1200, 800)

    def test_injected_cache_kept_when_empty(self, stubborn_service, clock):
        cache = ConstraintCache(clock=clock)
        discovery = ConstraintDiscovery(stubborn_service, cache=cache, policy=ProbePolicy(sleep=no_sleep))

        constraint = discovery.get_constraints("Finder")

        assert discovery.cache is cache
        assert cache.get("Finder") is constraint
        assert constraint.discovered_at == clock()

    def test_clear_cache(self, stubborn_service, make_discovery, bus):
        discovery = make_discovery(stubborn_service)
        discovery.get_constraints("Finder")
        assert discovery.clear_cache() == 1
        assert bus.last(topics.CONSTRAINTS_CACHE_CLEARED) == {"count": 1}

    def test_settles_between_probes(self, stubborn_service, make_discovery):
        slept = []
        make_discovery(stubborn_service, sleep=slept.append).get_constraints("Finder")
        assert slept == [0.05] * 16

    def test_concurrent_callers_discover_once(self, stubborn_service, make_discovery):
        discovery = make_discovery(stubborn_service)
        results = []

        def worker():
            results.append(discovery.get_constraints("Finder"))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 4
        assert all(r is results[0] for r in results)
        assert len(stubborn_service.requests) == 17
