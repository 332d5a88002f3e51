from liiga_teletext.cache import TTLCache

from fakes import FakeClock


def test_get_or_set_loads_once_while_fresh():
    clock = FakeClock()
    cache = TTLCache(clock=clock)
    calls = []

    def loader():
        calls.append(1)
        return {"games": []}

    assert cache.get_or_set("k", 10, loader) == {"games": []}
    clock.advance(9)
    cache.get_or_set("k", 10, loader)
    assert len(calls) == 1

    clock.advance(2)
    cache.get_or_set("k", 10, loader)
    assert len(calls) == 2


def test_ttl_can_depend_on_value():
    clock = FakeClock()
    cache = TTLCache(clock=clock)
    cache.get_or_set("live", lambda v: 8 if v == "live" else 3600, lambda: "live")
    clock.advance(9)
    assert cache.get("live") is None


def test_evict_expired():
    clock = FakeClock()
    cache = TTLCache(clock=clock)
    cache.set("a", 1, 5)
    cache.set("b", 2, 50)
    clock.advance(10)
    assert cache.evict_expired() == 1
    assert len(cache) == 1
    assert cache.get("b") == 2

    cache.clear()
    assert len(cache) == 0
