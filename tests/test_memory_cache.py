import threading

import pytest

from storage.memory_cache import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(ttl_seconds=10, clock=clock)


def test_get_missing_key(cache):
    assert cache.get(("authored-prs", "octocat")) is None


def test_set_then_get(cache):
    cache.set(("authored-prs", "octocat"), [1, 2])
    assert cache.get(("authored-prs", "octocat")) == [1, 2]


def test_entry_expires_after_ttl(cache, clock):
    cache.set("key", "value")
    clock.now = 9.9
    assert cache.get("key") == "value"

    clock.now = 10.0
    assert cache.get("key") is None
    assert len(cache) == 0


def test_set_overwrites_and_restarts_ttl(cache, clock):
    cache.set("key", "old")
    clock.now = 8
    cache.set("key", "new")
    clock.now = 15
    assert cache.get("key") == "new"


def test_rejects_non_positive_ttl():
    with pytest.raises(ValueError):
        TTLCache(ttl_seconds=0)


def test_concurrent_set_and_get():
    cache = TTLCache(ttl_seconds=60)

    def worker(user):
        for i in range(200):
            cache.set(("authored-prs", user), i)
            assert cache.get(("authored-prs", user)) is not None

    threads = [threading.Thread(target=worker, args=(f"user{n}",)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(cache) == 8
    assert all(cache.get(("authored-prs", f"user{n}")) == 199 for n in range(8))
