import threading
from collections import Counter

import pytest

from gdkit.balancer import RoundRobin


def test_empty_items_raise():
    with pytest.raises(ValueError, match="no items passed"):
        RoundRobin([])


def test_cycles_in_order():
    items = ["a", "b", "c"]
    balancer = RoundRobin(items)
    got = [balancer.next() for _ in range(len(items) * 2)]
    assert got == items + items


def test_single_item_always_returned():
    balancer = RoundRobin(["only"])
    assert {balancer.next() for _ in range(5)} == {"only"}


def test_accepts_any_iterable():
    balancer = RoundRobin(iter(["x", "y"]))
    assert [balancer.next(), balancer.next(), balancer.next()] == ["x", "y", "x"]


def test_concurrent_calls_share_evenly():
    items = ["a", "b", "c", "d"]
    rounds = 50
    balancer = RoundRobin(items)
    results = []
    lock = threading.Lock()

    def worker():
        picked = [balancer.next() for _ in range(rounds)]
        with lock:
            results.extend(picked)

    threads = [threading.Thread(target=worker) for _ in items]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    counts = Counter(results)
    assert set(counts) == set(items)
    assert len(set(counts.values())) == 1
    assert sum(counts.values()) == rounds * len(items)