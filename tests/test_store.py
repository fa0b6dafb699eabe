import threading

from app.core.store import KeyedStore


def _put(value):
    return lambda current: (value, current)


def _delete(current):
    return None, current


def test_apply_stores_and_deletes():
    store = KeyedStore()

    assert store.apply("a", _put(1)) is None
    assert "a" in store and len(store) == 1
    assert store.get("a") == 1

    assert store.apply("a", _delete) == 1
    assert "a" not in store and len(store) == 0


def test_lock_kept_while_key_present_and_dropped_after_delete():
    store = KeyedStore()

    store.apply("a", _put(1))
    assert store.lock_count() == 1

    store.apply("a", _delete)
    assert store.lock_count() == 0


def test_lookups_of_absent_keys_do_not_grow_lock_table():
    store = KeyedStore()

    for i in range(1000):
        store.apply(f"k{i}", lambda current: (current, None))

    assert len(store) == 0
    assert store.lock_count() == 0


def test_discard_where_removes_matches():
    store = KeyedStore()
    for i in range(6):
        store.apply(str(i), _put(i))

    assert store.discard_where(lambda v: v % 2 == 0) == 3
    assert len(store) == 3
    assert store.lock_count() == 3


def test_concurrent_increments_on_one_key_are_not_lost():
    store = KeyedStore()
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        for _ in range(200):
            store.apply("n", lambda current: ((current or 0) + 1, None))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.get("n") == 1600
    assert store.lock_count() == 1
