"""Tests for concurrent access from multiple pipeline workers"""
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor

from conftest import UID_FIELD, make_event

WORKERS = 8


def test_same_uid_from_parallel_workers_pairs_once(make_filter):
    """Two workers racing on one UID must produce exactly one pair"""
    for _ in range(50):
        transaction_filter = make_filter()
        barrier = threading.Barrier(2)

        def submit():
            barrier.wait()
            return transaction_filter.filter(make_event("race"))

        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(pool.map(lambda _: submit(), range(2)))

        assert sum(r.completed for r in results) == 1
        assert transaction_filter.open_transactions == 0


def test_many_uids_from_parallel_workers(make_filter):
    transaction_filter = make_filter()
    uids = [f"uid-{i}" for i in range(500)]
    events = [make_event(uid) for uid in uids] * 2

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        results = list(pool.map(transaction_filter.filter, events))

    completed = [r.transaction_event.get("transaction_uid") for r in results if r.completed]
    assert sorted(completed) == sorted(uids)
    assert transaction_filter.open_transactions == 0


def test_flush_during_filtering(make_filter):
    """Flushing while workers filter must neither lose nor duplicate transactions"""
    transaction_filter = make_filter(timeout=10 ** 12)
    uids = [f"uid-{i}" for i in range(300)]
    stop = threading.Event()

    def flusher():
        while not stop.is_set():
            transaction_filter.flush(1)
            stop.wait(0.001)

    flush_thread = threading.Thread(target=flusher)
    flush_thread.start()
    try:
        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            opened = list(pool.map(transaction_filter.filter, [make_event(uid) for uid in uids]))
            closed = list(pool.map(transaction_filter.filter, [make_event(uid) for uid in uids]))
    finally:
        stop.set()
        flush_thread.join()

    assert not any(r.completed for r in opened)
    assert all(r.completed for r in closed)
    assert transaction_filter.open_transactions == 0


def test_closing_events_race_expiring_flush(make_filter):
    """A transaction is either completed or expired and released, never both"""
    for _ in range(20):
        transaction_filter = make_filter(timeout=1, flush_interval=1, attach_event="first")
        uids = [f"uid-{i}" for i in range(100)]
        for uid in uids:
            transaction_filter.filter(make_event(uid))
        barrier = threading.Barrier(2)
        released = []

        def flusher():
            barrier.wait()
            released.extend(transaction_filter.flush())

        flush_thread = threading.Thread(target=flusher)
        flush_thread.start()
        barrier.wait()
        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            closed = list(pool.map(transaction_filter.filter, [make_event(uid) for uid in uids]))
        flush_thread.join()

        # closing events that lost the race opened a new transaction
        released.extend(transaction_filter.flush())

        completions = Counter(r.transaction_event.get("transaction_uid") for r in closed if r.completed)
        releases = Counter(event.get(UID_FIELD) for event in released)
        for uid in uids:
            assert completions[uid] * 2 + releases[uid] == 2, uid
        assert all("TransactionTimeExpired" in event.tags for event in released)
        assert transaction_filter.open_transactions == 0
