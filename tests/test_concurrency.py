"""Concurrent order placement must never oversell a lesson.

Run with: pytest tests/test_concurrency.py -v
"""

import random
import threading
from concurrent.futures import ThreadPoolExecutor

from lessons.apps import build_services
from lessons.domain.errors import InsufficientCapacityError, TransientError
from lessons.services import CapacityLedger
from lessons.stores import InMemoryLessonStore, InMemoryOrderStore
from tests.factories import make_lesson


def run_together(calls):
    """Start every call at the same moment and collect results or errors."""
    barrier = threading.Barrier(len(calls))

    def run(call):
        barrier.wait()
        try:
            return call()
        except (InsufficientCapacityError, TransientError) as error:
            return error

    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        return list(pool.map(run, calls))


class TestConcurrentOrders:
    def test_two_orders_racing_for_three_seats(self):
        """Exactly one of two 2-seat orders fits into 3 seats."""
        lessons = InMemoryLessonStore([make_lesson(capacity=3)])
        orders = InMemoryOrderStore()
        services = build_services(lessons, orders, max_attempts=5)
        lesson = lessons.list_lessons()[0]
        request = [{"lesson_id": str(lesson.id), "seats": 2}]

        results = run_together(
            [
                lambda: services.orders.create_order("Ann", "555-1", request),
                lambda: services.orders.create_order("Bob", "555-2", request),
            ]
        )

        failures = [r for r in results if isinstance(r, InsufficientCapacityError)]
        assert len(failures) == 1
        assert failures[0].lesson_id == str(lesson.id)
        assert len(orders.all_orders()) == 1
        assert lessons.get_lesson(lesson.id).capacity.value == 1

    def test_many_batches_never_oversell(self):
        rng = random.Random(7)
        initial = [make_lesson(capacity=capacity) for capacity in (4, 7, 10)]
        store = InMemoryLessonStore(initial)
        ledger = CapacityLedger(store, max_attempts=50)

        batches = []
        for _ in range(40):
            picks = rng.sample(initial, k=rng.randint(1, 3))
            batches.append([(lesson.id, rng.randint(1, 3)) for lesson in picks])

        results = run_together([lambda batch=batch: ledger.reserve_many(batch) for batch in batches])

        reserved = {lesson.id: 0 for lesson in initial}
        for result in results:
            if isinstance(result, (InsufficientCapacityError, TransientError)):
                continue
            for lesson_id, seats in result.lines:
                reserved[lesson_id] += seats

        assert any(not isinstance(r, Exception) for r in results)
        for lesson in initial:
            remaining = store.get_lesson(lesson.id).capacity.value
            assert 0 <= remaining <= lesson.initial_capacity.value
            assert reserved[lesson.id] <= lesson.initial_capacity.value
            assert remaining == lesson.initial_capacity.value - reserved[lesson.id]

    def test_released_seats_return_under_contention(self):
        lesson = make_lesson(capacity=6)
        store = InMemoryLessonStore([lesson])
        ledger = CapacityLedger(store, max_attempts=50)

        def reserve_and_release():
            token = ledger.reserve_many([(lesson.id, 1)])
            ledger.release(token)
            return token

        results = run_together([reserve_and_release for _ in range(6)])

        assert all(not isinstance(r, Exception) for r in results)
        assert store.get_lesson(lesson.id).capacity.value == 6
