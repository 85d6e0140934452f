"""Unit tests for CapacityLedger.

Run with: pytest tests/test_capacity_ledger.py -v
"""

import uuid

import pytest

from lessons.domain import LessonId
from lessons.domain.errors import InsufficientCapacityError, LessonNotFoundError, TransientError
from lessons.services import CapacityLedger
from lessons.stores import InMemoryLessonStore, StoreUnavailableError
from tests.factories import make_lesson


class RacingLessonStore(InMemoryLessonStore):
    """Lets another writer take one seat just before each of the first N conditional writes."""

    def __init__(self, races: int) -> None:
        super().__init__()
        self.races = races
        self.cas_calls = 0

    def compare_and_set_capacity(self, lesson_id, expected_version, capacity):
        self.cas_calls += 1
        if self.races > 0:
            self.races -= 1
            current = self.get_lesson(lesson_id)
            super().compare_and_set_capacity(
                lesson_id, current.version, current.capacity.value - 1
            )
        return super().compare_and_set_capacity(lesson_id, expected_version, capacity)


class FlakyLessonStore(InMemoryLessonStore):
    """Fails the next ``failures`` reads (-1: all of them), only for ``broken`` lessons if set."""

    def __init__(self) -> None:
        super().__init__()
        self.broken: set = set()
        self.failures = 0

    def get_lesson(self, lesson_id):
        if self.failures and (not self.broken or lesson_id in self.broken):
            self.failures -= 1
            raise StoreUnavailableError("get_lesson")
        return super().get_lesson(lesson_id)


def capacities(store, *lessons):
    return [store.get_lesson(lesson.id).capacity.value for lesson in lessons]


class TestReserveMany:
    def test_reserves_every_line(self, lesson_store, add_lesson):
        art, math = add_lesson(5), add_lesson(3)
        ledger = CapacityLedger(lesson_store)

        token = ledger.reserve_many([(art.id, 2), (math.id, 3)])

        assert capacities(lesson_store, art, math) == [3, 0]
        assert token.total_seats == 5

    def test_duplicate_lessons_are_summed(self, lesson_store, add_lesson):
        art = add_lesson(5)
        ledger = CapacityLedger(lesson_store)

        token = ledger.reserve_many([(art.id, 2), (art.id, 2)])

        assert token.lines == ((art.id, 4),)
        assert capacities(lesson_store, art) == [1]

    def test_duplicate_lessons_checked_on_their_sum(self, lesson_store, add_lesson):
        """Two lines of 3 on a lesson with 5 seats must fail even though each fits."""
        art = add_lesson(5)
        ledger = CapacityLedger(lesson_store)

        with pytest.raises(InsufficientCapacityError) as excinfo:
            ledger.reserve_many([(art.id, 3), (art.id, 3)])

        assert excinfo.value.details["requested"] == 6
        assert capacities(lesson_store, art) == [5]

    def test_unknown_lesson_touches_nothing(self, lesson_store, add_lesson):
        art = add_lesson(5)
        missing = LessonId(uuid.uuid4())
        ledger = CapacityLedger(lesson_store)

        with pytest.raises(LessonNotFoundError) as excinfo:
            ledger.reserve_many([(art.id, 1), (missing, 1)])

        assert excinfo.value.lesson_id == str(missing)
        assert capacities(lesson_store, art) == [5]

    def test_insufficient_capacity_names_first_short_lesson_in_input_order(
        self, lesson_store, add_lesson
    ):
        art, math, music = add_lesson(5), add_lesson(1), add_lesson(0)
        ledger = CapacityLedger(lesson_store)

        with pytest.raises(InsufficientCapacityError) as excinfo:
            ledger.reserve_many([(art.id, 1), (music.id, 1), (math.id, 2)])

        assert excinfo.value.lesson_id == str(music.id)
        assert capacities(lesson_store, art, math, music) == [5, 1, 0]

    def test_lost_race_is_retried(self):
        store = RacingLessonStore(races=1)
        art = store.create_lesson(make_lesson(capacity=5))
        ledger = CapacityLedger(store, max_attempts=3)

        ledger.reserve_many([(art.id, 2)])

        # one seat went to the competing writer, two to us
        assert capacities(store, art) == [2]
        assert store.cas_calls == 2

    def test_partial_batch_is_rolled_back_when_a_later_write_loses(self):
        store = InMemoryLessonStore()
        first, second = make_lesson(capacity=5), make_lesson(capacity=5)
        store.create_lesson(first)
        store.create_lesson(second)
        ordered = sorted([first, second], key=lambda lesson: str(lesson.id))

        original = store.compare_and_set_capacity
        calls = []

        def cas(lesson_id, expected_version, capacity):
            calls.append(lesson_id)
            if len(calls) == 2:
                # someone else takes all seats on the second lesson
                current = store.get_lesson(lesson_id)
                original(lesson_id, current.version, 0)
            return original(lesson_id, expected_version, capacity)

        store.compare_and_set_capacity = cas
        ledger = CapacityLedger(store, max_attempts=3)

        with pytest.raises(InsufficientCapacityError) as excinfo:
            ledger.reserve_many([(first.id, 1), (second.id, 1)])

        assert excinfo.value.lesson_id == str(ordered[1].id)
        assert capacities(store, ordered[0], ordered[1]) == [5, 0]

    def test_exhausted_retries_surface_as_transient(self):
        store = RacingLessonStore(races=10)
        art = store.create_lesson(make_lesson(capacity=50))
        ledger = CapacityLedger(store, max_attempts=3)

        with pytest.raises(TransientError):
            ledger.reserve_many([(art.id, 1)])

        # only the competing writer's seats are gone
        assert capacities(store, art) == [47]

    def test_empty_batch_is_a_programming_error(self, lesson_store):
        with pytest.raises(ValueError):
            CapacityLedger(lesson_store).reserve_many([])


class TestRelease:
    def test_release_restores_reserved_seats(self, lesson_store, add_lesson):
        art, math = add_lesson(5), add_lesson(2)
        ledger = CapacityLedger(lesson_store)
        token = ledger.reserve_many([(art.id, 5), (math.id, 1)])

        ledger.release(token)

        assert capacities(lesson_store, art, math) == [5, 2]

    def test_release_never_exceeds_initial_capacity(self, lesson_store, add_lesson):
        art = add_lesson(5)
        ledger = CapacityLedger(lesson_store)
        token = ledger.reserve_many([(art.id, 2)])
        ledger.release(token)

        with pytest.raises(TransientError):
            ledger.release(token)

        assert capacities(lesson_store, art) == [5]

    def test_release_survives_a_one_off_storage_fault(self):
        store = FlakyLessonStore()
        art = store.create_lesson(make_lesson(capacity=5))
        math = store.create_lesson(make_lesson(capacity=5))
        ledger = CapacityLedger(store)
        token = ledger.reserve_many([(art.id, 2), (math.id, 3)])

        store.failures = 1
        ledger.release(token)

        assert capacities(store, art, math) == [5, 5]

    def test_release_returns_every_other_lesson_when_one_stays_down(self):
        store = FlakyLessonStore()
        art = store.create_lesson(make_lesson(capacity=5))
        math = store.create_lesson(make_lesson(capacity=5))
        ledger = CapacityLedger(store, max_attempts=1)
        token = ledger.reserve_many([(art.id, 2), (math.id, 3)])

        store.broken = {art.id}
        store.failures = -1
        with pytest.raises(TransientError):
            ledger.release(token)

        store.failures = 0
        assert capacities(store, art, math) == [3, 5]


class TestRollback:
    def test_rollback_survives_a_one_off_storage_fault(self):
        store = FlakyLessonStore()
        lessons = [store.create_lesson(make_lesson(capacity=5)) for _ in range(3)]
        ordered = sorted(lessons, key=lambda lesson: str(lesson.id))
        original = store.compare_and_set_capacity
        calls = []

        def cas(lesson_id, expected_version, capacity):
            calls.append(lesson_id)
            if len(calls) == 3:
                # the last lesson sells out under us, then storage hiccups once
                current = store.get_lesson(lesson_id)
                original(lesson_id, current.version, 0)
                store.failures = 1
            return original(lesson_id, expected_version, capacity)

        store.compare_and_set_capacity = cas
        ledger = CapacityLedger(store, max_attempts=3)

        with pytest.raises(InsufficientCapacityError) as excinfo:
            ledger.reserve_many([(lesson.id, 1) for lesson in lessons])

        assert excinfo.value.lesson_id == str(ordered[2].id)
        assert capacities(store, *ordered) == [5, 5, 0]

    def test_interrupted_batch_is_rolled_back(self):
        store = InMemoryLessonStore()
        lessons = [store.create_lesson(make_lesson(capacity=5)) for _ in range(2)]
        original = store.compare_and_set_capacity
        calls = []

        def cas(lesson_id, expected_version, capacity):
            calls.append(lesson_id)
            if len(calls) == 2:
                raise KeyboardInterrupt
            return original(lesson_id, expected_version, capacity)

        store.compare_and_set_capacity = cas
        ledger = CapacityLedger(store)

        with pytest.raises(KeyboardInterrupt):
            ledger.reserve_many([(lesson.id, 2) for lesson in lessons])

        assert capacities(store, *lessons) == [5, 5]
