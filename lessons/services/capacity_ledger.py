"""Capacity ledger - the only writer of lesson capacity.

reserve_many is all-or-nothing across every lesson in the batch. There are no
in-process locks: each lesson is decremented with a conditional write keyed on
the version read during validation, so batches touching disjoint lessons never
wait on each other and batches touching the same lesson serialise at the store.
"""

import uuid
from collections.abc import Iterable

from loguru import logger

from lessons.domain import Lesson, LessonId, ReservationToken, coalesce_lines
from lessons.domain.errors import (
    ConcurrencyConflictError,
    InsufficientCapacityError,
    LessonNotFoundError,
    TransientError,
)
from lessons.stores.interfaces import LessonStore, StoreUnavailableError

DEFAULT_MAX_ATTEMPTS = 5
# release retry bound, as a multiple of max_attempts
RELEASE_ATTEMPTS_FACTOR = 10


class CapacityLedger:
    """Reserves and releases lesson seats."""

    def __init__(self, store: LessonStore, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._store = store
        self._max_attempts = max_attempts

    def reserve_many(self, lines: Iterable[tuple[LessonId, int]]) -> ReservationToken:
        """Take seats from every lesson in ``lines`` or from none of them.

        Duplicate lesson ids are summed first.

        Raises:
            LessonNotFoundError: First unknown lesson id, in input order.
            InsufficientCapacityError: First lesson short of seats, in input order.
            TransientError: Conflicts persisted past the retry bound.
        """
        demand = coalesce_lines(lines)
        if not demand:
            raise ValueError("reserve_many needs at least one line")

        for attempt in range(1, self._max_attempts + 1):
            lessons = self._validate(demand)
            try:
                self._apply(demand, lessons)
            except ConcurrencyConflictError as conflict:
                logger.warning(
                    "Reservation attempt {}/{} lost a race on lesson {}",
                    attempt,
                    self._max_attempts,
                    conflict.details["lesson_id"],
                )
                continue
            token = ReservationToken(id=uuid.uuid4(), lines=tuple(demand.items()))
            logger.debug(
                "Reserved {} seats across {} lessons (token {})",
                token.total_seats,
                len(token.lines),
                token.id,
            )
            return token

        logger.error(
            "Giving up reservation after {} conflicting attempts: {}",
            self._max_attempts,
            {str(lesson_id): seats for lesson_id, seats in demand.items()},
        )
        raise TransientError("Lessons are busy, please retry")

    def release(self, token: ReservationToken) -> None:
        """Give back every seat held by ``token``."""
        stranded = []
        for lesson_id, seats in token.lines:
            if not self._give_back(lesson_id, seats):
                stranded.append((str(lesson_id), seats))
        if stranded:
            logger.error("Release of token {} left seats stranded: {}", token.id, stranded)
            raise TransientError()
        logger.debug("Released token {} ({} seats)", token.id, token.total_seats)

    def _validate(self, demand: dict[LessonId, int]) -> dict[LessonId, Lesson]:
        lessons: dict[LessonId, Lesson] = {}
        for lesson_id in demand:
            lesson = self._store.get_lesson(lesson_id)
            if lesson is None:
                raise LessonNotFoundError(lesson_id)
            lessons[lesson_id] = lesson
        for lesson_id, seats in demand.items():
            available = lessons[lesson_id].capacity.value
            if available < seats:
                raise InsufficientCapacityError(lesson_id, requested=seats, available=available)
        return lessons

    def _apply(self, demand: dict[LessonId, int], lessons: dict[LessonId, Lesson]) -> None:
        applied: list[LessonId] = []
        # fixed id order
        for lesson_id in sorted(demand, key=str):
            lesson = lessons[lesson_id]
            remaining = lesson.capacity.value - demand[lesson_id]
            try:
                won = self._store.compare_and_set_capacity(lesson_id, lesson.version, remaining)
            except BaseException:
                self._undo(applied, demand)
                raise
            if not won:
                if not self._undo(applied, demand):
                    raise TransientError()
                raise ConcurrencyConflictError(lesson_id)
            applied.append(lesson_id)

    def _undo(self, applied: list[LessonId], demand: dict[LessonId, int]) -> bool:
        """Put back every decrement in ``applied``; False if any seats stayed stranded."""
        stranded = [
            (str(lesson_id), demand[lesson_id])
            for lesson_id in applied
            if not self._give_back(lesson_id, demand[lesson_id])
        ]
        if stranded:
            logger.error("Rollback left seats stranded: {}", stranded)
        return not stranded

    def _give_back(self, lesson_id: LessonId, seats: int) -> bool:
        for _ in range(self._max_attempts * RELEASE_ATTEMPTS_FACTOR):
            try:
                lesson = self._store.get_lesson(lesson_id)
                if lesson is None:
                    logger.error(
                        "Lesson {} vanished while holding {} reserved seats", lesson_id, seats
                    )
                    return False
                restored = lesson.capacity.value + seats
                if restored > lesson.initial_capacity.value:
                    logger.error(
                        "Releasing {} seats would lift lesson {} above its ceiling of {}",
                        seats,
                        lesson_id,
                        lesson.initial_capacity.value,
                    )
                    return False
                if self._store.compare_and_set_capacity(lesson_id, lesson.version, restored):
                    return True
            except StoreUnavailableError:
                logger.warning(
                    "Storage fault while returning {} seats to lesson {}", seats, lesson_id
                )
        return False
