"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in lessons/models.py (persistence layer).
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from lessons.domain.value_objects import Capacity, LessonId, Money, OrderId, SeatCount


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Lesson:
    """Domain representation of a Lesson.

    ``capacity`` is the number of seats still available and only ever
    changes through the capacity ledger. ``initial_capacity`` is the ceiling
    fixed when the lesson was created; ``version`` increments on every
    capacity write.
    """

    id: LessonId
    topic: str
    location: str
    price: Money
    capacity: Capacity
    initial_capacity: Capacity
    version: int = 0
    image: str | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if not self.topic:
            raise ValueError("Topic cannot be empty")
        if not self.location:
            raise ValueError("Location cannot be empty")
        if self.capacity.value > self.initial_capacity.value:
            raise ValueError("Capacity cannot exceed the initial capacity")


@dataclass(frozen=True)
class OrderLine:
    """One requested line of an order."""

    lesson_id: LessonId
    seats: SeatCount


@dataclass(frozen=True)
class Order:
    """Domain representation of a placed Order. Immutable once created."""

    id: OrderId
    name: str
    phone: str
    lines: tuple[OrderLine, ...]
    created_at: datetime
    idempotency_key: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Name cannot be empty")
        if not self.phone:
            raise ValueError("Phone cannot be empty")
        if not self.lines:
            raise ValueError("An order needs at least one line")

    @classmethod
    def place(
        cls,
        name: str,
        phone: str,
        lines: tuple[OrderLine, ...],
        idempotency_key: str | None = None,
    ) -> "Order":
        return cls(
            id=OrderId(uuid4()),
            name=name,
            phone=phone,
            lines=lines,
            created_at=_utcnow(),
            idempotency_key=idempotency_key,
        )

    @property
    def seats_by_lesson(self) -> dict[LessonId, int]:
        return coalesce_lines((line.lesson_id, line.seats.value) for line in self.lines)


@dataclass(frozen=True)
class ReservationToken:
    """Proof of a successful reserve_many call; pass to release() to undo it."""

    id: UUID
    lines: tuple[tuple[LessonId, int], ...]
    reserved_at: datetime = field(default_factory=_utcnow)

    @property
    def total_seats(self) -> int:
        return sum(seats for _, seats in self.lines)


def coalesce_lines(lines) -> dict[LessonId, int]:
    """Sum seats per lesson id, keeping the order each id first appeared in."""
    demand: dict[LessonId, int] = {}
    for lesson_id, seats in lines:
        demand[lesson_id] = demand.get(lesson_id, 0) + seats
    return demand
