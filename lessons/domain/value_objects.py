"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from typing import Self
from uuid import UUID


@dataclass(frozen=True)
class LessonId:
    """Unique identifier for a Lesson."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value).strip()))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class OrderId:
    """Unique identifier for an Order."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value).strip()))

    def __str__(self) -> str:
        return str(self.value)


def _require_int(value: object, label: str) -> None:
    # bool is an int subclass; True seats is never what the caller meant
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{label} must be an integer")


@dataclass(frozen=True)
class Money:
    """Price in minor currency units (pence)."""

    amount: int

    def __post_init__(self) -> None:
        _require_int(self.amount, "Money amount")
        if self.amount < 1:
            raise ValueError("Money amount must be at least 1")

    def __str__(self) -> str:
        return f"{self.amount // 100}.{self.amount % 100:02d}"


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing remaining seats."""

    value: int

    def __post_init__(self) -> None:
        _require_int(self.value, "Capacity")
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")


@dataclass(frozen=True)
class SeatCount:
    """Positive number of seats requested on one order line."""

    value: int

    def __post_init__(self) -> None:
        _require_int(self.value, "Seats")
        if self.value < 1:
            raise ValueError("Seats must be at least 1")
