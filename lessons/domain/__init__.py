from lessons.domain.models import Lesson, Order, OrderLine, ReservationToken, coalesce_lines
from lessons.domain.value_objects import Capacity, LessonId, Money, OrderId, SeatCount

__all__ = [
    "Lesson",
    "Order",
    "OrderLine",
    "ReservationToken",
    "coalesce_lines",
    "LessonId",
    "OrderId",
    "Money",
    "Capacity",
    "SeatCount",
]
