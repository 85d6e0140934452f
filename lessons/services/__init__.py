from lessons.services.capacity_ledger import CapacityLedger
from lessons.services.lesson_service import LessonService
from lessons.services.order_service import OrderService

__all__ = ["CapacityLedger", "LessonService", "OrderService"]
