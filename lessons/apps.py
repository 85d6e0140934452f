from dataclasses import dataclass

from django.apps import AppConfig
from django.conf import settings

from lessons.services import CapacityLedger, LessonService, OrderService
from lessons.stores.interfaces import LessonStore, OrderStore


@dataclass(frozen=True)
class Services:
    """Service graph shared by every request in this process."""

    lessons: LessonService
    orders: OrderService


def build_services(lesson_store: LessonStore, order_store: OrderStore, max_attempts: int) -> Services:
    ledger = CapacityLedger(lesson_store, max_attempts=max_attempts)
    return Services(
        lessons=LessonService(lesson_store),
        orders=OrderService(order_store, ledger),
    )


class LessonsConfig(AppConfig):
    name = "lessons"
    default_auto_field = "django.db.models.BigAutoField"
    services: Services

    def ready(self) -> None:
        from lessons.stores.django_store import DjangoLessonStore, DjangoOrderStore

        self.services = build_services(
            DjangoLessonStore(),
            DjangoOrderStore(),
            max_attempts=settings.RESERVATION_MAX_ATTEMPTS,
        )
