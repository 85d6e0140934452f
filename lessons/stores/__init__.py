from lessons.stores.interfaces import (
    DuplicateIdempotencyKeyError,
    LessonStore,
    OrderStore,
    StoreUnavailableError,
)
from lessons.stores.memory_store import InMemoryLessonStore, InMemoryOrderStore

__all__ = [
    "LessonStore",
    "OrderStore",
    "StoreUnavailableError",
    "DuplicateIdempotencyKeyError",
    "InMemoryLessonStore",
    "InMemoryOrderStore",
]
