from lessons.handlers.views import (
    HealthView,
    LessonDetailView,
    LessonListView,
    OrderCreateView,
    OrderDetailView,
)

__all__ = [
    "HealthView",
    "LessonListView",
    "LessonDetailView",
    "OrderCreateView",
    "OrderDetailView",
]
