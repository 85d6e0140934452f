from django.urls import path

from lessons.handlers import LessonDetailView, LessonListView, OrderCreateView, OrderDetailView

urlpatterns = [
    path("lessons", LessonListView.as_view(), name="lesson-list"),
    path("lessons/<str:lesson_id>", LessonDetailView.as_view(), name="lesson-detail"),
    path("orders", OrderCreateView.as_view(), name="order-create"),
    path("orders/<str:order_id>", OrderDetailView.as_view(), name="order-detail"),
]
