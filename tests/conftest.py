"""Pytest configuration and shared fixtures."""

import pytest
from rest_framework.test import APIClient

from lessons.apps import build_services
from lessons.domain import Lesson
from lessons.stores import InMemoryLessonStore, InMemoryOrderStore
from tests.factories import make_lesson


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def lesson_store() -> InMemoryLessonStore:
    return InMemoryLessonStore()


@pytest.fixture
def order_store() -> InMemoryOrderStore:
    return InMemoryOrderStore()


@pytest.fixture
def services(lesson_store, order_store):
    return build_services(lesson_store, order_store, max_attempts=5)


@pytest.fixture
def add_lesson(lesson_store):
    def _add(capacity: int = 5, **kwargs) -> Lesson:
        return lesson_store.create_lesson(make_lesson(capacity=capacity, **kwargs))

    return _add
