"""Shared pytest fixtures for the course service and gateway tests."""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from course_service.data_service import CourseDataService
from course_service.domain import Course
from course_service.main import app
from course_service.ordering import RejectPolicy, ShiftPolicy
from course_service.service import CourseService, get_course_service


class FakeClock:
    """Deterministic clock; each call advances by one second."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ids():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def make_course(clock, ids):
    def factory(title: str = "Python Fundamentals", lessons=(), policy: str = "shift") -> Course:
        ordering = ShiftPolicy() if policy == "shift" else RejectPolicy()
        course = Course(title, ordering=ordering, clock=clock, id_factory=ids)
        for lesson_title, order in lessons:
            course.add_lesson(lesson_title, order)
        return course

    return factory


@pytest.fixture
def course_service(clock, ids) -> CourseService:
    return CourseService(CourseDataService(ordering=ShiftPolicy(), clock=clock, id_factory=ids))


@pytest.fixture
def course_client(course_service):
    app.dependency_overrides[get_course_service] = lambda: course_service
    client = TestClient(app)
    yield client
    app.dependency_overrides.pop(get_course_service, None)

