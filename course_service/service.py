"""Course use cases: load an aggregate, run one operation, save it."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import List, Optional, Tuple, Union

from .config import get_settings
from .data_service import CourseDataService
from .domain import Course, CourseStatus, Lesson
from .errors import InvalidArgument
from .ordering import get_policy

logger = logging.getLogger("course_service")


def _check_paging(page: int, page_size: int) -> None:
    if page < 1:
        raise InvalidArgument("Page must be greater than 0")
    if page_size < 1:
        raise InvalidArgument("PageSize must be greater than 0")


class CourseService:
    def __init__(self, data: CourseDataService) -> None:
        self.data = data

    def create_course(self, title: str) -> Course:
        course = self.data.new_course(title)
        self.data.add(course)
        logger.info("created course %s (%s ordering)", course.id, course.ordering.name)
        return course

    def get_course(self, course_id: str) -> Course:
        return self.data.load(course_id)

    def list_courses(
        self,
        page: int = 1,
        page_size: int = 10,
        q: Optional[str] = None,
        status: Union[CourseStatus, str, None] = None,
    ) -> Tuple[List[Course], int]:
        _check_paging(page, page_size)
        return self.data.list_courses(page, page_size, q=q, status=CourseStatus.parse(status))

    def get_summary(self, course_id: str) -> dict:
        return self.data.load(course_id).summary()

    def publish(self, course_id: str) -> Course:
        course = self.data.load(course_id)
        course.publish()
        return self.data.save(course)

    def unpublish(self, course_id: str) -> Course:
        course = self.data.load(course_id)
        course.unpublish()
        return self.data.save(course)

    def delete_course(self, course_id: str) -> None:
        course = self.data.load(course_id)
        course.soft_delete()
        self.data.save(course)

    def add_lesson(self, course_id: str, title: str, order: int) -> Lesson:
        course = self.data.load(course_id)
        lesson = course.add_lesson(title, order)
        self.data.save(course)
        return lesson

    def list_lessons(
        self, course_id: str, page: int = 1, page_size: int = 10
    ) -> Tuple[List[Lesson], int]:
        _check_paging(page, page_size)
        lessons = self.data.load(course_id).lessons
        start = (page - 1) * page_size
        return list(lessons[start : start + page_size]), len(lessons)

    def get_lesson(self, course_id: str, lesson_id: str) -> Lesson:
        return self.data.load(course_id).get_lesson(lesson_id)

    def reorder_lesson(self, course_id: str, lesson_id: str, new_order: int) -> Course:
        course = self.data.load(course_id)
        course.reorder_lesson(lesson_id, new_order)
        return self.data.save(course)

    def delete_lesson(self, course_id: str, lesson_id: str) -> None:
        course = self.data.load(course_id)
        course.remove_lesson(lesson_id)
        self.data.save(course)


@lru_cache(maxsize=1)
def get_course_service() -> CourseService:
    settings = get_settings()
    return CourseService(CourseDataService(ordering=get_policy(settings.ordering_policy)))


__all__ = ["CourseService", "get_course_service"]
