from __future__ import annotations

import math
from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from .domain import Course, CourseStatus, Lesson


class CourseCreate(BaseModel):
    title: str


class LessonCreate(BaseModel):
    title: str
    order: int


class LessonReorder(BaseModel):
    new_order: int = Field(alias="newOrder")

    model_config = ConfigDict(populate_by_name=True)


class LessonOut(BaseModel):
    id: str
    course_id: str = Field(alias="courseId")
    title: str
    order: int
    is_deleted: bool = Field(default=False, alias="isDeleted")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_lesson(cls, lesson: Lesson) -> "LessonOut":
        return cls(
            id=lesson.id,
            course_id=lesson.course_id,
            title=lesson.title,
            order=lesson.order,
            is_deleted=lesson.is_deleted,
            created_at=lesson.created_at,
            updated_at=lesson.updated_at,
        )


class CourseOut(BaseModel):
    id: str
    title: str
    status: CourseStatus
    is_deleted: bool = Field(default=False, alias="isDeleted")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    lessons: List[LessonOut] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_course(cls, course: Course) -> "CourseOut":
        return cls(
            id=course.id,
            title=course.title,
            status=course.status,
            is_deleted=course.is_deleted,
            created_at=course.created_at,
            updated_at=course.updated_at,
            lessons=[LessonOut.from_lesson(l) for l in course.lessons],
        )


class CourseSummary(BaseModel):
    id: str
    title: str
    status: CourseStatus
    total_lessons: int = Field(alias="totalLessons")
    last_modified: datetime = Field(alias="lastModified")

    model_config = ConfigDict(populate_by_name=True)


class _Page(BaseModel):
    page: int
    page_size: int = Field(alias="pageSize")
    total: int
    total_pages: int = Field(alias="totalPages")

    model_config = ConfigDict(populate_by_name=True)

    @staticmethod
    def pages(total: int, page_size: int) -> int:
        return math.ceil(total / page_size) if page_size else 0


class CoursePage(_Page):
    items: List[CourseOut]


class LessonPage(_Page):
    items: List[LessonOut]
