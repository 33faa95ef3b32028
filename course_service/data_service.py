"""In-memory storage for course aggregates.

Courses are kept as plain records and rebuilt on every load, so a caller
mutating a loaded aggregate never touches stored state until ``save``.
Soft-deleted courses are hidden from loads and listings unless asked for.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from .domain import Clock, Course, CourseStatus, IdFactory, new_id, utc_now
from .errors import Conflict, NotFound
from .ordering import OrderingPolicy, ShiftPolicy

logger = logging.getLogger("course_service")


def _lesson_record(lesson) -> dict:
    return {
        "id": lesson.id,
        "title": lesson.title,
        "order": lesson.order,
        "is_deleted": lesson.is_deleted,
        "created_at": lesson.created_at,
        "updated_at": lesson.updated_at,
    }


def _course_record(course: Course) -> dict:
    return {
        "id": course.id,
        "title": course.title,
        "status": course.status.value,
        "is_deleted": course.is_deleted,
        "created_at": course.created_at,
        "updated_at": course.updated_at,
        "version": course.version,
        "lessons": [_lesson_record(l) for l in course.all_lessons],
    }


class CourseDataService:
    def __init__(
        self,
        ordering: Optional[OrderingPolicy] = None,
        clock: Clock = utc_now,
        id_factory: IdFactory = new_id,
    ) -> None:
        self.ordering = ordering or ShiftPolicy()
        self._clock = clock
        self._id_factory = id_factory
        self._records: Dict[str, dict] = {}
        self._lock = threading.Lock()

    def now(self) -> datetime:
        return self._clock()

    def new_id(self) -> str:
        return self._id_factory()

    def new_course(self, title: str) -> Course:
        return Course(
            title,
            ordering=self.ordering,
            clock=self._clock,
            id_factory=self._id_factory,
        )

    def _rebuild(self, record: dict) -> Course:
        return Course.restore(
            id=record["id"],
            title=record["title"],
            status=CourseStatus(record["status"]),
            is_deleted=record["is_deleted"],
            created_at=record["created_at"],
            updated_at=record["updated_at"],
            lessons=[dict(row) for row in record["lessons"]],
            version=record["version"],
            ordering=self.ordering,
            clock=self._clock,
            id_factory=self._id_factory,
        )

    def load(self, course_id: str, include_deleted: bool = False) -> Course:
        with self._lock:
            record = self._records.get(course_id)
        if record is None or (record["is_deleted"] and not include_deleted):
            raise NotFound(f"Course with ID {course_id} not found")
        return self._rebuild(record)

    def add(self, course: Course) -> Course:
        with self._lock:
            if course.id in self._records:
                raise Conflict(f"Course with ID {course.id} already exists")
            course.version = 1
            self._records[course.id] = _course_record(course)
        logger.info("stored course %s", course.id)
        return course

    def save(self, course: Course) -> Course:
        with self._lock:
            stored = self._records.get(course.id)
            if stored is None:
                raise NotFound(f"Course with ID {course.id} not found")
            if stored["version"] != course.version:
                logger.warning(
                    "stale save for course %s (have v%d, stored v%d)",
                    course.id,
                    course.version,
                    stored["version"],
                )
                raise Conflict("course was modified by another request")
            course.version += 1
            self._records[course.id] = _course_record(course)
        return course

    def list_courses(
        self,
        page: int,
        page_size: int,
        q: Optional[str] = None,
        status: Optional[CourseStatus] = None,
    ) -> Tuple[List[Course], int]:
        with self._lock:
            records = [r for r in self._records.values() if not r["is_deleted"]]
        if q and q.strip():
            needle = q.strip().lower()
            records = [r for r in records if needle in r["title"].lower()]
        if status is not None:
            records = [r for r in records if r["status"] == CourseStatus(status).value]
        records.sort(key=lambda r: r["created_at"], reverse=True)
        start = (page - 1) * page_size
        items = [self._rebuild(r) for r in records[start : start + page_size]]
        return items, len(records)


__all__ = ["CourseDataService"]
