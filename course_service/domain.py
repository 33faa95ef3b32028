"""Course aggregate and its Lesson entities.

A :class:`Course` owns its lessons. Lesson orders change only through the
course's ordering operations, which delegate the renumbering to the
course's :class:`~course_service.ordering.OrderingPolicy`. Soft-deleted
lessons stay in the aggregate with their last order but are invisible to
every ordering computation and to :attr:`Course.lessons`.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from .errors import InvalidArgument, NotFound, PreconditionFailed
from .ordering import OrderingPolicy, ShiftPolicy

logger = logging.getLogger("course_service")

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


class CourseStatus(str, Enum):
    DRAFT = "Draft"
    PUBLISHED = "Published"

    @classmethod
    def parse(cls, value) -> Optional["CourseStatus"]:
        """Case-insensitive lookup; unknown or empty values give None."""

        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        key = value.strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        return None


def _require_title(title: str, what: str) -> str:
    if not isinstance(title, str) or not title.strip():
        raise InvalidArgument(f"{what} title cannot be empty")
    return title


def _require_order(order: int, what: str = "Lesson order") -> int:
    if isinstance(order, bool) or not isinstance(order, int) or order < 1:
        raise InvalidArgument(f"{what} must be greater than 0")
    return order


def validate_lesson(title: str, order: int) -> None:
    """Validate lesson input; raises :class:`InvalidArgument`."""

    _require_title(title, "Lesson")
    _require_order(order)


class Lesson:
    __slots__ = (
        "_id",
        "_course_id",
        "_title",
        "_order",
        "_is_deleted",
        "_created_at",
        "_updated_at",
        "_clock",
    )

    def __init__(
        self,
        *,
        id: str,
        course_id: str,
        title: str,
        order: int,
        clock: Clock,
        is_deleted: bool = False,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> None:
        validate_lesson(title, order)
        self._id = id
        self._course_id = course_id
        self._title = title
        self._order = order
        self._is_deleted = is_deleted
        self._created_at = created_at or clock()
        self._updated_at = updated_at or self._created_at
        self._clock = clock

    @property
    def id(self) -> str:
        return self._id

    @property
    def course_id(self) -> str:
        return self._course_id

    @property
    def title(self) -> str:
        return self._title

    @property
    def order(self) -> int:
        return self._order

    @property
    def is_deleted(self) -> bool:
        return self._is_deleted

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def _update_order(self, new_order: int, at: datetime) -> None:
        # Only the owning course calls this, when applying an ordering plan.
        self._order = new_order
        self._updated_at = at

    def soft_delete(self, at: Optional[datetime] = None) -> None:
        at = at or self._clock()
        self._is_deleted = True
        self._updated_at = at

    def __repr__(self) -> str:
        flag = " deleted" if self._is_deleted else ""
        return f"<Lesson {self._id} order={self._order} {self._title!r}{flag}>"


class Course:
    def __init__(
        self,
        title: str,
        *,
        ordering: Optional[OrderingPolicy] = None,
        clock: Clock = utc_now,
        id_factory: IdFactory = new_id,
    ) -> None:
        _require_title(title, "Course")
        now = clock()
        self._id = id_factory()
        self._title = title
        self._status = CourseStatus.DRAFT
        self._is_deleted = False
        self._created_at = now
        self._updated_at = now
        self._lessons: List[Lesson] = []
        self._ordering = ordering or ShiftPolicy()
        self._clock = clock
        self._id_factory = id_factory
        self.version = 0

    @classmethod
    def restore(
        cls,
        *,
        id: str,
        title: str,
        status: CourseStatus,
        is_deleted: bool,
        created_at: datetime,
        updated_at: datetime,
        lessons: Iterable[dict],
        version: int = 0,
        ordering: Optional[OrderingPolicy] = None,
        clock: Clock = utc_now,
        id_factory: IdFactory = new_id,
    ) -> "Course":
        """Rebuild a stored aggregate without running creation rules."""

        course = cls.__new__(cls)
        course._id = id
        course._title = title
        course._status = CourseStatus(status)
        course._is_deleted = is_deleted
        course._created_at = created_at
        course._updated_at = updated_at
        course._ordering = ordering or ShiftPolicy()
        course._clock = clock
        course._id_factory = id_factory
        course._lessons = [Lesson(course_id=id, clock=clock, **row) for row in lessons]
        course.version = version
        return course

    @property
    def id(self) -> str:
        return self._id

    @property
    def title(self) -> str:
        return self._title

    @property
    def status(self) -> CourseStatus:
        return self._status

    @property
    def is_deleted(self) -> bool:
        return self._is_deleted

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    @property
    def ordering(self) -> OrderingPolicy:
        return self._ordering

    @property
    def lessons(self) -> Tuple[Lesson, ...]:
        """Active lessons sorted by order."""

        return tuple(sorted(self._active(), key=lambda l: l.order))

    @property
    def all_lessons(self) -> Tuple[Lesson, ...]:
        return tuple(self._lessons)

    def _active(self) -> List[Lesson]:
        return [l for l in self._lessons if not l.is_deleted]

    def _touch(self, at: Optional[datetime] = None) -> None:
        self._updated_at = at or self._clock()

    def get_lesson(self, lesson_id: str) -> Lesson:
        for lesson in self._lessons:
            if lesson.id == lesson_id and not lesson.is_deleted:
                return lesson
        raise NotFound(f"Lesson with ID {lesson_id} not found in course")

    def publish(self) -> None:
        if self._status is CourseStatus.PUBLISHED:
            return
        if not self._active():
            raise PreconditionFailed(
                "a course must have at least one active lesson to be published"
            )
        now = self._clock()
        self._status = CourseStatus.PUBLISHED
        self._touch(now)
        logger.info("course %s published", self._id)

    def unpublish(self) -> None:
        if self._status is CourseStatus.DRAFT:
            return
        now = self._clock()
        self._status = CourseStatus.DRAFT
        self._touch(now)
        logger.info("course %s moved back to draft", self._id)

    def add_lesson(self, title: str, order: int) -> Lesson:
        validate_lesson(title, order)
        plan = self._ordering.make_room(self._active(), order)
        now = self._clock()
        lesson = Lesson(
            id=self._id_factory(),
            course_id=self._id,
            title=title,
            order=order,
            clock=self._clock,
            created_at=now,
        )
        for target, value in plan:
            target._update_order(value, now)
        self._lessons.append(lesson)
        self._touch(now)
        logger.debug("course %s: added lesson %s at order %d", self._id, lesson.id, order)
        return lesson

    def reorder_lesson(self, lesson_id: str, new_order: int) -> None:
        _require_order(new_order, "New order")
        lesson = self.get_lesson(lesson_id)
        if lesson.order == new_order:
            return
        previous = lesson.order
        plan = self._ordering.move(self._active(), lesson, new_order)
        now = self._clock()
        for target, value in plan:
            target._update_order(value, now)
        self._touch(now)
        logger.debug(
            "course %s: lesson %s moved %d -> %d", self._id, lesson_id, previous, new_order
        )

    def remove_lesson(self, lesson_id: str) -> Lesson:
        """Soft-delete an active lesson; its order becomes free for reuse."""

        lesson = self.get_lesson(lesson_id)
        now = self._clock()
        lesson.soft_delete(now)
        self._touch(now)
        return lesson

    def soft_delete(self) -> None:
        now = self._clock()
        self._is_deleted = True
        self._touch(now)
        logger.info("course %s soft-deleted", self._id)

    def summary(self) -> dict:
        return {
            "id": self._id,
            "title": self._title,
            "status": self._status,
            "total_lessons": len(self._active()),
            "last_modified": self._updated_at,
        }

    def __repr__(self) -> str:
        return f"<Course {self._id} {self._title!r} {self._status.value}>"


__all__ = [
    "Course",
    "CourseStatus",
    "Lesson",
    "validate_lesson",
    "utc_now",
    "new_id",
]
