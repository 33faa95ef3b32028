from .domain import Course, CourseStatus, Lesson, validate_lesson
from .errors import Conflict, CourseError, InvalidArgument, NotFound, PreconditionFailed
from .ordering import OrderingPolicy, RejectPolicy, ShiftPolicy, get_policy

__all__ = [
    "Course",
    "CourseStatus",
    "Lesson",
    "validate_lesson",
    "CourseError",
    "InvalidArgument",
    "NotFound",
    "PreconditionFailed",
    "Conflict",
    "OrderingPolicy",
    "ShiftPolicy",
    "RejectPolicy",
    "get_policy",
]
