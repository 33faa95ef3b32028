"""Error kinds raised by the course aggregate and its service layer."""

from __future__ import annotations


class CourseError(Exception):
    error = "COURSE_ERROR"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgument(CourseError):
    error = "INVALID_ARGUMENT"
    status_code = 400


class NotFound(CourseError):
    error = "NOT_FOUND"
    status_code = 404


class PreconditionFailed(CourseError):
    error = "PRECONDITION_FAILED"
    status_code = 400


class Conflict(CourseError):
    error = "CONFLICT"
    status_code = 409


__all__ = [
    "CourseError",
    "InvalidArgument",
    "NotFound",
    "PreconditionFailed",
    "Conflict",
]
