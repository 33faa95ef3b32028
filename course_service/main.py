# Course Service
# Owns the Course aggregate and exposes it over HTTP.
# Authentication happens in the gateway; this service trusts its callers.

from fastapi import Depends, FastAPI, Query, Request, Response, status
from fastapi.responses import JSONResponse
import logging
import uvicorn
import time
from datetime import datetime, timezone
from typing import Optional

from .config import get_settings
from .errors import CourseError
from .models import (
    CourseCreate,
    CourseOut,
    CoursePage,
    CourseSummary,
    LessonCreate,
    LessonOut,
    LessonPage,
    LessonReorder,
)
from .service import CourseService, get_course_service

# ─────────────────────────────────────────────
# Logging Setup
# ─────────────────────────────────────────────
def configure_logging() -> None:
    settings = get_settings()
    handlers = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s | %(levelname)s | %(message)s",
        handlers=handlers,
    )


configure_logging()
logger = logging.getLogger("course_service")

# ─────────────────────────────────────────────
# App Setup
# ─────────────────────────────────────────────
app = FastAPI(title="Course Service", version="1.0.0")


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


# ─────────────────────────────────────────────
# Request Logging Middleware
# ─────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    logger.info(f"REQUEST  | {request.method} {request.url.path}")
    try:
        response = await call_next(request)
    except Exception as e:
        process_time = round((time.time() - start_time) * 1000, 2)
        logger.error(f"ERROR    | {request.method} {request.url.path} | Error: {str(e)} | Time: {process_time}ms")
        raise
    process_time = round((time.time() - start_time) * 1000, 2)
    logger.info(f"RESPONSE | {request.method} {request.url.path} | Status: {response.status_code} | Time: {process_time}ms")
    response.headers["X-Process-Time"] = f"{process_time}ms"
    return response


# ─────────────────────────────────────────────
# Error Handling
# ─────────────────────────────────────────────
@app.exception_handler(CourseError)
async def handle_course_error(request: Request, exc: CourseError):
    logger.warning(f"REJECTED | {request.method} {request.url.path} | {exc.error}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": {
                "error": exc.error,
                "message": exc.message,
                "timestamp": _timestamp(),
            }
        },
    )


# ─────────────────────────────────────────────
# Root Route
# ─────────────────────────────────────────────
@app.get("/")
def read_root():
    return {
        "message": "Course Service is running",
        "ordering_policy": get_course_service().data.ordering.name,
        "version": "1.0.0",
    }


# ─────────────────────────────────────────────
# Course Routes
# ─────────────────────────────────────────────
@app.get("/api/courses", response_model=CoursePage, tags=["Courses"])
def list_courses(
    page: int = Query(1),
    page_size: int = Query(10, alias="pageSize"),
    q: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    service: CourseService = Depends(get_course_service),
):
    """List courses, newest first, optionally filtered by title and status"""
    courses, total = service.list_courses(page, page_size, q=q, status=status_filter)
    return CoursePage(
        items=[CourseOut.from_course(c) for c in courses],
        page=page,
        page_size=page_size,
        total=total,
        total_pages=CoursePage.pages(total, page_size),
    )


@app.post("/api/courses", response_model=CourseOut, status_code=status.HTTP_201_CREATED, tags=["Courses"])
def create_course(payload: CourseCreate, service: CourseService = Depends(get_course_service)):
    """Create a new draft course"""
    return CourseOut.from_course(service.create_course(payload.title))


@app.get("/api/courses/{course_id}", response_model=CourseOut, tags=["Courses"])
def get_course(course_id: str, service: CourseService = Depends(get_course_service)):
    """Get a course with its active lessons"""
    return CourseOut.from_course(service.get_course(course_id))


@app.get("/api/courses/{course_id}/summary", response_model=CourseSummary, tags=["Courses"])
def get_course_summary(course_id: str, service: CourseService = Depends(get_course_service)):
    return CourseSummary(**service.get_summary(course_id))


@app.post("/api/courses/{course_id}/publish", response_model=CourseOut, tags=["Courses"])
def publish_course(course_id: str, service: CourseService = Depends(get_course_service)):
    """Publish a course (needs at least one active lesson)"""
    return CourseOut.from_course(service.publish(course_id))


@app.post("/api/courses/{course_id}/unpublish", response_model=CourseOut, tags=["Courses"])
def unpublish_course(course_id: str, service: CourseService = Depends(get_course_service)):
    return CourseOut.from_course(service.unpublish(course_id))


@app.delete("/api/courses/{course_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["Courses"])
def delete_course(course_id: str, service: CourseService = Depends(get_course_service)):
    """Soft-delete a course"""
    service.delete_course(course_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ─────────────────────────────────────────────
# Lesson Routes
# ─────────────────────────────────────────────
@app.get("/api/courses/{course_id}/lessons", response_model=LessonPage, tags=["Lessons"])
def list_lessons(
    course_id: str,
    page: int = Query(1),
    page_size: int = Query(10, alias="pageSize"),
    service: CourseService = Depends(get_course_service),
):
    """List the active lessons of a course in order"""
    lessons, total = service.list_lessons(course_id, page, page_size)
    return LessonPage(
        items=[LessonOut.from_lesson(l) for l in lessons],
        page=page,
        page_size=page_size,
        total=total,
        total_pages=LessonPage.pages(total, page_size),
    )


@app.post(
    "/api/courses/{course_id}/lessons",
    response_model=LessonOut,
    status_code=status.HTTP_201_CREATED,
    tags=["Lessons"],
)
def add_lesson(course_id: str, payload: LessonCreate, service: CourseService = Depends(get_course_service)):
    """Add a lesson at the requested order"""
    return LessonOut.from_lesson(service.add_lesson(course_id, payload.title, payload.order))


@app.get("/api/courses/{course_id}/lessons/{lesson_id}", response_model=LessonOut, tags=["Lessons"])
def get_lesson(course_id: str, lesson_id: str, service: CourseService = Depends(get_course_service)):
    return LessonOut.from_lesson(service.get_lesson(course_id, lesson_id))


@app.put("/api/courses/{course_id}/lessons/{lesson_id}/order", response_model=CourseOut, tags=["Lessons"])
def reorder_lesson(
    course_id: str,
    lesson_id: str,
    payload: LessonReorder,
    service: CourseService = Depends(get_course_service),
):
    """Move a lesson to a new order and return the course as reordered"""
    return CourseOut.from_course(service.reorder_lesson(course_id, lesson_id, payload.new_order))


@app.delete(
    "/api/courses/{course_id}/lessons/{lesson_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["Lessons"],
)
def delete_lesson(course_id: str, lesson_id: str, service: CourseService = Depends(get_course_service)):
    """Soft-delete a lesson"""
    service.delete_lesson(course_id, lesson_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def run() -> None:
    """Serve the course service with uvicorn (COURSE_HOST / COURSE_PORT)."""
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
