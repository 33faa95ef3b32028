# API Gateway
# JWT authentication, request logging and error mapping in front of
# the course service. Every course and lesson route requires a token.

from fastapi import FastAPI, HTTPException, Request, Response, Depends, Query, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import httpx
import jwt
import logging
import uvicorn
import time
from typing import Any, Optional
from pydantic import BaseModel
from datetime import datetime, timedelta, timezone

from .config import get_settings

# ─────────────────────────────────────────────
# Logging Setup
# ─────────────────────────────────────────────
def configure_logging() -> None:
    settings = get_settings()
    handlers = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
        handlers=handlers,
    )


configure_logging()
logger = logging.getLogger("api_gateway")

# ─────────────────────────────────────────────
# App Setup
# ─────────────────────────────────────────────
app = FastAPI(title="API Gateway", version="1.0.0")

security = HTTPBearer(auto_error=False)

SERVICE = "course"


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error(status_code: int, error: str, message: str, **extra) -> HTTPException:
    detail = {"error": error, "message": message}
    detail.update(extra)
    detail["timestamp"] = _timestamp()
    return HTTPException(status_code=status_code, detail=detail)


# ─────────────────────────────────────────────
# Pydantic Models
# ─────────────────────────────────────────────
class CourseCreate(BaseModel):
    title: str


class LessonCreate(BaseModel):
    title: str
    order: int


class LessonReorder(BaseModel):
    newOrder: int


class LoginRequest(BaseModel):
    username: str
    password: str


# ─────────────────────────────────────────────
# Request Logging Middleware
# ─────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    client = request.client.host if request.client else "unknown"

    logger.info(f"REQUEST  | {request.method} {request.url.path} | Client: {client}")

    try:
        response = await call_next(request)
        process_time = round((time.time() - start_time) * 1000, 2)

        logger.info(f"RESPONSE | {request.method} {request.url.path} | Status: {response.status_code} | Time: {process_time}ms")

        response.headers["X-Process-Time"] = f"{process_time}ms"
        return response

    except Exception as e:
        process_time = round((time.time() - start_time) * 1000, 2)
        logger.error(f"ERROR    | {request.method} {request.url.path} | Error: {str(e)} | Time: {process_time}ms")
        raise


# ─────────────────────────────────────────────
# JWT Helper Functions
# ─────────────────────────────────────────────
def create_access_token(data: dict) -> str:
    """Create a JWT token"""
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def verify_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> str:
    """Verify JWT token - use this as a dependency on protected routes"""
    if credentials is None:
        raise _error(status.HTTP_401_UNAUTHORIZED, "NOT_AUTHENTICATED", "Authorization header missing")
    settings = get_settings()
    try:
        payload = jwt.decode(credentials.credentials, settings.secret_key, algorithms=[settings.algorithm])
    except jwt.ExpiredSignatureError:
        raise _error(status.HTTP_401_UNAUTHORIZED, "TOKEN_EXPIRED", "Token has expired. Please login again.")
    except jwt.InvalidTokenError:
        raise _error(status.HTTP_401_UNAUTHORIZED, "INVALID_TOKEN", "Could not validate token")
    username = payload.get("sub")
    if username is None:
        raise _error(status.HTTP_401_UNAUTHORIZED, "INVALID_TOKEN", "Token payload is invalid")
    return username


# ─────────────────────────────────────────────
# Forwarding with Error Handling
# ─────────────────────────────────────────────
def _upstream_detail(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        body = response.json()
    except ValueError:
        return response.text
    return body.get("detail", body) if isinstance(body, dict) else body


def _make_client(settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.timeout_seconds)


async def forward_request(path: str, method: str, **kwargs) -> Any:
    """Forward request to the course service, mapping upstream failures"""
    settings = get_settings()
    url = f"{settings.course_service_url.rstrip('/')}{path}"
    logger.info(f"FORWARDING | {method} → {url}")

    async with _make_client(settings) as client:
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.ConnectError:
            logger.error(f"Cannot connect to {SERVICE} service at {url}")
            raise _error(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                "SERVICE_UNAVAILABLE",
                f"Cannot connect to {SERVICE} service. Make sure it is running.",
                service_url=settings.course_service_url,
            )
        except httpx.TimeoutException:
            logger.error(f"Timeout connecting to {SERVICE} service at {url}")
            raise _error(
                status.HTTP_504_GATEWAY_TIMEOUT,
                "GATEWAY_TIMEOUT",
                f"The {SERVICE} service took too long to respond",
            )
        except httpx.RequestError as e:
            logger.error(f"Request error for {SERVICE} service: {str(e)}")
            raise _error(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                "REQUEST_FAILED",
                f"Failed to reach {SERVICE} service: {str(e)}",
            )

    if response.status_code == 404:
        raise _error(
            404,
            "RESOURCE_NOT_FOUND",
            f"The requested resource was not found in {SERVICE} service",
            path=path,
            details=_upstream_detail(response),
        )
    elif response.status_code == 422:
        raise _error(
            422,
            "VALIDATION_ERROR",
            "Request data failed validation",
            details=_upstream_detail(response),
        )
    elif response.status_code >= 500:
        raise _error(
            502,
            "SERVICE_ERROR",
            f"The {SERVICE} service encountered an internal error",
        )

    if response.status_code == status.HTTP_204_NO_CONTENT or not response.content:
        return Response(status_code=response.status_code)
    return JSONResponse(content=response.json(), status_code=response.status_code)


# ─────────────────────────────────────────────
# Root Route
# ─────────────────────────────────────────────
@app.get("/")
def read_root():
    return {
        "message": "API Gateway is running",
        "available_services": [SERVICE],
        "version": "1.0.0",
    }


# ─────────────────────────────────────────────
# Auth Routes (Login to get token)
# ─────────────────────────────────────────────
@app.post("/auth/login", tags=["Authentication"])
def login(credentials: LoginRequest):
    """
    Login to get a JWT token.
    Users come from GATEWAY_USERS (defaults: admin / password123).
    """
    settings = get_settings()
    users = settings.users

    if credentials.username not in users or users[credentials.username] != credentials.password:
        logger.warning(f"Failed login attempt for user: {credentials.username}")
        raise _error(status.HTTP_401_UNAUTHORIZED, "INVALID_CREDENTIALS", "Incorrect username or password")

    token = create_access_token({"sub": credentials.username})
    logger.info(f"Successful login for user: {credentials.username}")
    return {
        "access_token": token,
        "token_type": "bearer",
        "expires_in": f"{settings.access_token_expire_minutes} minutes",
    }


# ─────────────────────────────────────────────
# Course Routes (Protected by JWT)
# ─────────────────────────────────────────────
@app.get("/gateway/courses", tags=["Courses"])
async def list_courses(
    page: int = 1,
    page_size: int = Query(10, alias="pageSize"),
    q: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    current_user: str = Depends(verify_token),
):
    """List courses (requires authentication)"""
    params = {"page": page, "pageSize": page_size}
    if q:
        params["q"] = q
    if status_filter:
        params["status"] = status_filter
    return await forward_request("/api/courses", "GET", params=params)


@app.post("/gateway/courses", tags=["Courses"])
async def create_course(course: CourseCreate, current_user: str = Depends(verify_token)):
    """Create a new draft course (requires authentication)"""
    return await forward_request("/api/courses", "POST", json=course.model_dump())


@app.get("/gateway/courses/{course_id}", tags=["Courses"])
async def get_course(course_id: str, current_user: str = Depends(verify_token)):
    """Get a course by ID (requires authentication)"""
    return await forward_request(f"/api/courses/{course_id}", "GET")


@app.get("/gateway/courses/{course_id}/summary", tags=["Courses"])
async def get_course_summary(course_id: str, current_user: str = Depends(verify_token)):
    return await forward_request(f"/api/courses/{course_id}/summary", "GET")


@app.post("/gateway/courses/{course_id}/publish", tags=["Courses"])
async def publish_course(course_id: str, current_user: str = Depends(verify_token)):
    """Publish a course (requires authentication)"""
    return await forward_request(f"/api/courses/{course_id}/publish", "POST")


@app.post("/gateway/courses/{course_id}/unpublish", tags=["Courses"])
async def unpublish_course(course_id: str, current_user: str = Depends(verify_token)):
    return await forward_request(f"/api/courses/{course_id}/unpublish", "POST")


@app.delete("/gateway/courses/{course_id}", tags=["Courses"])
async def delete_course(course_id: str, current_user: str = Depends(verify_token)):
    """Soft-delete a course (requires authentication)"""
    return await forward_request(f"/api/courses/{course_id}", "DELETE")


# ─────────────────────────────────────────────
# Lesson Routes (Protected by JWT)
# ─────────────────────────────────────────────
@app.get("/gateway/courses/{course_id}/lessons", tags=["Lessons"])
async def list_lessons(
    course_id: str,
    page: int = 1,
    page_size: int = Query(10, alias="pageSize"),
    current_user: str = Depends(verify_token),
):
    params = {"page": page, "pageSize": page_size}
    return await forward_request(f"/api/courses/{course_id}/lessons", "GET", params=params)


@app.post("/gateway/courses/{course_id}/lessons", tags=["Lessons"])
async def add_lesson(course_id: str, lesson: LessonCreate, current_user: str = Depends(verify_token)):
    """Add a lesson to a course (requires authentication)"""
    return await forward_request(f"/api/courses/{course_id}/lessons", "POST", json=lesson.model_dump())


@app.get("/gateway/courses/{course_id}/lessons/{lesson_id}", tags=["Lessons"])
async def get_lesson(course_id: str, lesson_id: str, current_user: str = Depends(verify_token)):
    return await forward_request(f"/api/courses/{course_id}/lessons/{lesson_id}", "GET")


@app.put("/gateway/courses/{course_id}/lessons/{lesson_id}/order", tags=["Lessons"])
async def reorder_lesson(
    course_id: str,
    lesson_id: str,
    body: LessonReorder,
    current_user: str = Depends(verify_token),
):
    """Move a lesson to a new order (requires authentication)"""
    return await forward_request(
        f"/api/courses/{course_id}/lessons/{lesson_id}/order",
        "PUT",
        json=body.model_dump(),
    )


@app.delete("/gateway/courses/{course_id}/lessons/{lesson_id}", tags=["Lessons"])
async def delete_lesson(course_id: str, lesson_id: str, current_user: str = Depends(verify_token)):
    """Soft-delete a lesson (requires authentication)"""
    return await forward_request(f"/api/courses/{course_id}/lessons/{lesson_id}", "DELETE")


def run() -> None:
    """Serve the gateway with uvicorn (GATEWAY_HOST / GATEWAY_PORT)."""
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
