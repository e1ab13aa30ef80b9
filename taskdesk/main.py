import uuid
import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from taskdesk.config import CLIENT_URL
from taskdesk.database import Base, engine
from taskdesk.routers import auth, tasks, users

logger = structlog.get_logger()

Base.metadata.create_all(bind=engine)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag every request with an id, bound into structlog and echoed back."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


app = FastAPI(title="TaskDesk API")

app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[CLIENT_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routers
app.include_router(auth.router)
app.include_router(tasks.router)
app.include_router(users.router)


@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}


def _error(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message}, headers=headers)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    err = errors[0]
    field = str(err["loc"][-1]) if err.get("loc") else "body"
    if err.get("type") == "missing":
        return f"{field[:1].upper()}{field[1:]} is required"
    msg = err.get("msg", "Invalid request")
    # pydantic prefixes messages raised from our own validators
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    return f"{field}: {msg}" if field not in msg.lower() else msg


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


# a path id that cannot name a row is reported like a missing row
_NOT_FOUND_MESSAGES = {tasks.router.prefix: "Task not found", users.router.prefix: "User not found"}


def _not_found_message(path: str) -> str:
    for prefix, message in _NOT_FOUND_MESSAGES.items():
        if path.startswith(prefix):
            return message
    return "Not found"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    if any(tuple(err.get("loc", ()))[:1] == ("path",) for err in exc.errors()):
        return _error(404, _not_found_message(request.url.path))
    return _error(400, _validation_message(exc))


# Generic error handler to return JSON errors for unexpected exceptions
@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception("request.failed", path=request.url.path, method=request.method)
    return _error(500, "Internal server error")
