from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from jot.api.routes import auth, files, folders, health, notes, profile
from jot.core.config import get_settings
from jot.core.exceptions import AppError
from jot.core.middleware import RequestSizeLimitMiddleware, SecurityHeadersMiddleware
from jot.db.bootstrap import ensure_runtime_schema_compatibility

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_runtime_schema_compatibility()
    yield


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": exc.details},
        headers=getattr(exc, "headers", None),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "details": {}},
        headers=getattr(exc, "headers", None),
    )


def _describe_validation_error(errors: list[dict]) -> str:
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if first.get("type") == "missing":
        return f"{field or 'Request body'} is required"
    message = str(first.get("msg", "Invalid value")).removeprefix("Value error, ")
    return f"Invalid {field}: {message}" if field else message


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_encoder(exc.errors())
    return JSONResponse(
        status_code=400,
        content={"error": _describe_validation_error(errors), "details": {"errors": errors}},
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error while handling %s %s", request.method, request.url.path)
    details = {} if settings.is_production else {"reason": str(exc)}
    return JSONResponse(status_code=500, content={"error": "Internal server error", "details": details})


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(StarletteHTTPException, http_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(SQLAlchemyError, database_error_handler)

app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(SecurityHeadersMiddleware, settings=settings)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(auth.router, prefix=f"{settings.api_prefix}/auth", tags=["auth"])
app.include_router(profile.router, prefix=f"{settings.api_prefix}/user", tags=["profile"])
app.include_router(notes.router, prefix=f"{settings.api_prefix}/notes", tags=["notes"])
app.include_router(folders.router, prefix=f"{settings.api_prefix}/folders", tags=["folders"])
app.include_router(files.router, prefix=f"{settings.api_prefix}/files", tags=["files"])
