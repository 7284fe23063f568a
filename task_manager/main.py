import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .config import CORS_ORIGINS, LOG_LEVEL
from .database import create_tables
from .errors import Internal, TaskManagerError
from .logging_config import setup_logging
from .routers import auth, tasks

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(LOG_LEVEL)
    create_tables()
    yield


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    error = errors[0]
    if error.get("type") == "value_error":
        return str(error["ctx"]["error"])
    location = [str(part) for part in error.get("loc", ()) if part != "body"]
    field = ".".join(location)
    if error.get("type") == "enum":
        return f"Invalid {field}: must be one of {error['ctx']['expected']}"
    if error.get("type") == "missing":
        return f"{field} is required" if field else "Request body is required"
    return f"Invalid {field}: {error.get('msg')}" if field else f"Invalid request: {error.get('msg')}"


async def task_manager_error_handler(request: Request, exc: TaskManagerError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message}, headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"message": _validation_message(exc)})


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Storage failure", extra={"path": str(request.url.path)})
    return JSONResponse(status_code=500, content={"message": Internal().message})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception", extra={"path": str(request.url.path)})
    return JSONResponse(status_code=500, content={"message": Internal().message})


def create_app() -> FastAPI:
    app = FastAPI(
        title="Task Manager API",
        description="Personal task tracking with owner-scoped task resources",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TaskManagerError, task_manager_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Include routers
    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(tasks.router, prefix="/api", tags=["tasks"])

    @app.get("/")
    def read_root():
        return {"message": "Task Manager API"}

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    return app


app = create_app()
