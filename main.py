"""
Sharpmarks API

Main FastAPI application for the Sharpmarks gradebook: teachers and admins
manage classes, rosters, weighted assessments and component marks; students
view their own results.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Settings, get_settings, setup_logging
from database import Database
from api import auth_router, legacy_auth_router, classes_router, students_router, assessments_router
from services import (
    GradebookError,
    AuthenticationError,
    AccessDeniedError,
    NotFoundError,
    ValidationError,
    ConflictError,
)

logger = logging.getLogger(__name__)


ERROR_STATUS_CODES = {
    AuthenticationError: 401,
    AccessDeniedError: 403,
    NotFoundError: 404,
    ValidationError: 400,
    ConflictError: 409,
}


def _status_for(exc: GradebookError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 400


async def gradebook_error_handler(request: Request, exc: GradebookError):
    """Map service-layer errors to their status codes."""
    status_code = _status_for(exc)
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content={"detail": exc.message}, headers=headers)


async def global_exception_handler(request: Request, exc: Exception):
    """Anything unexpected is logged and reported as an opaque 500."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use, defaults to the environment
        database: Store to use, defaults to one built from settings.database_url
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    database = database or Database(settings.database_url, echo=settings.sql_echo)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan handler: initialise the database on startup."""
        logger.info("Initializing database...")
        database.init_db()
        yield
        database.dispose()

    app = FastAPI(
        title="Sharpmarks API",
        description="""
Gradebook API for classes, rosters, weighted assessments and component marks.

### Authorization Rules
- **Admins**: Full access to every class, assessment and mark
- **Teachers**: Manage only the classes they own, plus the shared roster
- **Students**: Read-only access to enrolled classes and their own marks
        """,
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(GradebookError, gradebook_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    app.include_router(auth_router)
    app.include_router(legacy_auth_router)
    app.include_router(classes_router)
    app.include_router(students_router)
    app.include_router(assessments_router)

    @app.get("/", tags=["Health"])
    async def root():
        """Root endpoint - API health check."""
        return {
            "status": "online",
            "service": "Sharpmarks API",
            "version": app.version,
        }

    @app.get("/health", tags=["Health"])
    def health_check():
        """Health check endpoint, including the database."""
        database.ping()
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
