"""
Students API - FastAPI Application Entry Point.

This is the main application module that:
1. Builds the FastAPI app with CORS middleware
2. Sets up structured JSON logging
3. Opens the database engine at startup and disposes it at shutdown
4. Implements request ID middleware (X-Request-ID header)
5. Registers the /Students routes and exception handlers
6. Provides health check endpoint

The application follows a modular architecture:
- routes/: API endpoint handlers
- models/: SQLAlchemy ORM models
- services/: Repository over the Student table
- logging_config.py: Structured logging configuration
- database.py: Engine and session management
- config.py: Settings read from the environment
"""

import time
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from students_api import __version__
from students_api.config import Settings
from students_api.database import build_engine, create_session_factory, create_tables
from students_api.errors import register_exception_handlers
from students_api.logging_config import (
    setup_logging, get_logger, log_event, request_id_var
)
from students_api.routes import students

logger = get_logger("http")
db_logger = get_logger("db")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    engine = build_engine(settings.database_url)
    if settings.create_tables:
        log_event(db_logger, "INFO", "Creating tables")
        create_tables(engine)

    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    try:
        yield
    finally:
        engine.dispose()
        log_event(db_logger, "INFO", "Database engine disposed")


def create_app(settings: Settings = None) -> FastAPI:
    """Build the application; settings default to the process environment."""
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Students API",
        description="CRUD service for Student records backed by a relational table.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Location"]
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """
        Generate a request ID, expose it to every log entry through a
        context variable, return it in X-Request-ID, and log the request
        with its latency.
        """
        req_id = str(uuid.uuid4())
        request_id_var.set(req_id)
        start_time = time.time()

        log_event(logger, "INFO",
            f"Request started: {request.method} {request.url.path}",
            extra_data={
                "ip": request.client.host if request.client else "unknown",
                "user_agent": request.headers.get("user-agent", ""),
            })

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        response.headers["X-Request-ID"] = req_id

        log_event(logger, "INFO",
            f"Request completed: {request.method} {request.url.path} → {response.status_code}",
            extra_data={
                "duration_ms": round(duration_ms, 2),
                "status_code": response.status_code
            })

        return response

    register_exception_handlers(app)
    app.include_router(students.router, tags=["Students"])

    @app.get("/health", tags=["Health"])
    def health_check():
        return {"status": "healthy", "service": "students-api", "version": __version__}

    @app.get("/", tags=["Root"])
    def root():
        """Root endpoint with API information."""
        return {
            "service": "Students API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
            "endpoints": {
                "list": "GET /Students",
                "get": "GET /Students/{id}",
                "create": "POST /Students",
                "update": "PUT /Students/{id}",
                "delete": "DELETE /Students/{id}"
            }
        }

    return app


app = create_app()


def run():
    import uvicorn

    settings: Settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port)
