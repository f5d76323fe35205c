import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException

from .config import CORS_ORIGINS, DATABASE_URL, LOG_LEVEL
from .database import create_db_engine, create_session_factory, create_tables
from .errors import TaskflowError
from .routers import auth, boards, projects, push, tasks

logger = logging.getLogger(__name__)


def _register_error_handlers(app: FastAPI) -> None:
    """Render every error as {message, details?}."""

    @app.exception_handler(TaskflowError)
    async def taskflow_error_handler(request: Request, exc: TaskflowError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": str(exc), "details": type(exc).__name__},
        )


def create_app(engine: Optional[Engine] = None) -> FastAPI:
    """Build the API around an explicitly supplied (or configured) engine."""
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if engine is None:
        engine = create_db_engine(DATABASE_URL)

    app = FastAPI(
        title="Taskflow API",
        description="Kanban project management API: projects, boards, columns and tasks",
        version="1.0.0",
    )
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(projects.router, prefix="/api", tags=["projects"])
    app.include_router(boards.router, prefix="/api", tags=["boards"])
    app.include_router(tasks.router, prefix="/api", tags=["tasks"])
    app.include_router(push.router, prefix="/api", tags=["push"])
    _register_error_handlers(app)

    # Create tables on startup
    @app.on_event("startup")
    def on_startup():
        create_tables(engine)

    @app.get("/")
    def read_root():
        return {"message": "Taskflow API"}

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    return app
