from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
from slowapi.errors import RateLimitExceeded
from loguru import logger
import sys
import time

from app.config import settings
from app.exceptions import (
    StoreError,
    TasklistError,
    request_validation_exception_handler,
    tasklist_exception_handler,
    unhandled_exception_handler,
)
from app.routes import auth, todos
from app.services.auth_service import AuthService
from app.services.store import Store, create_store
from app.services.todo_service import TodoService


def configure_logging():
    logger.remove()
    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=settings.LOG_LEVEL
    )
    if settings.LOG_FILE:
        logger.add(
            settings.LOG_FILE,
            rotation="500 MB",
            retention="10 days",
            level=settings.LOG_LEVEL
        )


configure_logging()


def create_app(store: Optional[Store] = None) -> FastAPI:
    """
    Build the API around one store.

    The store is resolved here, once, from STORE_BACKEND unless one is
    passed in; requests never choose a backend.
    """
    store = store or create_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.APP_NAME} ({store.name} store)...")

        try:
            await store.connect()
            logger.info(f"✓ {store.name} store ready")
        except StoreError as e:
            logger.error(f"Startup failed: {e.message}")
            raise

        app.state.started_at = time.monotonic()
        yield

        logger.info(f"Shutting down {settings.APP_NAME}...")
        await store.disconnect()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Multi-user task list API with JWT authentication",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc"
    )

    app.state.store = store
    app.state.auth_service = AuthService(store, expire_minutes=settings.JWT_EXPIRE_MINUTES)
    app.state.todo_service = TodoService(store)
    app.state.started_at = time.monotonic()
    app.state.limiter = auth.limiter

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TasklistError, tasklist_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.exception_handler(RateLimitExceeded)
    async def custom_rate_limit_handler(request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=429,
            content={
                "message": "Rate limit exceeded. Try again later.",
                "detail": str(exc.detail)
            }
        )

    app.include_router(auth.router)
    app.include_router(todos.router)

    @app.get("/")
    async def root():
        return {
            "name": settings.APP_NAME,
            "version": "1.0.0",
            "status": "running",
            "endpoints": {
                "auth": "/api/auth",
                "todos": "/api/todos",
                "health": "/health",
                "docs": "/api/docs"
            }
        }

    @app.get("/health")
    async def health_check():
        health_status = {
            "status": "ok",
            "uptime": round(time.monotonic() - app.state.started_at, 3),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "message": "Server is running",
            "database": store.name
        }

        try:
            health_status["store"] = await store.ping()
        except StoreError as e:
            logger.warning(f"Health check store ping failed: {e.message}")
            health_status["store"] = {"connected": False}
            health_status["status"] = "degraded"
            if settings.is_development:
                health_status["store"]["error"] = e.message

        return health_status

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development,
        log_level="info"
    )
