"""
FastAPI application serving company overview imports.

Mounts the import and company overview routers under ``API_PREFIX`` and
the progress WebSocket at the root.
"""

import logging
import os
from contextlib import asynccontextmanager

import redis
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from api.config import settings
from api.dependencies import engine, SessionLocal
from api.routers import import_router, overviews, websocket
from api.schemas.common import ErrorResponse, HealthCheckResponse
from backend.models.schema import Base

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format=settings.LOG_FORMAT,
    handlers=[
        logging.FileHandler(settings.LOG_FILE),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Credentials stay out of the log
    logger.info(f"{settings.API_TITLE} {settings.API_VERSION} on {settings.DATABASE_URL.split('@')[-1]}")
    Base.metadata.create_all(bind=engine)
    os.makedirs(settings.TEMP_UPLOAD_DIR, exist_ok=True)
    yield
    logger.info("Shutting down")


app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS
)


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="Internal server error",
            detail={"message": str(exc)} if settings.DEBUG else None,
            path=request.url.path
        ).model_dump(mode='json')
    )


app.include_router(import_router.router, prefix=settings.API_PREFIX)
app.include_router(overviews.router, prefix=settings.API_PREFIX)
app.include_router(websocket.router)


@app.get('/health', response_model=HealthCheckResponse, tags=['health'])
def health_check():
    """Whether the database and Redis answer."""
    try:
        with SessionLocal() as session:
            session.execute(text('SELECT 1'))
        database = True
    except Exception as e:
        logger.error(f"Database unreachable: {e}")
        database = False

    try:
        redis.Redis.from_url(settings.REDIS_URL, socket_timeout=2).ping()
        redis_ok = True
    except redis.RedisError as e:
        logger.error(f"Redis unreachable: {e}")
        redis_ok = False

    return HealthCheckResponse(
        status='ok' if database and redis_ok else 'degraded',
        version=settings.API_VERSION,
        database=database,
        redis=redis_ok
    )


@app.get('/api/ping', tags=['health'])
async def ping():
    return {'ping': 'pong'}


@app.middleware("http")
async def log_requests(request: Request, call_next):
    response = await call_next(request)
    logger.info(f"{request.method} {request.url.path} - {response.status_code}")
    return response


if __name__ == '__main__':
    import uvicorn

    uvicorn.run(
        'api.main:app',
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower()
    )
