"""FastAPI 애플리케이션 엔트리포인트 — 수명주기, 미들웨어 및 라우터 등록.

FastAPI application entry point — Lifespan, middleware and router registration.
The lifespan handler builds the async engine and the data access service
once per process and disposes the engine on shutdown.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Annotated, Any

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine

from app.api.deps import get_database_service
from app.config import settings
from app.database import create_engine, ensure_database_exists
from app.middleware.axiom_logging import AxiomLoggingMiddleware
from app.models import RECORD_MODELS
from app.repositories.table_registry import TableRegistry
from app.services.database_service import DatabaseService

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """루트 로거 레벨과 형식을 설정합니다 — Configure root logging at ``level``."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """엔진과 데이터 접근 서비스를 생성하고 종료 시 정리합니다.

    Build the engine and data access service on startup; dispose on shutdown.
    A blank ``DB_DATABASE`` fails startup with ``ValueError``.
    """
    configure_logging(settings.LOG_LEVEL)
    if settings.DB_ENSURE_DATABASE_EXISTS:
        created: bool = await ensure_database_exists(settings.database_url())
        if created:
            logger.info("Created database %s", settings.DB_DATABASE)

    engine: AsyncEngine = create_engine(settings)
    app.state.database_service = DatabaseService(
        engine,
        TableRegistry(RECORD_MODELS, table_names=settings.DB_TABLE_NAMES),
        include_error_detail=settings.DB_INCLUDE_ERROR_DETAIL,
    )
    logger.info("Connected to %s:%s/%s", settings.DB_SERVER, settings.DB_PORT, settings.DB_DATABASE)
    try:
        yield
    finally:
        await engine.dispose()


app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# 요청 로깅 미들웨어 — CORS보다 먼저 등록하여 모든 요청을 캡처
# Request logging middleware, registered before CORS to capture all requests
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어 — Cross-Origin Resource Sharing middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check(
    database_service: Annotated[DatabaseService, Depends(get_database_service)],
) -> dict[str, Any]:
    """서버 및 데이터베이스 상태 확인 엔드포인트.

    Health check endpoint; fails when the database is unreachable.
    """
    database_time: datetime = await database_service.perform_health_check()
    return {"status": "ok", "database_time": database_time.isoformat()}


# ---------------------------------------------------------------------------
# 라우터 등록 — Router registration
# ---------------------------------------------------------------------------
from app.api.securities import router as securities_router  # noqa: E402
from app.api.watchlists import router as watchlists_router  # noqa: E402

app.include_router(securities_router, prefix="/securities", tags=["Securities"])
app.include_router(watchlists_router, prefix="/watchlists", tags=["Watchlists"])
