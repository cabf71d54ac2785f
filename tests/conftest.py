"""테스트 인프라 — 테스트용 PostgreSQL DB, 데이터 접근 서비스, httpx 클라이언트 픽스처.

Test infrastructure — Test PostgreSQL DB, data access service, and httpx client fixtures.
The database is created with ``ensure_database_exists`` and the schema is
applied once per session; tables are truncated after each test. Tests that
need the database are skipped when PostgreSQL is unreachable.
"""

import os
import uuid
from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from app.api.deps import get_database_service
from app.database import Base, ensure_database_exists
from app.main import app
from app.models import RECORD_MODELS, Security, ValueOverTime, Watchlist
from app.repositories.generic_repository import GenericRepository
from app.repositories.table_registry import TableRegistry
from app.schemas.watchlist import AssetClass, WatchlistDisplaySettings
from app.services.database_service import DatabaseService

# ---------------------------------------------------------------------------
# 테스트 DB 설정
# ---------------------------------------------------------------------------
TEST_DATABASE_URL = os.environ.get(
    "TEST_DATABASE_URL", "postgresql+asyncpg://postgres@localhost:5432/test_demoapi"
)

ACTOR_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")

_schema_created = False
_database_unavailable: str | None = None


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 서비스, 레포지토리, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 첫 호출 시 DB와 스키마를 생성합니다."""
    global _schema_created, _database_unavailable
    if _database_unavailable:
        pytest.skip(_database_unavailable)

    url = make_url(TEST_DATABASE_URL)
    if not _schema_created:
        try:
            await ensure_database_exists(url)
        except (OSError, SQLAlchemyError) as exc:
            _database_unavailable = f"PostgreSQL unavailable: {exc}"
            pytest.skip(_database_unavailable)

    eng = create_async_engine(url, echo=False, pool_pre_ping=True)
    if not _schema_created:
        async with eng.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        _schema_created = True

    yield eng

    # 테스트 후 모든 데이터 정리
    async with eng.begin() as conn:
        tables = ", ".join(f'"{t.name}"' for t in reversed(Base.metadata.sorted_tables))
        await conn.execute(text(f"TRUNCATE {tables} CASCADE"))
    await eng.dispose()


@pytest_asyncio.fixture
async def database_service(engine: AsyncEngine) -> DatabaseService:
    """테스트 DB에 연결된 데이터 접근 서비스."""
    return DatabaseService(engine, TableRegistry(RECORD_MODELS))


@pytest_asyncio.fixture
async def repository(database_service: DatabaseService) -> GenericRepository:
    return GenericRepository(database_service)


@pytest_asyncio.fixture
async def client(database_service: DatabaseService) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — 데이터 접근 서비스를 오버라이드합니다."""
    app.dependency_overrides[get_database_service] = lambda: database_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def securities(database_service: DatabaseService) -> list[Security]:
    """티커 5개(AAPL, AMZN, GOOG, MSFT, NVDA)의 종목을 생성합니다."""
    records = [
        Security(name="Apple Inc.", ticker_symbol="AAPL", logo_url="https://logo.test/aapl.png"),
        Security(name="Amazon.com Inc.", ticker_symbol="AMZN"),
        Security(name="Alphabet Inc.", ticker_symbol="GOOG"),
        Security(name="Microsoft Corp.", ticker_symbol="MSFT"),
        Security(name="NVIDIA Corp.", ticker_symbol="NVDA"),
    ]
    await database_service.save_multiple(records, ACTOR_ID)
    return records


@pytest_asyncio.fixture
async def apple(securities: list[Security]) -> Security:
    return securities[0]


@pytest_asyncio.fixture
async def apple_values(database_service: DatabaseService, apple: Security) -> list[ValueOverTime]:
    """AAPL 일별 시세 3건을 날짜 역순으로 저장합니다."""
    records = [
        ValueOverTime(
            security_id=apple.id,
            date=date(2024, 1, day),
            open_amt=Decimal("180.0000") + day,
            high_amt=Decimal("185.0000") + day,
            low_amt=Decimal("178.0000") + day,
            close_amt=Decimal("182.5000") + day,
            volume=1_000_000 * day,
        )
        for day in (4, 3, 2)
    ]
    await database_service.save_multiple(records, ACTOR_ID)
    return records


@pytest_asyncio.fixture
async def tech_watchlist(database_service: DatabaseService, securities: list[Security]) -> Watchlist:
    """AAPL, MSFT, NVDA를 포함하는 관심종목."""
    watchlist = Watchlist(
        name="Big Tech",
        security_ids=[securities[0].id, securities[3].id, securities[4].id],
        asset_classes=[AssetClass.EQUITY],
        display_settings=WatchlistDisplaySettings(sort_by="name", descending=True),
    )
    await database_service.save(watchlist, ACTOR_ID)
    return watchlist
