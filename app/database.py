"""데이터베이스 엔진 설정 모듈.

Database engine configuration module.
Provides the ORM base class used for table metadata, the async engine
factory for the PostgreSQL connection via asyncpg, and a helper that
creates the target database when it does not exist yet.
"""

import logging

from sqlalchemy import text
from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import Settings

logger = logging.getLogger(__name__)

# 시스템 유지보수 DB — Maintenance database used for CREATE DATABASE
_MAINTENANCE_DATABASE: str = "postgres"


class Base(DeclarativeBase):
    """SQLAlchemy 선언적 베이스 클래스.

    Declarative base class for all record models.
    Models register their tables and column types with this metadata;
    queries themselves are rendered by the SQL builder.
    """

    pass


def create_engine(settings: Settings) -> AsyncEngine:
    """설정값으로 비동기 엔진을 생성합니다.

    Create the async engine from the configured connection parameters.
    Connections are checked out per operation by the data access service.

    Raises:
        ValueError: 데이터베이스 이름 미설정 (Database name not configured)
    """
    return create_async_engine(settings.database_url(), **settings.engine_options())


async def ensure_database_exists(url: URL) -> bool:
    """대상 데이터베이스가 없으면 생성합니다.

    Create the target database when it is missing. Connects to the
    ``postgres`` maintenance database in AUTOCOMMIT mode because
    CREATE DATABASE cannot run inside a transaction.

    Args:
        url: 대상 데이터베이스 연결 URL (Connection URL of the target database)

    Returns:
        bool: 새로 생성했으면 True (True when the database was created)
    """
    database_name: str | None = url.database
    if not database_name:
        raise ValueError("Database is required")

    logger.info("Ensuring database exists: %s", database_name)
    engine: AsyncEngine = create_async_engine(
        url.set(database=_MAINTENANCE_DATABASE),
        isolation_level="AUTOCOMMIT",
    )
    try:
        async with engine.connect() as conn:
            result = await conn.execute(
                text("SELECT oid FROM pg_catalog.pg_database WHERE datname = :database_name"),
                {"database_name": database_name},
            )
            if result.first() is not None:
                return False

            logger.info("Database not found, creating: %s", database_name)
            quoted: str = database_name.replace('"', '""')
            await conn.execute(text(f'CREATE DATABASE "{quoted}"'))
            return True
    finally:
        await engine.dispose()
