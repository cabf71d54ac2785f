"""FastAPI 의존성 주입 모듈 — 데이터 접근 서비스 및 레포지토리.

FastAPI dependency injection module — Data access service and repository.
The lifespan handler in ``app.main`` builds one ``DatabaseService`` per
process and stores it on ``app.state``; these dependencies hand it to routes.
Tests override ``get_database_service`` to point at the test database.
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, Request

from app.models.record import EMPTY_ID
from app.repositories.generic_repository import GenericRepository
from app.services.database_service import DatabaseService
from app.utils.pagination import Pager


def get_database_service(request: Request) -> DatabaseService:
    """애플리케이션 상태에서 데이터 접근 서비스를 반환합니다.

    Return the process-wide data access service from application state.
    """
    return request.app.state.database_service


def get_generic_repository(
    database_service: Annotated[DatabaseService, Depends(get_database_service)],
) -> GenericRepository:
    return GenericRepository(database_service)


def get_pager(page: int | None = None, page_size: int | None = None) -> Pager:
    """쿼리 파라미터 → Pager. 0 이하 값은 기본값으로 정규화됩니다.

    Build a pager from the ``page``/``page_size`` query parameters; values
    that are absent or not positive fall back to the defaults.
    """
    return Pager(page, page_size)


def get_actor_id(x_actor_id: Annotated[UUID | None, Header()] = None) -> UUID:
    # 헤더 없으면 nil UUID — nil UUID when the header is absent
    return x_actor_id or EMPTY_ID
