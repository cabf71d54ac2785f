"""증권 라우터 — 종목 조회/생성 및 일별 시세 엔드포인트.

Securities Router — Endpoints for securities, their daily price bars and
the watchlists that contain them.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.deps import get_actor_id, get_generic_repository, get_pager
from app.repositories.generic_repository import GenericRepository
from app.schemas.security import SecurityCreate, SecurityResponse, ValueOverTimeResponse
from app.schemas.watchlist import WatchlistResponse
from app.services.security_service import security_service
from app.utils.pagination import Page, Pager

router: APIRouter = APIRouter()


@router.get("", response_model=Page[SecurityResponse])
async def list_securities(
    repository: Annotated[GenericRepository, Depends(get_generic_repository)],
    pager: Annotated[Pager, Depends(get_pager)],
) -> Page[SecurityResponse]:
    """종목 목록을 페이지 단위로 조회합니다.

    List securities one page at a time (400 when the page is past the end).
    """
    return await security_service.list_securities(repository, pager)


@router.post("", response_model=SecurityResponse, status_code=201)
async def create_security(
    data: SecurityCreate,
    repository: Annotated[GenericRepository, Depends(get_generic_repository)],
    actor_id: Annotated[UUID, Depends(get_actor_id)],
) -> SecurityResponse:
    """새 종목을 생성합니다. 티커 중복 시 409.

    Create a new security; 409 when the ticker symbol already exists.
    """
    return await security_service.create_security(repository, data, actor_id)


@router.get("/{ticker_symbol}", response_model=SecurityResponse)
async def get_security(
    ticker_symbol: str,
    repository: Annotated[GenericRepository, Depends(get_generic_repository)],
) -> SecurityResponse:
    """티커로 종목을 조회합니다 — Retrieve a security by ticker symbol."""
    return await security_service.get_security(repository, ticker_symbol)


@router.get("/{ticker_symbol}/value-over-time", response_model=list[ValueOverTimeResponse])
async def get_value_over_time(
    ticker_symbol: str,
    repository: Annotated[GenericRepository, Depends(get_generic_repository)],
) -> list[ValueOverTimeResponse]:
    """종목의 일별 시세를 날짜순으로 조회합니다.

    List the security's daily price bars ordered by date.
    """
    return await security_service.get_value_over_time(repository, ticker_symbol)


@router.get("/{ticker_symbol}/watchlists", response_model=list[WatchlistResponse])
async def get_watchlists(
    ticker_symbol: str,
    repository: Annotated[GenericRepository, Depends(get_generic_repository)],
) -> list[WatchlistResponse]:
    return await security_service.get_watchlists(repository, ticker_symbol)
