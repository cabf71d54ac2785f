"""관심종목 라우터 — 관심종목 조회 엔드포인트.

Watchlists Router — Endpoints for watchlists and their member securities.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.deps import get_generic_repository
from app.repositories.generic_repository import GenericRepository
from app.schemas.security import SecurityResponse
from app.schemas.watchlist import WatchlistResponse
from app.services.watchlist_service import watchlist_service

router: APIRouter = APIRouter()


@router.get("/{watchlist_id}", response_model=WatchlistResponse)
async def get_watchlist(
    watchlist_id: UUID,
    repository: Annotated[GenericRepository, Depends(get_generic_repository)],
) -> WatchlistResponse:
    """관심종목을 조회합니다 — Retrieve a watchlist."""
    return await watchlist_service.get_watchlist(repository, watchlist_id)


@router.get("/{watchlist_id}/securities", response_model=list[SecurityResponse])
async def get_watchlist_securities(
    watchlist_id: UUID,
    repository: Annotated[GenericRepository, Depends(get_generic_repository)],
) -> list[SecurityResponse]:
    """관심종목에 포함된 종목 목록을 조회합니다.

    List the securities in a watchlist, sorted by ticker symbol.
    """
    return await watchlist_service.get_watchlist_securities(repository, watchlist_id)
