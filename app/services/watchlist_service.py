"""관심종목 서비스 — 관심종목 조회 로직.

Watchlist Service — Retrieval of watchlists and their member securities.
"""

from uuid import UUID

from app.models.security import Security
from app.models.watchlist import Watchlist
from app.repositories.generic_repository import GenericRepository
from app.schemas.security import SecurityResponse
from app.schemas.watchlist import WatchlistResponse
from app.utils.exceptions import NotFoundError


class WatchlistService:
    """관심종목 관련 비즈니스 로직을 처리하는 서비스.

    Service handling watchlist business logic.
    """

    def to_response(self, watchlist: Watchlist) -> WatchlistResponse:
        return WatchlistResponse(
            id=str(watchlist.id),
            name=watchlist.name,
            security_ids=[str(s) for s in watchlist.security_ids],
            asset_classes=list(watchlist.asset_classes),
            display_settings=watchlist.display_settings,
        )

    async def get_watchlist(
        self,
        repository: GenericRepository,
        watchlist_id: UUID,
    ) -> WatchlistResponse:
        """관심종목을 ID로 조회합니다.

        Retrieve a watchlist by id.

        Raises:
            NotFoundError: 관심종목이 없음 (Watchlist not found)
        """
        watchlist: Watchlist = await self._get_or_404(repository, watchlist_id)
        return self.to_response(watchlist)

    async def get_watchlist_securities(
        self,
        repository: GenericRepository,
        watchlist_id: UUID,
    ) -> list[SecurityResponse]:
        """관심종목에 포함된 종목을 티커순으로 조회합니다.

        List the member securities of a watchlist, fetched in one batch and
        sorted by ticker symbol.

        Raises:
            NotFoundError: 관심종목이 없음 (Watchlist not found)
        """
        watchlist: Watchlist = await self._get_or_404(repository, watchlist_id)
        securities: list[Security] = await repository.get_batch(Security, watchlist.security_ids)
        # 배치 조회 결과는 순서 보장 없음 — Batch lookup order is unspecified
        securities.sort(key=lambda s: s.ticker_symbol)
        return [
            SecurityResponse(
                id=str(s.id),
                name=s.name,
                logo_url=s.logo_url,
                ticker_symbol=s.ticker_symbol,
            )
            for s in securities
        ]

    async def _get_or_404(self, repository: GenericRepository, watchlist_id: UUID) -> Watchlist:
        watchlist: Watchlist | None = await repository.get(Watchlist, watchlist_id)
        if watchlist is None:
            raise NotFoundError("Watchlist not found")
        return watchlist


# 싱글톤 인스턴스 — Singleton instance
watchlist_service: WatchlistService = WatchlistService()
