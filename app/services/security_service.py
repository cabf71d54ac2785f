"""증권 서비스 — 종목 조회/생성 및 일별 시세 조회 로직.

Security Service — Business logic for securities and their daily price bars.
All persistence goes through the generic repository.
"""

from uuid import UUID

from app.models.security import Security, ValueOverTime
from app.models.watchlist import Watchlist
from app.repositories.generic_repository import GenericRepository
from app.schemas.security import SecurityCreate, SecurityResponse, ValueOverTimeResponse
from app.schemas.watchlist import WatchlistResponse
from app.services.watchlist_service import watchlist_service
from app.utils.exceptions import NotFoundError
from app.utils.pagination import Page, Pager, ResultSet


class SecurityService:
    """증권 종목 관련 비즈니스 로직을 처리하는 서비스.

    Service handling security business logic.
    """

    def _to_response(self, security: Security) -> SecurityResponse:
        """종목 모델을 응답 스키마로 변환합니다.

        Convert a Security record to a SecurityResponse schema.

        Args:
            security: 종목 레코드 (Security record)

        Returns:
            SecurityResponse: 종목 응답 (Security response)
        """
        return SecurityResponse(
            id=str(security.id),
            name=security.name,
            logo_url=security.logo_url,
            ticker_symbol=security.ticker_symbol,
        )

    def _to_value_response(self, value: ValueOverTime) -> ValueOverTimeResponse:
        return ValueOverTimeResponse(
            id=str(value.id),
            security_id=str(value.security_id),
            date=value.date,
            open_amt=value.open_amt,
            high_amt=value.high_amt,
            low_amt=value.low_amt,
            close_amt=value.close_amt,
            volume=value.volume,
        )

    async def list_securities(
        self,
        repository: GenericRepository,
        pager: Pager,
    ) -> Page[SecurityResponse]:
        """종목 목록을 티커 순으로 페이지 조회합니다.

        List securities ordered by ticker symbol, one page at a time.

        Args:
            repository: 제네릭 레포지토리 (Generic repository)
            pager: 페이지 정보 (Pager)

        Returns:
            Page[SecurityResponse]: 종목 페이지 (Page of securities)

        Raises:
            PagingError: 요청 페이지가 범위를 벗어남 (Page past the end of the results)
        """
        results: ResultSet[Security] = await repository.get_all(
            Security, lambda b: b.order_by('"TickerSymbol"'), pager=pager
        )
        return Page[SecurityResponse].from_result_set(
            [self._to_response(s) for s in results], results, pager
        )

    async def get_security(
        self,
        repository: GenericRepository,
        ticker_symbol: str,
    ) -> SecurityResponse:
        """티커로 종목을 조회합니다 — Retrieve a security by ticker symbol.

        Raises:
            NotFoundError: 종목이 없음 (Security not found)
        """
        security: Security = await self._get_by_ticker(repository, ticker_symbol)
        return self._to_response(security)

    async def create_security(
        self,
        repository: GenericRepository,
        data: SecurityCreate,
        actor_id: UUID,
    ) -> SecurityResponse:
        """새 종목을 생성합니다.

        Create a new security. The identifier is assigned on save.

        Args:
            repository: 제네릭 레포지토리 (Generic repository)
            data: 생성 요청 데이터 (Creation payload)
            actor_id: 생성한 사용자 ID (Actor id recorded with the save)

        Returns:
            SecurityResponse: 생성된 종목 (Created security)

        Raises:
            ConflictError: 티커 중복 (Ticker symbol already exists)
        """
        security = Security(
            name=data.name,
            ticker_symbol=data.ticker_symbol,
            logo_url=data.logo_url,
        )
        await repository.save(security, actor_id)
        # 저장된 행 기준으로 응답 — Respond with the stored row
        saved: Security | None = await repository.get(Security, security.id)
        return self._to_response(saved or security)

    async def get_value_over_time(
        self,
        repository: GenericRepository,
        ticker_symbol: str,
    ) -> list[ValueOverTimeResponse]:
        """종목의 일별 시세를 날짜순으로 조회합니다.

        List a security's daily price bars ordered by date.
        """
        security: Security = await self._get_by_ticker(repository, ticker_symbol)
        values: ResultSet[ValueOverTime] = await repository.get_all(
            ValueOverTime,
            lambda b: b.where('"SecurityId" = :security_id', security_id=security.id).order_by('"Date"'),
        )
        return [self._to_value_response(v) for v in values]

    async def get_watchlists(
        self,
        repository: GenericRepository,
        ticker_symbol: str,
    ) -> list[WatchlistResponse]:
        """종목이 포함된 관심종목 목록 — Watchlists containing the security."""
        security: Security = await self._get_by_ticker(repository, ticker_symbol)
        watchlists: list[Watchlist] = await repository.get_where_array_contains(
            Watchlist, "SecurityIds", security.id
        )
        return [watchlist_service.to_response(w) for w in watchlists]

    async def _get_by_ticker(self, repository: GenericRepository, ticker_symbol: str) -> Security:
        security: Security | None = await repository.get_by_unique_column(
            Security, "TickerSymbol", ticker_symbol
        )
        if security is None:
            raise NotFoundError(f"Security '{ticker_symbol}' not found")
        return security


# 싱글톤 인스턴스 — Singleton instance
security_service: SecurityService = SecurityService()
