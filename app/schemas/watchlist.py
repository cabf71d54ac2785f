"""관심종목 관련 Pydantic 스키마 정의.

Watchlist Pydantic schema definitions.
Includes the display settings document stored in the JSONB column and
the API response schema.
"""

from enum import IntEnum

from pydantic import BaseModel


class AssetClass(IntEnum):
    """자산군 — 배열 컬럼에 smallint로 저장 (Stored as smallint[] values)."""

    EQUITY = 1
    ETF = 2
    BOND = 3
    CRYPTO = 4


class WatchlistDisplaySettings(BaseModel):
    """관심종목 표시 설정 — JSONB 문서.

    Watchlist display settings stored as a JSONB document.

    Attributes:
        sort_by: 정렬 기준 필드 (Field the list is sorted by)
        descending: 내림차순 여부 (Sort descending)
        columns: 표시할 컬럼 목록 (Visible columns)
    """

    sort_by: str = "ticker_symbol"
    descending: bool = False
    columns: list[str] = ["ticker_symbol", "name"]


class WatchlistResponse(BaseModel):
    """관심종목 응답 스키마.

    Watchlist response schema returned from API.
    """

    id: str  # 관심종목 UUID 문자열 (Watchlist UUID as string)
    name: str  # 관심종목 이름 (Watchlist name)
    security_ids: list[str]  # 포함된 종목 UUID 목록 (Member security UUIDs)
    asset_classes: list[AssetClass]  # 자산군 필터 (Asset class filter)
    display_settings: WatchlistDisplaySettings | None = None  # 표시 설정 (Display settings)
