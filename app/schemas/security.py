"""증권 관련 Pydantic 요청/응답 스키마 정의.

Security Pydantic request/response schema definitions.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


class SecurityCreate(BaseModel):
    """증권 종목 생성 요청 스키마.

    Security creation request schema.

    Attributes:
        name: 종목 이름 (Display name)
        ticker_symbol: 티커 심볼 (Ticker symbol, unique)
        logo_url: 로고 URL (Logo image URL, optional)

    Surrounding whitespace is stripped before the length checks, the same
    way the columns trim stored values; a blank logo URL becomes None.
    """

    name: str = Field(min_length=1, max_length=255)
    ticker_symbol: str = Field(min_length=1, max_length=16)
    logo_url: str | None = None

    @field_validator("name", "ticker_symbol", "logo_url", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @field_validator("logo_url")
    @classmethod
    def _blank_logo_to_none(cls, value: str | None) -> str | None:
        return value or None


class SecurityResponse(BaseModel):
    """증권 종목 응답 스키마.

    Security response schema returned from API.
    """

    id: str  # 종목 UUID 문자열 (Security UUID as string)
    name: str  # 종목 이름 (Display name)
    logo_url: str | None  # 로고 URL (Logo image URL)
    ticker_symbol: str  # 티커 심볼 (Ticker symbol)


class ValueOverTimeResponse(BaseModel):
    """일별 시세 응답 스키마.

    Daily price bar response schema.
    """

    id: str
    security_id: str
    date: date
    open_amt: Decimal
    high_amt: Decimal
    low_amt: Decimal
    close_amt: Decimal
    volume: int
