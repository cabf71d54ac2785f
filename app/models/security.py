"""증권 관련 레코드 모델 정의.

Security-related record model definitions.

Tables:
    - "Security": 증권 종목 (Listed security, unique ticker symbol)
    - "ValueOverTime": 일별 시세 (Daily OHLC price bar of a security)
"""

import uuid
import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, Date, ForeignKey, Numeric, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.models.record import Record
from app.utils.type_handlers import TrimmedString


class Security(Record):
    """증권 종목 모델.

    Security model — A listed instrument identified by its ticker symbol.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 종목 이름 (Display name)
        logo_url: 로고 이미지 URL (Logo image URL, optional)
        ticker_symbol: 티커 심볼, 고유 (Ticker symbol, unique)
    """

    __tablename__ = "Security"

    name: Mapped[str] = mapped_column("Name", TrimmedString(255), nullable=False)
    logo_url: Mapped[str | None] = mapped_column("LogoUrl", TrimmedString(1024), nullable=True)
    # 티커 심볼 — Unique index backs lookups by ticker
    ticker_symbol: Mapped[str] = mapped_column(
        "TickerSymbol", TrimmedString(16), nullable=False, unique=True
    )


class ValueOverTime(Record):
    """일별 시세 모델.

    Daily price bar for a security.

    Attributes:
        security_id: 종목 FK (Parent security foreign key)
        date: 거래일 (Trading day)
        open_amt / high_amt / low_amt / close_amt: 시가/고가/저가/종가 (OHLC prices)
        volume: 거래량 (Traded volume)
    """

    __tablename__ = "ValueOverTime"

    security_id: Mapped[uuid.UUID] = mapped_column(
        "SecurityId", Uuid, ForeignKey("Security.Id"), nullable=False, index=True
    )
    date: Mapped[datetime.date] = mapped_column("Date", Date, nullable=False)
    open_amt: Mapped[Decimal] = mapped_column("OpenAmt", Numeric(18, 4), nullable=False)
    high_amt: Mapped[Decimal] = mapped_column("HighAmt", Numeric(18, 4), nullable=False)
    low_amt: Mapped[Decimal] = mapped_column("LowAmt", Numeric(18, 4), nullable=False)
    close_amt: Mapped[Decimal] = mapped_column("CloseAmt", Numeric(18, 4), nullable=False)
    volume: Mapped[int] = mapped_column("Volume", BigInteger, nullable=False)
