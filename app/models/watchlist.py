"""관심종목 레코드 모델 정의.

Watchlist record model definition.
Exercises the array and JSONB column types: member securities are kept in
a ``uuid[]`` column, asset classes as ``smallint[]`` and display settings
as a JSONB document.

Tables:
    - "Watchlist": 관심종목 목록 (Named list of securities)
"""

import uuid

from sqlalchemy import Uuid
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from app.models.record import Record
from app.schemas.watchlist import AssetClass, WatchlistDisplaySettings
from app.utils.type_handlers import EnumShortArray, JsonbModel, TrimmedString


class Watchlist(Record):
    """관심종목 모델.

    Watchlist model — A named list of securities.

    Attributes:
        name: 관심종목 이름, 고유 (Watchlist name, unique)
        security_ids: 포함된 종목 ID 배열 (Member security ids, uuid[])
        asset_classes: 자산군 배열 (Asset classes, smallint[])
        display_settings: 표시 설정 JSONB (Display settings document)
    """

    __tablename__ = "Watchlist"

    name: Mapped[str] = mapped_column("Name", TrimmedString(255), nullable=False, unique=True)
    security_ids: Mapped[list[uuid.UUID]] = mapped_column(
        "SecurityIds", ARRAY(Uuid), nullable=False, default=list
    )
    asset_classes: Mapped[list[AssetClass]] = mapped_column(
        "AssetClasses", EnumShortArray(AssetClass), nullable=False, default=list
    )
    display_settings: Mapped[WatchlistDisplaySettings | None] = mapped_column(
        "DisplaySettings", JsonbModel(WatchlistDisplaySettings), nullable=True
    )
