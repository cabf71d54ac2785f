"""레코드 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

Record models package — Central import point for all domain models.
Importing from this package registers every table with the SQLAlchemy
metadata and exposes ``RECORD_MODELS``, the registration table handed to
the data access layer at startup.

Modules:
    record: 공통 추상 레코드 (Abstract Record base with the "Id" column)
    security: 증권 종목, 일별 시세 (Security, ValueOverTime)
    watchlist: 관심종목 (Watchlist)
"""

from app.models.record import EMPTY_ID, Record
from app.models.security import Security, ValueOverTime
from app.models.watchlist import Watchlist

# 데이터 접근 계층에 등록되는 레코드 종류 — Record kinds registered with the data access layer
RECORD_MODELS: tuple[type[Record], ...] = (Security, ValueOverTime, Watchlist)

__all__ = [
    "EMPTY_ID", "Record",
    "Security", "ValueOverTime",
    "Watchlist",
    "RECORD_MODELS",
]
