"""레코드 공통 베이스 모델.

Common base for every persisted record.
Every record is one row identified by a UUID stored in the ``"Id"`` column.
The identifier is assigned by the data access service on first save when
absent and never changes afterwards.
"""

import uuid

from sqlalchemy import Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# 빈 식별자 — The nil UUID counts as "no identifier yet"
EMPTY_ID: uuid.UUID = uuid.UUID(int=0)


class Record(Base):
    """모든 레코드의 추상 부모 클래스.

    Abstract parent of all record models.

    Attributes:
        id: 고유 식별자 UUID, 최초 저장 시 할당 (Unique identifier, assigned on first save)
    """

    __abstract__ = True

    # 레코드 고유 식별자 — Record identifier (UUID, generated by the data access service)
    id: Mapped[uuid.UUID | None] = mapped_column("Id", Uuid, primary_key=True)

    def has_id(self) -> bool:
        """식별자가 할당되었는지 여부 — Whether an identifier has been assigned."""
        return self.id is not None and self.id != EMPTY_ID
