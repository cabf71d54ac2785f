"""제네릭 레포지토리 — 조건 형태별 조회 헬퍼.

Generic repository — Typed lookups by common predicate shape.
Each method validates the column against the table descriptor, builds a
single where fragment and delegates to the data access service. Lookup
values are bound with the column's type, so string keys are trimmed the
same way stored values are.
"""

import uuid
from typing import Any, Iterable, TypeVar

from app.models.record import Record
from app.repositories.table_registry import ColumnMapping
from app.services.database_service import DatabaseService
from app.utils.pagination import Pager, ResultSet
from app.utils.sql_builder import BuildAction, SqlBuilder

RecordType = TypeVar("RecordType", bound=Record)


class GenericRepository:
    """모든 레코드 종류에 공통인 조회/저장 레포지토리.

    Repository shared by every record kind. Column arguments accept either
    the database column name ("TickerSymbol") or the model attribute name
    ("ticker_symbol").

    Args:
        database_service: 데이터 접근 서비스 (Data access service to delegate to)
    """

    def __init__(self, database_service: DatabaseService) -> None:
        self._db: DatabaseService = database_service

    async def get(self, model: type[RecordType], record_id: uuid.UUID) -> RecordType | None:
        return await self._db.get(model, record_id)

    async def save(self, record: Record, saved_by: uuid.UUID) -> None:
        await self._db.save(record, saved_by)

    async def get_all(
        self,
        model: type[RecordType],
        build: BuildAction | None = None,
        pager: Pager | None = None,
        template: str | None = None,
    ) -> ResultSet[RecordType]:
        return await self._db.get_all(model, build, pager=pager, template=template)

    async def get_batch(self, model: type[RecordType], ids: Iterable[uuid.UUID]) -> list[RecordType]:
        return await self._db.get_multiple(model, ids)

    async def get_by_other_id(
        self,
        model: type[RecordType],
        column: str,
        value: uuid.UUID,
    ) -> list[RecordType]:
        """외래키 값으로 조회 — Records whose foreign-key column equals ``value``."""
        mapping: ColumnMapping = self._column(model, column)
        return list(
            await self._db.get_all(
                model,
                lambda b: b.where(f"{mapping.quoted} = :other_id", other_id=value)
                .bind_types(other_id=mapping.type),
            )
        )

    async def get_by_other_ids(
        self,
        model: type[RecordType],
        column: str,
        values: Iterable[uuid.UUID],
    ) -> list[RecordType]:
        """외래키 값 목록으로 조회 — Records whose foreign-key column is any of ``values``."""
        quoted: str = self._column(model, column).quoted
        other_ids: list[uuid.UUID] = list(dict.fromkeys(values))
        if not other_ids:
            return []
        return list(
            await self._db.get_all(
                model, lambda b: b.where(f"{quoted} = ANY(:other_ids)", other_ids=other_ids)
            )
        )

    async def get_by_unique_column(
        self,
        model: type[RecordType],
        column: str,
        value: Any,
    ) -> RecordType | None:
        """유일 컬럼으로 단일 레코드 조회.

        Fetch the record whose unique ``column`` equals ``value``.

        Raises:
            MultipleResultsFound: 컬럼이 실제로 유일하지 않을 때 (Column is not actually unique)
        """
        mapping: ColumnMapping = self._column(model, column)
        return await self._db.get_one(
            model,
            lambda b: b.where(f"{mapping.quoted} = :unique_value", unique_value=value)
            .bind_types(unique_value=mapping.type),
        )

    async def get_by_two_column_unique_index(
        self,
        model: type[RecordType],
        column1: str,
        value1: Any,
        column2: str,
        value2: Any,
    ) -> RecordType | None:
        mapping1: ColumnMapping = self._column(model, column1)
        mapping2: ColumnMapping = self._column(model, column2)

        def build(builder: SqlBuilder) -> None:
            builder.where(f"{mapping1.quoted} = :value1", value1=value1)
            builder.where(f"{mapping2.quoted} = :value2", value2=value2)
            builder.bind_types(value1=mapping1.type, value2=mapping2.type)

        return await self._db.get_one(model, build)

    async def get_where_array_contains(
        self,
        model: type[RecordType],
        column: str,
        value: Any,
    ) -> list[RecordType]:
        """배열 컬럼에 값이 포함된 레코드 — Records whose array column contains ``value``."""
        quoted: str = self._column(model, column).quoted
        return list(
            await self._db.get_all(
                model, lambda b: b.where(f":array_value = ANY({quoted})", array_value=value)
            )
        )

    async def get_where_array_overlaps(
        self,
        model: type[RecordType],
        column: str,
        values: Iterable[Any],
    ) -> list[RecordType]:
        """배열 컬럼이 값 중 하나 이상을 포함하는 레코드.

        Records whose array column shares at least one element with ``values``.
        """
        mapping: ColumnMapping = self._column(model, column)
        array_values: list[Any] = list(values)
        if not array_values:
            return []
        return list(
            await self._db.get_all(
                model,
                lambda b: b.where(f"{mapping.quoted} && :array_values", array_values=array_values)
                .bind_types(array_values=mapping.type),
            )
        )

    async def get_by_string_key(
        self,
        model: type[RecordType],
        column: str,
        value: str,
    ) -> list[RecordType]:
        mapping: ColumnMapping = self._column(model, column)
        return list(
            await self._db.get_all(
                model,
                lambda b: b.where(f"{mapping.quoted} = :string_key", string_key=value)
                .bind_types(string_key=mapping.type),
            )
        )

    def _column(self, model: type[Record], column: str) -> ColumnMapping:
        # 알 수 없는 컬럼은 SQL 생성 전에 ValueError
        return self._db.registry.get(model).column(column)
