"""데이터 접근 서비스 — 쿼리 실행, 페이지네이션, 저장(upsert).

Data access service — Executes built queries, maps rows to records,
computes totals for pagination and persists records with insert-or-update
semantics.

Each operation checks out one connection from the engine and releases it
before returning. A paged ``get_all`` runs its COUNT and its page fetch on
the same connection. Duplicate-key violations on save are the only store
errors translated here (into ``ConflictError``); everything else propagates
unchanged.

Usage:
    service = DatabaseService(engine, TableRegistry(RECORD_MODELS))
    page = await service.get_all(
        Security,
        lambda b: b.where('"TickerSymbol" = :ticker', ticker="AAPL"),
        pager=Pager(1, 10),
    )
"""

import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Iterable, Mapping, Sequence, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, MultipleResultsFound
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from app.models.record import Record
from app.repositories.table_registry import TableDescriptor, TableRegistry
from app.utils.exceptions import ConflictError
from app.utils.pagination import Pager, ResultSet, sanity_check_pager, total_pages_for
from app.utils.sql_builder import (
    BuildAction,
    SqlBuilder,
    SqlTemplate,
    strip_order_by,
    typed_text,
)

logger = logging.getLogger(__name__)

RecordType = TypeVar("RecordType", bound=Record)

# PostgreSQL unique_violation SQLSTATE
_UNIQUE_VIOLATION: str = "23505"
_DUPLICATE_KEY_MESSAGE: str = "duplicate key value violates unique constraint"
_CONFLICT_MESSAGE: str = "Database error trying to save something that already exists."


class DatabaseService:
    """레코드 조회/저장을 담당하는 데이터 접근 서비스.

    Generic data access over registered record tables.

    Args:
        engine: 비동기 엔진 (Async engine used as the connection provider)
        registry: 레코드 종류 → 테이블 정보 (Record kind -> table descriptor registry)
        include_error_detail: 충돌 메시지에 저장소 오류 상세 포함 여부
                              (Append the store's error text to ConflictError messages)
    """

    def __init__(
        self,
        engine: AsyncEngine,
        registry: TableRegistry,
        include_error_detail: bool = False,
    ) -> None:
        self._engine: AsyncEngine = engine
        self._registry: TableRegistry = registry
        self._include_error_detail: bool = include_error_detail
        # 디버그용 조회 횟수 — Running count of record queries, logged at debug level
        self._total_gets: int = 0

    @property
    def registry(self) -> TableRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # 연결 제공자 — Connection provider
    # ------------------------------------------------------------------
    @asynccontextmanager
    async def _using_connection(self, transactional: bool = False) -> AsyncIterator[AsyncConnection]:
        """작업 단위 연결을 열고 종료 시 반환합니다.

        Check out one connection for a single operation. Writes run inside
        a transaction that commits on success and rolls back on error.
        """
        if transactional:
            async with self._engine.begin() as conn:
                yield conn
        else:
            async with self._engine.connect() as conn:
                yield conn

    # ------------------------------------------------------------------
    # 조회 — Reads
    # ------------------------------------------------------------------
    async def get(self, model: type[RecordType], record_id: uuid.UUID) -> RecordType | None:
        """ID로 단일 레코드를 조회합니다. 없으면 None.

        Fetch a record by identifier; returns None when absent.
        """
        id_column: str = self._registry.get(model).id_column.quoted
        return await self.get_one(
            model, lambda builder: builder.where(f"{id_column} = :record_id", record_id=record_id)
        )

    async def get_one(self, model: type[RecordType], build: BuildAction) -> RecordType | None:
        """빌드 조건에 맞는 단일 레코드를 조회합니다.

        Fetch the single record matching ``build``.

        Raises:
            MultipleResultsFound: 두 개 이상 일치할 때 (More than one row matched)
        """
        results: ResultSet[RecordType] = await self.get_all(model, build)
        if len(results) > 1:
            raise MultipleResultsFound(
                f"Expected at most one {model.__name__} row, found {len(results)}"
            )
        return results[0] if results else None

    async def get_multiple(
        self,
        model: type[RecordType],
        ids: Iterable[uuid.UUID],
    ) -> list[RecordType]:
        """여러 ID의 레코드를 한 번의 쿼리로 조회합니다.

        Fetch the records for ``ids`` in one batched query. Duplicate ids
        are removed first so each record comes back once; the result order
        does not follow the input order.
        """
        unique_ids: list[uuid.UUID] = list(dict.fromkeys(ids))
        if not unique_ids:
            return []

        id_column: str = self._registry.get(model).id_column.quoted
        return list(
            await self.get_all(
                model, lambda builder: builder.where(f"{id_column} = ANY(:ids)", ids=unique_ids)
            )
        )

    async def get_all(
        self,
        model: type[RecordType],
        build: BuildAction | None = None,
        pager: Pager | None = None,
        template: str | None = None,
    ) -> ResultSet[RecordType]:
        """빌드 조건에 맞는 레코드를 조회하고, 페이저가 있으면 페이지를 잘라 반환합니다.

        Return the records matching ``build``, optionally sliced by ``pager``.

        With a pager the total row count is computed first by a COUNT over
        the same query (order-by stripped), the pager is validated against
        it, and the page is fetched with OFFSET/FETCH. Without a pager the
        query runs unmodified and the totals describe the returned rows.

        Args:
            model: 레코드 클래스 (Record class to query)
            build: 쿼리 조각을 채우는 함수 (Callable populating the SqlBuilder)
            pager: 페이지 정보 (Optional pager)
            template: 사용자 정의 템플릿 (Custom template; defaults to the table's select)

        Returns:
            ResultSet: 레코드 목록과 전체 개수 (Records plus total metadata)

        Raises:
            PagingError: 요청 페이지가 결과 범위를 벗어날 때 (Page past the end of the results)
        """
        descriptor: TableDescriptor = self._registry.get(model)
        template = template or descriptor.default_template()
        builder: SqlBuilder = self._build(build)

        async with self._using_connection() as conn:
            total_results: int = 0
            total_pages: int = 1
            if pager is not None:
                total_results = await self._count(conn, builder, template)
                sanity_check_pager(total_results, pager)
                total_pages = total_pages_for(total_results, pager.page_size)
                built: SqlTemplate = builder.add_template(
                    f"{template} OFFSET :pager_offset ROWS FETCH NEXT :pager_limit ROWS ONLY",
                    pager_offset=pager.offset,
                    pager_limit=pager.page_size,
                )
            else:
                built = builder.add_template(template)

            self._total_gets += 1
            logger.debug(
                "Get all %s (total gets from database: %d): %s",
                model.__name__, self._total_gets, built.raw_sql,
            )
            result = await conn.execute(
                descriptor.select_statement(built.raw_sql, built.types), built.parameters
            )
            records: list[RecordType] = [descriptor.from_row(row) for row in result.mappings()]

        if pager is None:
            total_results = len(records)

        return ResultSet(records, total_pages=total_pages, total_results=total_results)

    async def count_rows(
        self,
        model: type[RecordType],
        build: BuildAction | None = None,
        template: str | None = None,
    ) -> int:
        """빌드 조건에 맞는 행 수를 셉니다.

        Count the rows the built query returns, wrapping it as a derived
        table with any order-by removed.
        """
        template = template or self._registry.get(model).default_template()
        async with self._using_connection() as conn:
            return await self._count(conn, self._build(build), template)

    async def get_all_from_query(
        self,
        model: type[RecordType],
        sql: str,
        params: Mapping[str, Any] | None = None,
    ) -> list[RecordType]:
        """직접 작성한 SQL로 레코드를 조회합니다 — Records from a hand-written query."""
        descriptor: TableDescriptor = self._registry.get(model)
        async with self._using_connection() as conn:
            result = await conn.execute(descriptor.select_statement(sql), dict(params or {}))
            return [descriptor.from_row(row) for row in result.mappings()]

    async def get_scalar_from_query(self, sql: str, params: Mapping[str, Any] | None = None) -> Any:
        """첫 행 첫 컬럼 값 — First column of the first row, or None."""
        async with self._using_connection() as conn:
            result = await conn.execute(text(sql), dict(params or {}))
            return result.scalar()

    async def get_all_strings_from_query(
        self,
        sql: str,
        params: Mapping[str, Any] | None = None,
    ) -> list[str]:
        async with self._using_connection() as conn:
            result = await conn.execute(text(sql), dict(params or {}))
            return [str(value) for value in result.scalars().all()]

    async def get_all_ids_from_query(
        self,
        sql: str,
        params: Mapping[str, Any] | None = None,
    ) -> list[uuid.UUID]:
        async with self._using_connection() as conn:
            result = await conn.execute(text(sql), dict(params or {}))
            return [
                value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
                for value in result.scalars().all()
            ]

    # ------------------------------------------------------------------
    # 저장 — Writes
    # ------------------------------------------------------------------
    async def save(
        self,
        record: Record,
        actor_id: uuid.UUID,
        insert_with_preset_id: bool = False,
    ) -> None:
        """레코드를 저장합니다 (없으면 INSERT, 있으면 UPDATE).

        Insert the record when it has no identifier (one is generated) or
        when ``insert_with_preset_id`` is set; otherwise update the row with
        the record's identifier. An identifier generated here is cleared
        again when the save fails, so the record can be saved once more.

        Args:
            record: 저장할 레코드 (Record to persist; its id is set on insert)
            actor_id: 변경한 사용자 ID (Id of the actor making the change)
            insert_with_preset_id: 미리 지정한 ID로 INSERT 강제 (Force INSERT with the preset id)

        Raises:
            ConflictError: 유일성 제약 위반 (Uniqueness constraint violated)
        """
        descriptor: TableDescriptor = self._registry.get(type(record))
        generated: bool = not record.has_id()
        inserting: bool = generated or insert_with_preset_id
        if generated:
            record.id = uuid.uuid4()

        statement = descriptor.insert_statement() if inserting else descriptor.update_statement()
        try:
            async with self._using_connection(transactional=True) as conn:
                await conn.execute(statement, descriptor.to_parameters(record))
        except IntegrityError as exc:
            if generated:
                record.id = None
            self._raise_if_duplicate_key(exc, actor_id)
            raise

        logger.debug(
            "%s %s %s by %s",
            "Inserted" if inserting else "Updated", descriptor.table_name, record.id, actor_id,
        )

    async def save_multiple(self, records: Sequence[Record], actor_id: uuid.UUID) -> None:
        """여러 레코드를 UPDATE/INSERT 묶음으로 저장합니다.

        Partition ``records`` into updates (id present) and inserts (id
        generated) and run each group as one batched statement inside a
        single transaction. All records must be of the same kind. Identifiers
        generated here are cleared again when the batch fails.

        Raises:
            ValueError: 레코드 종류가 섞여 있을 때 (Records of more than one kind)
            ConflictError: 유일성 제약 위반 (Uniqueness constraint violated by any record)
        """
        if not records:
            return

        kinds: set[type[Record]] = {type(record) for record in records}
        if len(kinds) > 1:
            raise ValueError(
                "save_multiple expects records of one kind, got "
                + ", ".join(sorted(kind.__name__ for kind in kinds))
            )

        descriptor: TableDescriptor = self._registry.get(type(records[0]))
        generated: list[Record] = []
        updates: list[dict[str, Any]] = []
        inserts: list[dict[str, Any]] = []
        for record in records:
            if record.has_id():
                updates.append(descriptor.to_parameters(record))
            else:
                record.id = uuid.uuid4()
                generated.append(record)
                inserts.append(descriptor.to_parameters(record))

        try:
            async with self._using_connection(transactional=True) as conn:
                if updates:
                    await conn.execute(descriptor.update_statement(), updates)
                if inserts:
                    await conn.execute(descriptor.insert_statement(), inserts)
        except IntegrityError as exc:
            for record in generated:
                record.id = None
            self._raise_if_duplicate_key(exc, actor_id)
            raise

        logger.debug(
            "Saved %s: %d updated, %d inserted by %s",
            descriptor.table_name, len(updates), len(inserts), actor_id,
        )

    async def execute(self, sql: str, params: Mapping[str, Any] | None = None) -> int:
        """파라미터화된 SQL을 실행하고 영향받은 행 수를 반환합니다.

        Execute a parameterized statement outside the record model and
        return the affected row count.
        """
        async with self._using_connection(transactional=True) as conn:
            result = await conn.execute(text(sql), dict(params or {}))
            return result.rowcount

    async def perform_health_check(self) -> datetime:
        """DB 현재 시각을 조회해 연결을 확인합니다 — Verify connectivity via NOW()."""
        async with self._using_connection() as conn:
            result = await conn.execute(text("SELECT NOW()"))
            return result.scalar_one()

    @staticmethod
    def sanity_check_pager(total_rows: int, pager: Pager | None) -> None:
        sanity_check_pager(total_rows, pager)

    # ------------------------------------------------------------------
    # 내부 헬퍼 — Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _build(build: BuildAction | None) -> SqlBuilder:
        builder = SqlBuilder()
        if build is not None:
            build(builder)
        return builder

    @staticmethod
    async def _count(conn: AsyncConnection, builder: SqlBuilder, template: str) -> int:
        # 정렬 슬롯 제거 후 파생 테이블로 감싸 COUNT
        # COUNT over the query as a derived table, order-by slot stripped
        built: SqlTemplate = builder.add_template(
            f"SELECT COUNT(*) FROM ( {strip_order_by(template)} ) derived"
        )
        result = await conn.execute(typed_text(built.raw_sql, built.types), built.parameters)
        return int(result.scalar_one())

    def _raise_if_duplicate_key(self, exc: IntegrityError, actor_id: uuid.UUID) -> None:
        """중복 키 위반이면 ConflictError로 변환합니다.

        Translate a duplicate-key violation into ConflictError; return
        silently for any other integrity error so the caller re-raises it.
        """
        sqlstate: str | None = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
        if sqlstate != _UNIQUE_VIOLATION and _DUPLICATE_KEY_MESSAGE not in str(exc):
            return

        logger.warning("Save by %s conflicted with an existing row: %s", actor_id, exc.orig)
        detail: str = _CONFLICT_MESSAGE
        if self._include_error_detail:
            detail = f"{_CONFLICT_MESSAGE} {exc.orig}"
        raise ConflictError(detail) from exc

