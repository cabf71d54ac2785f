"""테이블 레지스트리 — 레코드 종류별 테이블 정보.

Table registry — Maps each record class to a table descriptor.

Record classes are registered explicitly at startup. The descriptor holds
the table name, the ordered column list and the identifier column, and
renders the statements the data access service executes. Table names come
from the model's metadata unless overridden by configuration.

Usage:
    registry = TableRegistry(RECORD_MODELS, table_names=settings.DB_TABLE_NAMES)
    descriptor = registry.get(Security)
"""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from sqlalchemy import ColumnDefault, bindparam, inspect, text
from sqlalchemy.engine import RowMapping
from sqlalchemy.sql.elements import TextClause
from sqlalchemy.sql.selectable import TextualSelect
from sqlalchemy.types import TypeEngine

from app.models.record import Record
from app.utils.sql_builder import (
    INNER_JOIN_SLOT,
    LEFT_JOIN_SLOT,
    ORDER_BY_SLOT,
    WHERE_SLOT,
    quote_identifier,
    typed_text,
)


@dataclass(frozen=True)
class ColumnMapping:
    """속성 ↔ 컬럼 매핑.

    Attributes:
        attribute: 모델 속성 이름 (Model attribute name, also the bind parameter name)
        name: 데이터베이스 컬럼 이름 (Database column name)
        type: 컬럼 타입 (SQLAlchemy column type applied on bind and read)
        default: 컬럼 기본값 (Column default from the model, if any)
    """

    attribute: str
    name: str
    type: TypeEngine
    default: ColumnDefault | None = None

    @property
    def quoted(self) -> str:
        return quote_identifier(self.name)

    def default_value(self) -> Any:
        if self.default is None:
            return None
        if self.default.is_callable:
            return self.default.arg(None)
        if self.default.is_scalar:
            return self.default.arg
        return None


@dataclass(frozen=True)
class TableDescriptor:
    """레코드 종류 하나의 테이블 정보.

    Table information for one record kind.

    Attributes:
        model: 레코드 클래스 (Record class)
        table_name: 테이블 이름, 따옴표 제외 (Unquoted table name)
        columns: 순서 있는 컬럼 매핑 (Ordered column mappings)
        id_column: 식별자 컬럼 매핑 (Identifier column mapping)
    """

    model: type[Record]
    table_name: str
    columns: tuple[ColumnMapping, ...]
    id_column: ColumnMapping

    @property
    def quoted_table(self) -> str:
        return quote_identifier(self.table_name)

    def column(self, name: str) -> ColumnMapping:
        """컬럼 이름(또는 속성 이름)으로 매핑을 찾습니다.

        Look a column up by database column name or by attribute name.

        Raises:
            ValueError: 등록되지 않은 컬럼 (Unknown column for this table)
        """
        for column in self.columns:
            if column.name == name or column.attribute == name:
                return column
        raise ValueError(f"Unknown column '{name}' for table {self.table_name}")

    def default_template(self) -> str:
        """기본 SELECT 템플릿.

        Default select template. Columns are qualified with the table name
        so joined tables never shadow record columns.
        """
        select_list: str = ", ".join(
            f"{self.quoted_table}.{column.quoted}" for column in self.columns
        )
        return (
            f"SELECT {select_list} FROM {self.quoted_table} "
            f"{INNER_JOIN_SLOT} {LEFT_JOIN_SLOT} {WHERE_SLOT} {ORDER_BY_SLOT}"
        )

    def select_statement(
        self,
        raw_sql: str,
        bind_types: Mapping[str, TypeEngine] | None = None,
    ) -> TextualSelect:
        """결과 컬럼 타입이 지정된 SELECT 문 — Typed select over this table's columns.

        Parameters listed in ``bind_types`` are bound with their column type.
        """
        return typed_text(raw_sql, dict(bind_types or {})).columns(
            **{column.name: column.type for column in self.columns}
        )

    def insert_statement(self) -> TextClause:
        column_list: str = ", ".join(column.quoted for column in self.columns)
        value_list: str = ", ".join(f":{column.attribute}" for column in self.columns)
        return self._typed(
            f"INSERT INTO {self.quoted_table} ({column_list}) VALUES ({value_list})"
        )

    def update_statement(self) -> TextClause:
        assignments: str = ", ".join(
            f"{column.quoted} = :{column.attribute}"
            for column in self.columns
            if column is not self.id_column
        )
        return self._typed(
            f"UPDATE {self.quoted_table} SET {assignments} "
            f"WHERE {self.id_column.quoted} = :{self.id_column.attribute}"
        )

    def to_parameters(self, record: Record) -> dict[str, Any]:
        """레코드 → 바인딩 파라미터.

        Record attributes keyed by bind name. Unset attributes with a model
        default receive it, and the default is written back to the record.
        """
        parameters: dict[str, Any] = {}
        for column in self.columns:
            value: Any = getattr(record, column.attribute)
            if value is None and column.default is not None:
                value = column.default_value()
                setattr(record, column.attribute, value)
            parameters[column.attribute] = value
        return parameters

    def from_row(self, row: RowMapping) -> Record:
        """결과 행 → 레코드 (Build a record from a result row)."""
        values: dict[str, Any] = {
            column.attribute: row[column.name] for column in self.columns if column.name in row
        }
        return self.model(**values)

    def _typed(self, sql: str) -> TextClause:
        return text(sql).bindparams(
            *(bindparam(column.attribute, type_=column.type) for column in self.columns)
        )


class TableRegistry:
    """레코드 종류 → 테이블 정보 등록부.

    Registration table mapping record classes to descriptors.

    Args:
        models: 등록할 레코드 클래스 목록 (Record classes to register)
        table_names: 테이블 이름 재정의, 클래스 이름 → 테이블 이름
                     (Table name overrides keyed by record class name)
    """

    def __init__(
        self,
        models: Iterable[type[Record]] = (),
        table_names: Mapping[str, str] | None = None,
    ) -> None:
        self._table_names: dict[str, str] = dict(table_names or {})
        self._descriptors: dict[type[Record], TableDescriptor] = {}
        for model in models:
            self.register(model)

    def register(self, model: type[Record]) -> TableDescriptor:
        mapper = inspect(model)
        columns: list[ColumnMapping] = [
            ColumnMapping(
                attribute=prop.key,
                name=prop.columns[0].name,
                type=prop.columns[0].type,
                default=prop.columns[0].default,
            )
            for prop in mapper.column_attrs
        ]
        id_name: str = mapper.primary_key[0].name
        id_column: ColumnMapping = next(column for column in columns if column.name == id_name)

        descriptor = TableDescriptor(
            model=model,
            table_name=self._table_names.get(model.__name__, mapper.local_table.name),
            columns=tuple(columns),
            id_column=id_column,
        )
        self._descriptors[model] = descriptor
        return descriptor

    def get(self, model: type[Record]) -> TableDescriptor:
        """레코드 종류의 테이블 정보를 반환합니다.

        Raises:
            LookupError: 등록되지 않은 레코드 종류 (Record kind not registered)
        """
        try:
            return self._descriptors[model]
        except KeyError:
            raise LookupError(f"Record type {model.__name__} is not registered") from None

    def __contains__(self, model: object) -> bool:
        return model in self._descriptors
