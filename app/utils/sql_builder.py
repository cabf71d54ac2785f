"""SQL 빌더 유틸리티 모듈.

Parameterized SQL builder.
A query is a base template containing fixed named slots plus fragments
collected on a builder::

    SELECT "Security".* FROM "Security" /**innerjoin**/ /**leftjoin**/ /**where**/ /**orderby**/

Fragments added to the builder are rendered into their slot; slots without
fragments render as empty strings. Parameters use SQLAlchemy ``:name``
binding syntax. Parameters registered with ``bind_types`` carry a column type
so the type's bind processing (e.g. trimming) applies to the value.

Usage:
    builder = SqlBuilder().where('"TickerSymbol" = :ticker', ticker="AAPL")
    template = builder.add_template(descriptor.default_template())
    await conn.execute(text(template.raw_sql), template.parameters)
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable

from sqlalchemy import bindparam, text
from sqlalchemy.sql.elements import TextClause
from sqlalchemy.types import TypeEngine

# 템플릿 슬롯 — Named slots recognised in templates
INNER_JOIN_SLOT: str = "/**innerjoin**/"
LEFT_JOIN_SLOT: str = "/**leftjoin**/"
WHERE_SLOT: str = "/**where**/"
ORDER_BY_SLOT: str = "/**orderby**/"


def quote_identifier(name: str) -> str:
    """PostgreSQL 식별자를 큰따옴표로 감쌉니다.

    Double-quote a PostgreSQL identifier, escaping embedded quotes.
    """
    return '"' + name.replace('"', '""') + '"'


def strip_order_by(template: str) -> str:
    """정렬 슬롯을 제거합니다 — COUNT 쿼리는 정렬이 필요 없음.

    Remove the order-by slot so a wrapped COUNT never sorts.
    """
    return template.replace(ORDER_BY_SLOT, "")


@dataclass
class SqlTemplate:
    """렌더링된 SQL과 바인딩 파라미터.

    A rendered statement and its parameter bag.

    Attributes:
        raw_sql: 슬롯이 치환된 SQL (SQL with all slots substituted)
        parameters: 바인딩 파라미터 (Bind parameters by name)
        types: 파라미터 타입 (Column types for typed parameters, by name)
    """

    raw_sql: str
    parameters: dict[str, Any]
    types: dict[str, TypeEngine] = field(default_factory=dict)


@dataclass
class SqlBuilder:
    """쿼리 조각을 모으는 빌더.

    Collects optional query fragments and their parameters. Multiple
    ``where`` clauses are combined with AND; each fragment type goes into
    its own slot, so the order in which fragments are added does not
    change the rendered statement's meaning.
    """

    where_clauses: list[str] = field(default_factory=list)
    order_by_clauses: list[str] = field(default_factory=list)
    inner_joins: list[str] = field(default_factory=list)
    left_joins: list[str] = field(default_factory=list)
    parameters: dict[str, Any] = field(default_factory=dict)
    types: dict[str, TypeEngine] = field(default_factory=dict)

    def where(self, sql: str, **params: Any) -> "SqlBuilder":
        """WHERE 조건을 추가합니다 (여러 개면 AND 결합).

        Add a where condition; multiple conditions are ANDed.
        """
        self.where_clauses.append(sql)
        self.add_parameters(**params)
        return self

    def order_by(self, sql: str, **params: Any) -> "SqlBuilder":
        self.order_by_clauses.append(sql)
        self.add_parameters(**params)
        return self

    def inner_join(self, sql: str, **params: Any) -> "SqlBuilder":
        self.inner_joins.append(sql)
        self.add_parameters(**params)
        return self

    def left_join(self, sql: str, **params: Any) -> "SqlBuilder":
        self.left_joins.append(sql)
        self.add_parameters(**params)
        return self

    def add_parameters(self, **params: Any) -> "SqlBuilder":
        """파라미터를 추가합니다 — 이름은 쿼리 내에서 유일해야 함.

        Merge parameters into the bag.

        Raises:
            ValueError: 같은 이름이 다른 값으로 다시 바인딩될 때
                        (When a name is rebound to a different value)
        """
        _merge_parameters(self.parameters, params)
        return self

    def bind_types(self, **types: TypeEngine) -> "SqlBuilder":
        """파라미터에 컬럼 타입을 지정합니다.

        Bind parameters to column types, e.g. ``bind_types(ticker=TrimmedString())``.
        """
        self.types.update(types)
        return self

    def add_template(self, template: str, **params: Any) -> SqlTemplate:
        """템플릿에 조각을 채워 최종 SQL을 생성합니다.

        Render ``template`` with the collected fragments. ``params`` are
        template-level parameters (e.g. paging bounds) merged with the
        builder's own.

        Args:
            template: 슬롯을 포함한 기본 SQL (Base SQL containing named slots)
            **params: 템플릿 전용 파라미터 (Template-only parameters)

        Returns:
            SqlTemplate: 렌더링 결과 (Rendered SQL and parameters)
        """
        parameters: dict[str, Any] = dict(self.parameters)
        _merge_parameters(parameters, params)

        raw_sql: str = (
            template.replace(INNER_JOIN_SLOT, self._render_joins("INNER JOIN", self.inner_joins))
            .replace(LEFT_JOIN_SLOT, self._render_joins("LEFT JOIN", self.left_joins))
            .replace(WHERE_SLOT, self._render_where())
            .replace(ORDER_BY_SLOT, self._render_order_by())
        )
        return SqlTemplate(raw_sql=raw_sql, parameters=parameters, types=dict(self.types))

    def _render_where(self) -> str:
        if not self.where_clauses:
            return ""
        return "WHERE " + " AND ".join(f"({clause})" for clause in self.where_clauses)

    def _render_order_by(self) -> str:
        if not self.order_by_clauses:
            return ""
        return "ORDER BY " + ", ".join(self.order_by_clauses)

    @staticmethod
    def _render_joins(keyword: str, joins: list[str]) -> str:
        return "\n".join(f"{keyword} {join}" for join in joins)


# 빌드 액션 — A callable that populates a builder
BuildAction = Callable[[SqlBuilder], Any]


def _merge_parameters(target: dict[str, Any], params: dict[str, Any]) -> None:
    for name, value in params.items():
        if name in target and target[name] is not value and target[name] != value:
            raise ValueError(f"Parameter '{name}' is already bound to a different value")
        target[name] = value


# text() 와 같은 규칙 — Same bind-name rule as text(); "::type" casts are not binds
_BIND_NAME = re.compile(r"(?<![:\w\\]):(\w+)(?!:)")


def typed_text(raw_sql: str, types: dict[str, TypeEngine] | None = None) -> TextClause:
    """타입이 지정된 파라미터를 포함한 text() 문을 생성합니다.

    Build a ``text()`` statement binding each typed parameter that occurs in
    ``raw_sql``. Typed names whose fragment was dropped from the statement
    (e.g. order-by parameters in a COUNT) are skipped.
    """
    statement: TextClause = text(raw_sql)
    named: set[str] = set(_BIND_NAME.findall(raw_sql))
    present: list[str] = [name for name in (types or {}) if name in named]
    if present:
        statement = statement.bindparams(*(bindparam(name, type_=types[name]) for name in present))
    return statement
