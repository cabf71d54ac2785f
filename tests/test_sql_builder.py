"""SQL 빌더 테스트.

SQL builder tests — Slot rendering, parameter merging and identifier quoting.
"""

import pytest

from sqlalchemy import String

from app.utils.sql_builder import SqlBuilder, quote_identifier, strip_order_by, typed_text
from app.utils.type_handlers import TrimmedString

TEMPLATE = 'SELECT * FROM "Security" /**innerjoin**/ /**leftjoin**/ /**where**/ /**orderby**/'


class TestSlotRendering:
    """템플릿 슬롯 치환 테스트."""

    def test_empty_builder_renders_empty_slots(self):
        """조각이 없으면 슬롯은 빈 문자열."""
        built = SqlBuilder().add_template(TEMPLATE)
        assert "/**" not in built.raw_sql
        assert "WHERE" not in built.raw_sql
        assert "ORDER BY" not in built.raw_sql
        assert built.parameters == {}

    def test_single_where(self):
        """TickerSymbol = AAPL 조건."""
        built = (
            SqlBuilder()
            .where('"TickerSymbol" = :ticker', ticker="AAPL")
            .add_template(TEMPLATE)
        )
        assert 'WHERE ("TickerSymbol" = :ticker)' in built.raw_sql
        assert built.parameters == {"ticker": "AAPL"}

    def test_multiple_where_joined_with_and(self):
        built = (
            SqlBuilder()
            .where('"Name" = :name', name="Apple")
            .where('"LogoUrl" IS NOT NULL')
            .add_template(TEMPLATE)
        )
        assert 'WHERE ("Name" = :name) AND ("LogoUrl" IS NOT NULL)' in built.raw_sql

    def test_order_by(self):
        built = SqlBuilder().order_by('"TickerSymbol"').order_by('"Name" DESC').add_template(TEMPLATE)
        assert built.raw_sql.endswith('ORDER BY "TickerSymbol", "Name" DESC')

    def test_joins(self):
        built = (
            SqlBuilder()
            .inner_join('"ValueOverTime" v ON v."SecurityId" = "Security"."Id"')
            .left_join('"Watchlist" w ON "Security"."Id" = ANY(w."SecurityIds")')
            .add_template(TEMPLATE)
        )
        assert 'INNER JOIN "ValueOverTime" v ON' in built.raw_sql
        assert 'LEFT JOIN "Watchlist" w ON' in built.raw_sql
        assert built.raw_sql.index("INNER JOIN") < built.raw_sql.index("LEFT JOIN")

    def test_fragment_order_does_not_matter(self):
        """조각 추가 순서와 무관하게 같은 SQL."""
        first = SqlBuilder().order_by('"Name"').where('"Id" = :id', id=1).add_template(TEMPLATE)
        second = SqlBuilder().where('"Id" = :id', id=1).order_by('"Name"').add_template(TEMPLATE)
        assert first.raw_sql == second.raw_sql
        assert first.parameters == second.parameters

    def test_template_parameters_merged(self):
        """템플릿 전용 파라미터가 빌더 파라미터와 병합됨."""
        builder = SqlBuilder().where('"Name" = :name', name="Apple")
        built = builder.add_template(TEMPLATE + " OFFSET :pager_offset ROWS", pager_offset=20)
        assert built.parameters == {"name": "Apple", "pager_offset": 20}
        # 빌더 자체 파라미터는 변하지 않음
        assert builder.parameters == {"name": "Apple"}


class TestParameters:
    """파라미터 이름 유일성 테스트."""

    def test_rebinding_same_value_allowed(self):
        builder = SqlBuilder().where('"A" = :v', v=1).where('"B" = :v', v=1)
        assert builder.parameters == {"v": 1}

    def test_rebinding_different_value_rejected(self):
        builder = SqlBuilder().where('"A" = :v', v=1)
        with pytest.raises(ValueError):
            builder.where('"B" = :v', v=2)


class TestHelpers:
    def test_quote_identifier(self):
        assert quote_identifier("TickerSymbol") == '"TickerSymbol"'
        assert quote_identifier('odd"name') == '"odd""name"'

    def test_strip_order_by(self):
        assert "/**orderby**/" not in strip_order_by(TEMPLATE)
        assert "/**where**/" in strip_order_by(TEMPLATE)


class TestBindTypes:
    """파라미터 타입 지정 테스트."""

    def test_types_carried_into_template(self):
        built = (
            SqlBuilder()
            .where('"TickerSymbol" = :ticker', ticker=" AAPL ")
            .bind_types(ticker=TrimmedString(16))
            .add_template(TEMPLATE)
        )
        assert isinstance(built.types["ticker"], TrimmedString)

    def test_typed_text_binds_present_names_only(self):
        statement = typed_text(
            'SELECT 1 WHERE "A" = :a', {"a": TrimmedString(16), "missing": String()}
        )
        binds = statement.compile().binds
        assert isinstance(binds["a"].type, TrimmedString)
        assert "missing" not in binds

    def test_typed_text_ignores_casts(self):
        """``::text`` 캐스트는 파라미터가 아님."""
        statement = typed_text(
            'SELECT "A"::text FROM "T" WHERE "B" = :a', {"text": String(), "a": TrimmedString(16)}
        )
        binds = statement.compile().binds
        assert set(binds) == {"a"}
