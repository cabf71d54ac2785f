"""테이블 레지스트리 테스트.

Table registry tests — Registration, column lookup, statement rendering and
record <-> row conversion. No database required.
"""

import uuid

import pytest

from app.models import RECORD_MODELS, Security, Watchlist
from app.repositories.table_registry import TableRegistry


@pytest.fixture
def registry() -> TableRegistry:
    return TableRegistry(RECORD_MODELS)


class TestRegistration:
    """레코드 종류 등록 테스트."""

    def test_registered_models(self, registry):
        for model in RECORD_MODELS:
            assert model in registry

    def test_unregistered_model_rejected(self):
        with pytest.raises(LookupError):
            TableRegistry().get(Security)

    def test_columns_and_id(self, registry):
        descriptor = registry.get(Security)
        assert descriptor.table_name == "Security"
        assert descriptor.id_column.name == "Id"
        assert {c.name for c in descriptor.columns} == {"Id", "Name", "LogoUrl", "TickerSymbol"}

    def test_table_name_override(self):
        """설정으로 테이블 이름 재정의."""
        registry = TableRegistry(RECORD_MODELS, table_names={"Security": "Securities"})
        assert registry.get(Security).table_name == "Securities"
        assert registry.get(Watchlist).table_name == "Watchlist"


class TestColumnLookup:
    def test_by_column_name_or_attribute(self, registry):
        descriptor = registry.get(Security)
        assert descriptor.column("TickerSymbol").attribute == "ticker_symbol"
        assert descriptor.column("ticker_symbol").name == "TickerSymbol"

    def test_unknown_column_rejected(self, registry):
        with pytest.raises(ValueError, match="Unknown column"):
            registry.get(Security).column("Price; DROP TABLE")


class TestStatements:
    """SQL 렌더링 테스트."""

    def test_default_template(self, registry):
        template = registry.get(Security).default_template()
        assert template.startswith('SELECT "Security"."')
        assert '"Security"."TickerSymbol"' in template
        assert 'FROM "Security"' in template
        for slot in ("/**innerjoin**/", "/**leftjoin**/", "/**where**/", "/**orderby**/"):
            assert slot in template

    def test_insert_statement(self, registry):
        sql = str(registry.get(Security).insert_statement())
        assert sql.startswith('INSERT INTO "Security" (')
        for column, param in [("Id", "id"), ("Name", "name"), ("TickerSymbol", "ticker_symbol")]:
            assert f'"{column}"' in sql
            assert f":{param}" in sql

    def test_update_statement(self, registry):
        """식별자는 SET이 아닌 WHERE에만 사용."""
        sql = str(registry.get(Security).update_statement())
        assert sql.startswith('UPDATE "Security" SET ')
        assert sql.endswith('WHERE "Id" = :id')
        assert '"TickerSymbol" = :ticker_symbol' in sql
        assert '"Id" = :id' not in sql.split(" WHERE ")[0]


class TestConversion:
    """레코드 ↔ 행 변환 테스트."""

    def test_to_parameters_applies_defaults(self, registry):
        """기본값이 있는 컬럼은 None 대신 기본값 사용, 레코드에도 반영."""
        watchlist = Watchlist(name="Empty")
        parameters = registry.get(Watchlist).to_parameters(watchlist)
        assert parameters["security_ids"] == []
        assert parameters["asset_classes"] == []
        assert parameters["display_settings"] is None
        assert watchlist.security_ids == []

    def test_from_row(self, registry):
        security_id = uuid.uuid4()
        security = registry.get(Security).from_row({
            "Id": security_id,
            "Name": "Apple Inc.",
            "LogoUrl": "",
            "TickerSymbol": "AAPL",
        })
        assert isinstance(security, Security)
        assert security.id == security_id
        assert security.ticker_symbol == "AAPL"
