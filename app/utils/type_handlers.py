"""커스텀 컬럼 타입 모듈.

Custom column types used by record models.
Each type marshals a Python value to its PostgreSQL representation on
write and back on read; they apply whenever a statement binds or selects
a column through its declared type.

Types:
    - TrimmedString: 앞뒤 공백 제거 문자열 (Whitespace-trimmed string)
    - EnumIntArray / EnumShortArray: 열거형 배열 ↔ integer[] / smallint[]
    - JsonbDocument: JSON 문서 ↔ JSONB
    - JsonbModel: Pydantic 모델 ↔ JSONB
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel
from sqlalchemy import Integer, SmallInteger, String
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeDecorator


class TrimmedString(TypeDecorator):
    """앞뒤 공백을 제거하는 문자열 타입.

    String stripped of surrounding whitespace on write and read.
    NULL is read back as an empty string.
    """

    impl = String
    cache_ok = True

    def process_bind_param(self, value: str | None, dialect: Dialect) -> str | None:
        return value.strip() if value is not None else None

    def process_result_value(self, value: str | None, dialect: Dialect) -> str:
        return value.strip() if value is not None else ""


class _EnumArray(TypeDecorator):
    """열거형 배열 공통 구현 — Enum members stored as an integer array."""

    cache_ok = True

    def __init__(self, enum_class: type[Enum], *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.enum_class: type[Enum] = enum_class

    def process_bind_param(self, value: Any, dialect: Dialect) -> list[int] | None:
        if value is None:
            return None
        return [int(member.value) for member in value]

    def process_result_value(self, value: Any, dialect: Dialect) -> list[Enum] | None:
        if value is None:
            return None
        return [self.enum_class(item) for item in value]


class EnumIntArray(_EnumArray):
    """열거형 배열 ↔ integer[] — Enum list stored as ``integer[]``."""

    impl = ARRAY(Integer)
    cache_ok = True


class EnumShortArray(_EnumArray):
    """열거형 배열 ↔ smallint[] — Enum list stored as ``smallint[]``."""

    impl = ARRAY(SmallInteger)
    cache_ok = True


class JsonbDocument(TypeDecorator):
    """JSON 문서 타입 — Free-form JSON document (dict/list) stored as JSONB."""

    impl = JSONB
    cache_ok = True


class JsonbModel(TypeDecorator):
    """Pydantic 모델을 JSONB로 저장하는 타입.

    Pydantic model serialized to JSONB on write and validated back into the
    model on read. NULL stays None.

    Args:
        model_class: 저장할 Pydantic 모델 클래스 (Pydantic model class to store)
    """

    impl = JSONB
    cache_ok = True

    def __init__(self, model_class: type[BaseModel], *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.model_class: type[BaseModel] = model_class

    def process_bind_param(self, value: Any, dialect: Dialect) -> Any:
        if value is None:
            return None
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json")
        # dict 입력도 검증 후 저장 — Validate plain dicts before storing
        return self.model_class.model_validate(value).model_dump(mode="json")

    def process_result_value(self, value: Any, dialect: Dialect) -> BaseModel | None:
        if value is None:
            return None
        return self.model_class.model_validate(value)
