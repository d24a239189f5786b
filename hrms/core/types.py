# hrms/core/types.py

"""
데이터베이스 백엔드에 무관한 사용자 정의 컬럼 타입 모듈입니다.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Type

from sqlalchemy import Enum as SAEnum
from sqlalchemy.types import DateTime, TypeDecorator


class UTCDateTime(TypeDecorator):
    """
    항상 UTC 기준의 timezone-aware datetime을 돌려주는 타임스탬프 타입입니다.

    - 저장 시: aware 값은 UTC로 변환하고, naive 값은 UTC로 간주합니다.
      PostgreSQL(timestamptz)에는 aware 값 그대로, 그 외(SQLite 등)에는 tzinfo를 제거해 저장합니다.
    - 조회 시: tzinfo가 없는 값에는 UTC를 붙여 돌려줍니다.

    따라서 '2025-01-01T00:00:00Z'로 저장한 값은 어떤 백엔드에서도 같은 값으로 다시 읽힙니다.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        else:
            value = value.astimezone(timezone.utc)
        if dialect.name == "postgresql":
            return value
        return value.replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if isinstance(value, str):
            value = datetime.fromisoformat(value)
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def value_enum(enum_cls: Type[Enum], length: int = 20) -> SAEnum:
    """
    Enum 멤버의 이름이 아닌 값("in-office", "users" 등)을 저장하는 문자열 기반 Enum 타입.
    네이티브 ENUM 타입을 만들지 않으므로 값 추가 시 DDL 변경이 필요 없습니다.
    """
    return SAEnum(
        enum_cls,
        values_callable=lambda members: [member.value for member in members],
        native_enum=False,
        length=length,
    )
