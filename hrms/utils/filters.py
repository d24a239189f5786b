# hrms/utils/filters.py

"""
목록 조회용 WHERE / ORDER BY 절 생성 유틸리티 모듈입니다.

엔티티별 필터 로직을 조건문으로 흩어 놓지 않고,
엔티티마다 `FilterField(name, kind, column)`의 순서 있는 목록을 선언한 뒤
`build_where_clause()` 하나로 SQLAlchemy 조건식을 만듭니다.

필드 종류별 의미:
- TEXT      : 대소문자 무시 부분 일치 (ILIKE '%값%')
- EXACT/ENUM: 동등 비교
- BOOLEAN   : "true"/"false" 문자열 또는 bool 을 bool 로 변환 후 동등 비교
- DATE      : 하루 구간 [00:00:00.000, 23:59:59.999] (UTC 기준)
- DATE_RANGE: from(>=, UTC 하루 시작) / to(<=, UTC 하루 끝), 둘 다 선택 사항
None, 빈 문자열 값은 조건을 만들지 않고 건너뜁니다.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time, UTC
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Tuple, Type, Union

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.types import Date, DateTime
from sqlmodel import SQLModel

from hrms.core.exceptions import BadRequestError

_ISO_DAY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_END_OF_DAY = time(23, 59, 59, 999000)
# ISO 8601 이 아닌 입력에 대해 순서대로 시도하는 형식 (시간대 정보가 없으면 UTC 로 간주)
_FALLBACK_FORMATS = (
    "%Y/%m/%d",
    "%Y.%m.%d",
    "%Y%m%d",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y",
    "%d %b %Y",
    "%b %d %Y",
    "%B %d, %Y",
)

SORT_ASC = "ASC"
SORT_DESC = "DESC"


class FilterKind(str, Enum):
    TEXT = "text"
    EXACT = "exact"
    ENUM = "enum"
    BOOLEAN = "boolean"
    DATE = "date"
    DATE_RANGE = "dateRange"


@dataclass(frozen=True)
class FilterField:
    """
    필터 키 하나에 대한 선언.

    DATE_RANGE 필드는 `filters[name]`에 {"from": .., "to": ..} 또는 (from, to)를 받거나,
    없으면 평면 쿼리 파라미터 `{name}From` / `{name}To`를 읽습니다.
    (예: name="created" -> createdFrom, createdTo)
    """
    name: str
    kind: FilterKind
    column: Any


# =============================================================================
# 1. 날짜 경계 계산
# =============================================================================
def _parse_date_text(text: str) -> Union[datetime, date]:
    if _ISO_DAY.match(text):
        # YYYY-MM-DD 는 서버 시간대와 무관하게 UTC 날짜로 해석합니다.
        return date.fromisoformat(text)
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ValueError(text)


def _to_utc_day(value: Any) -> date:
    """날짜/일시 값 또는 문자열을 UTC 기준 날짜로 정규화합니다."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            parsed = _parse_date_text(value.strip())
        except ValueError:
            raise BadRequestError(f"Invalid date value: {value}")
        return _to_utc_day(parsed)
    raise BadRequestError(f"Invalid date value: {value}")


def start_of_utc_day(value: Any) -> datetime:
    return datetime.combine(_to_utc_day(value), time.min, tzinfo=UTC)


def end_of_utc_day(value: Any) -> datetime:
    return datetime.combine(_to_utc_day(value), _END_OF_DAY, tzinfo=UTC)


def _is_date_only(column: Any) -> bool:
    column_type = getattr(column, "type", None)
    return isinstance(column_type, Date) and not isinstance(column_type, DateTime)


def _combine(conditions: Sequence[ColumnElement]) -> Optional[ColumnElement]:
    if not conditions:
        return None
    if len(conditions) == 1:
        return conditions[0]
    return and_(*conditions)


def build_date_range_clause(from_value: Any, to_value: Any, column: Any) -> Optional[ColumnElement]:
    """
    from/to 경계로 [UTC 하루 시작, UTC 하루 끝] 포함 구간 조건을 만듭니다.
    두 값이 모두 비어 있으면 None 을 반환합니다.
    DATE 타입 컬럼에는 시각 없이 날짜 경계로 비교합니다.
    """
    date_only = _is_date_only(column)
    conditions = []
    if not _is_blank(from_value):
        lower = start_of_utc_day(from_value)
        conditions.append(column >= (lower.date() if date_only else lower))
    if not _is_blank(to_value):
        upper = end_of_utc_day(to_value)
        conditions.append(column <= (upper.date() if date_only else upper))
    return _combine(conditions)


# =============================================================================
# 2. WHERE 절
# =============================================================================
def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value is True


def _range_bounds(value: Any) -> Tuple[Any, Any]:
    if isinstance(value, Mapping):
        return value.get("from"), value.get("to")
    if isinstance(value, (tuple, list)) and len(value) == 2:
        return value[0], value[1]
    return None, None


def _build_condition(field: FilterField, value: Any) -> Optional[ColumnElement]:
    column = field.column
    if field.kind is FilterKind.TEXT:
        return column.ilike(f"%{value}%")
    if field.kind is FilterKind.BOOLEAN:
        return column == _to_bool(value)
    if field.kind is FilterKind.DATE:
        return build_date_range_clause(value, value, column)
    if field.kind is FilterKind.DATE_RANGE:
        from_value, to_value = _range_bounds(value)
        return build_date_range_clause(from_value, to_value, column)
    # EXACT, ENUM
    return column == value


def build_where_clause(filters: Mapping[str, Any], fields: Sequence[FilterField]) -> Optional[ColumnElement]:
    """선언된 필드 순서대로 조건을 만들어 AND 로 묶습니다. 조건이 없으면 None."""
    conditions = []
    for field in fields:
        value = filters.get(field.name)
        if field.kind is FilterKind.DATE_RANGE and _is_blank(value):
            value = {"from": filters.get(f"{field.name}From"), "to": filters.get(f"{field.name}To")}
        if _is_blank(value):
            continue
        condition = _build_condition(field, value)
        if condition is not None:
            conditions.append(condition)
    return _combine(conditions)


def build_search_clause(term: Optional[str], columns: Sequence[Any]) -> Optional[ColumnElement]:
    """검색어 하나를 여러 컬럼에 대해 ILIKE 부분 일치로 OR 결합합니다."""
    if not term or not columns:
        return None
    pattern = f"%{term}%"
    return or_(*(column.ilike(pattern) for column in columns))


# =============================================================================
# 3. ORDER BY 절
# =============================================================================
def normalize_sort_order(sort_order: Optional[str]) -> str:
    """대소문자 무시. 'ASC'가 아니면 모두 'DESC'."""
    if sort_order and sort_order.strip().upper() == SORT_ASC:
        return SORT_ASC
    return SORT_DESC


def to_snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def build_order_clause(
    model: Type[SQLModel],
    sort_by: Optional[str],
    sort_order: Optional[str],
    *,
    default_sort: str = "created_at",
) -> ColumnElement:
    """
    단일 키 정렬식을 만듭니다.
    sort_by 는 camelCase(createdAt)도 허용하며, 테이블 컬럼이 아니면 default_sort 로 대체합니다.
    """
    columns = model.__table__.columns
    field = to_snake_case(sort_by) if sort_by else default_sort
    if field not in columns:
        field = default_sort
    column = getattr(model, field)
    return column.asc() if normalize_sort_order(sort_order) == SORT_ASC else column.desc()
