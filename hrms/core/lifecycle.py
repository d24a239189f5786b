# hrms/core/lifecycle.py

"""
모든 주요 엔티티가 공유하는 레코드 수명 주기(soft delete) 모델입니다.

레코드는 ACTIVE 또는 DELETED(at) 두 상태 중 하나만 가질 수 있으며, 한 방향으로만 전이합니다.
DB에는 조회/인덱스 편의를 위해 `is_active`, `deleted_at` 두 컬럼으로 저장되지만,
값은 항상 `Lifecycle.as_values()` 한 곳에서만 만들어지고
테이블 CHECK 제약이 두 컬럼의 불일치를 막습니다.
"""

from dataclasses import dataclass
from datetime import datetime, UTC
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy import CheckConstraint
from sqlmodel import Field, SQLModel

from hrms.core.types import UTCDateTime


def utc_now() -> datetime:
    return datetime.now(UTC)


class LifecycleState(str, Enum):
    ACTIVE = "active"
    DELETED = "deleted"


@dataclass(frozen=True)
class Lifecycle:
    """ACTIVE 이거나, 삭제 시각을 동반한 DELETED 인 태그드 상태 값입니다."""
    state: LifecycleState
    deleted_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if (self.state is LifecycleState.DELETED) != (self.deleted_at is not None):
            raise ValueError("deleted_at must be set if and only if the state is DELETED")

    @classmethod
    def active(cls) -> "Lifecycle":
        return cls(LifecycleState.ACTIVE)

    @classmethod
    def deleted(cls, at: Optional[datetime] = None) -> "Lifecycle":
        return cls(LifecycleState.DELETED, at or utc_now())

    @property
    def is_active(self) -> bool:
        return self.state is LifecycleState.ACTIVE

    def as_values(self) -> Dict[str, Any]:
        """UPDATE/INSERT 문에 그대로 넣을 수 있는 컬럼 값 딕셔너리를 반환합니다."""
        return {"is_active": self.is_active, "deleted_at": self.deleted_at}


def lifecycle_check(table_name: str) -> CheckConstraint:
    """is_active 와 deleted_at 이 서로 다른 상태를 말하지 못하도록 하는 테이블 제약."""
    return CheckConstraint(
        "(is_active AND deleted_at IS NULL) OR (NOT is_active AND deleted_at IS NOT NULL)",
        name=f"ck_{table_name}_lifecycle",
    )


# =============================================================================
# 공통 컬럼 믹스인
# =============================================================================
class TimestampMixin(SQLModel):
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=UTCDateTime,
        nullable=False,
        description="레코드 생성 일시"
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_type=UTCDateTime,
        sa_column_kwargs={"onupdate": utc_now},
        nullable=False,
        description="레코드 마지막 업데이트 일시"
    )


class SoftDeleteMixin(SQLModel):
    is_active: bool = Field(default=True, index=True, description="활성(미삭제) 여부")
    deleted_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime, description="소프트 삭제 일시")

    @property
    def lifecycle(self) -> Lifecycle:
        if self.is_active:
            return Lifecycle.active()
        return Lifecycle.deleted(self.deleted_at)

    def apply_lifecycle(self, lifecycle: Lifecycle) -> None:
        for key, value in lifecycle.as_values().items():
            setattr(self, key, value)
