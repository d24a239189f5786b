# hrms/domains/ast/models.py

"""
'ast' 도메인의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

- assets: asset_type 태그(phone | mobile | laptop)와 종류별 선택 필드(laptop_*, mobile_*, phone_*)를 갖는 장비 자산.
- asset_tracking: 자산 하나를 사용자 한 명에게 배정한 기간 기록.
  removed_at 이 NULL 이면 '현재 배정 중'이며, 이는 소프트 삭제(is_active)와 별개의 상태입니다.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Column, ForeignKey, Text
from sqlmodel import Field, Relationship, SQLModel

from hrms.core.lifecycle import SoftDeleteMixin, TimestampMixin, lifecycle_check, utc_now
from hrms.core.types import UTCDateTime, value_enum
from hrms.domains.usr.models import User


class AssetType(str, Enum):
    PHONE = "phone"
    MOBILE = "mobile"
    LAPTOP = "laptop"


class AssetStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


# =============================================================================
# 1. assets 테이블 모델
# =============================================================================
class AssetBase(SQLModel):
    label: Optional[str] = Field(default=None, max_length=255, description="자산 라벨 (예: Laptop-001)")
    type: Optional[str] = Field(default=None, max_length=255, description="자산 분류 (자유 입력)")
    asset_type: Optional[AssetType] = Field(default=None, sa_type=value_enum(AssetType), description="자산 종류 태그")
    model: Optional[str] = Field(default=None, max_length=255, description="모델명")
    serial_number: Optional[str] = Field(default=None, max_length=255, description="시리얼 번호")
    ram: Optional[str] = Field(default=None, max_length=255)
    status: Optional[AssetStatus] = Field(default=None, sa_type=value_enum(AssetStatus), description="운용 상태")

    # 노트북
    laptop_processor: Optional[str] = Field(default=None, max_length=255)
    laptop_ssd: Optional[str] = Field(default=None, max_length=255)
    laptop_hdd: Optional[str] = Field(default=None, max_length=255)
    laptop_graphics_card: Optional[str] = Field(default=None, max_length=255)
    laptop_monitor: Optional[str] = Field(default=None, max_length=255)

    # 휴대폰
    mobile_imei_1: Optional[str] = Field(default=None, max_length=255)
    mobile_imei_2: Optional[str] = Field(default=None, max_length=255)
    mobile_internal_memory: Optional[str] = Field(default=None, max_length=255)
    mobile_external_memory: Optional[str] = Field(default=None, max_length=255)

    # 유선/회선 전화
    phone_number: Optional[str] = Field(default=None, max_length=50)
    phone_company: Optional[str] = Field(default=None, max_length=255)
    phone_current_plan: Optional[str] = Field(default=None, max_length=255)
    phone_legal_owner: Optional[str] = Field(default=None, max_length=255)
    phone_comment: Optional[str] = Field(default=None, sa_column=Column(Text))

    details: Optional[str] = Field(default=None, sa_column=Column(Text), description="추가 설명")


class Asset(AssetBase, TimestampMixin, SoftDeleteMixin, table=True):
    __tablename__ = "assets"
    __table_args__ = (lifecycle_check("assets"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)


# =============================================================================
# 2. asset_tracking 테이블 모델
# =============================================================================
class AssetTracking(TimestampMixin, SoftDeleteMixin, table=True):
    """
    자산-사용자 배정 이력. 단순 다대다 피벗이 아닌 기간을 가진 엔티티입니다.
    같은 자산에 대해 동시에 열린(removed_at IS NULL) 배정이 여러 개 존재할 수 있습니다.
    """
    __tablename__ = "asset_tracking"
    __table_args__ = (lifecycle_check("asset_tracking"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    asset_id: uuid.UUID = Field(
        sa_column=Column(ForeignKey("assets.id", ondelete="CASCADE"), nullable=False, index=True),
        description="자산 ID (FK)"
    )
    user_id: uuid.UUID = Field(
        sa_column=Column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        description="사용자 ID (FK)"
    )
    assigned_at: Optional[datetime] = Field(default_factory=utc_now, sa_type=UTCDateTime, description="배정 일시")
    removed_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime, description="회수 일시 (NULL = 현재 배정 중)")

    # 자산/사용자가 소프트 삭제되어도 과거 배정 기록에서는 계속 보여야 하므로 활성 필터 없이 조인합니다.
    asset: Optional[Asset] = Relationship()
    user: Optional[User] = Relationship()
