# hrms/domains/ast/schemas.py

"""
'ast' 도메인 (자산, 자산 배정 이력)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from sqlmodel import SQLModel

from hrms.domains.shared.schemas import AttachmentRead
from hrms.domains.usr.schemas import LifecycleRead, PageMeta
from .models import AssetStatus, AssetType


# =============================================================================
# 1. 자산 (Asset) 스키마
# =============================================================================
class AssetBase(SQLModel):
    label: Optional[str] = Field(None, max_length=255)
    type: Optional[str] = Field(None, max_length=255)
    asset_type: Optional[AssetType] = None
    model: Optional[str] = Field(None, max_length=255)
    serial_number: Optional[str] = Field(None, max_length=255)
    ram: Optional[str] = Field(None, max_length=255)
    status: Optional[AssetStatus] = None
    laptop_processor: Optional[str] = Field(None, max_length=255)
    laptop_ssd: Optional[str] = Field(None, max_length=255)
    laptop_hdd: Optional[str] = Field(None, max_length=255)
    laptop_graphics_card: Optional[str] = Field(None, max_length=255)
    laptop_monitor: Optional[str] = Field(None, max_length=255)
    mobile_imei_1: Optional[str] = Field(None, max_length=255)
    mobile_imei_2: Optional[str] = Field(None, max_length=255)
    mobile_internal_memory: Optional[str] = Field(None, max_length=255)
    mobile_external_memory: Optional[str] = Field(None, max_length=255)
    phone_number: Optional[str] = Field(None, max_length=50)
    phone_company: Optional[str] = Field(None, max_length=255)
    phone_current_plan: Optional[str] = Field(None, max_length=255)
    phone_legal_owner: Optional[str] = Field(None, max_length=255)
    phone_comment: Optional[str] = None
    details: Optional[str] = None


class AssetCreate(AssetBase):
    pass


class AssetUpdate(AssetBase):
    """모든 필드가 선택 사항이므로 Base 와 같은 모양이며, exclude_unset 으로 부분 수정합니다."""
    pass


class AssetSummary(SQLModel):
    id: uuid.UUID
    label: Optional[str] = None
    asset_type: Optional[AssetType] = None
    model: Optional[str] = None
    serial_number: Optional[str] = None
    status: Optional[AssetStatus] = None
    is_active: bool


class AssetRead(AssetBase, LifecycleRead):
    id: uuid.UUID
    attachments: List[AttachmentRead] = Field(default_factory=list)


class AssetResponse(BaseModel):
    message: str
    asset: AssetRead


class AssetListResponse(PageMeta):
    message: str
    assets: List[AssetRead]


class AssetDeleteResponse(BaseModel):
    message: str
    assetId: uuid.UUID


# =============================================================================
# 2. 자산 배정 이력 (AssetTracking) 스키마
# =============================================================================
class AssetTrackingCreate(SQLModel):
    asset_id: uuid.UUID
    user_id: uuid.UUID
    assigned_at: Optional[datetime] = Field(None, description="생략 시 현재 시각")
    removed_at: Optional[datetime] = Field(None, description="생략 시 NULL (현재 배정 중)")


class AssetTrackingUpdate(SQLModel):
    """빈 문자열 또는 null 을 보낸 날짜 필드는 NULL 로 비워집니다."""
    asset_id: Optional[uuid.UUID] = None
    user_id: Optional[uuid.UUID] = None
    assigned_at: Optional[datetime] = None
    removed_at: Optional[datetime] = None

    @field_validator("assigned_at", "removed_at", mode="before")
    @classmethod
    def blank_date_is_null(cls, value):
        return None if value == "" else value


class TrackedUserSummary(SQLModel):
    id: uuid.UUID
    user_number: str
    name: str
    is_active: bool


class AssetTrackingRead(LifecycleRead):
    id: uuid.UUID
    asset_id: uuid.UUID
    user_id: uuid.UUID
    assigned_at: Optional[datetime] = None
    removed_at: Optional[datetime] = None
    asset: Optional[AssetSummary] = None
    user: Optional[TrackedUserSummary] = None


class AssetTrackingResponse(BaseModel):
    message: str
    assetTracking: AssetTrackingRead


class AssetTrackingListResponse(PageMeta):
    message: str
    assetTrackings: List[AssetTrackingRead]


class AssetTrackingDeleteResponse(BaseModel):
    message: str
    assetTrackingId: uuid.UUID
