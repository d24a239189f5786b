# hrms/domains/ast/crud.py

"""
'ast' 도메인의 CRUD 작업을 담당하는 모듈입니다.
"""

from typing import Any, Optional

from sqlalchemy.orm import selectinload
from sqlmodel.ext.asyncio.session import AsyncSession

from hrms.core.crud_base import CRUDBase
from hrms.core.lifecycle import utc_now
from hrms.utils.filters import FilterField, FilterKind
from . import models as ast_models
from . import schemas as ast_schemas


# =============================================================================
# 1. assets 테이블 CRUD
# =============================================================================
Asset = ast_models.Asset

asset = CRUDBase[ast_models.Asset, ast_schemas.AssetCreate, ast_schemas.AssetUpdate](
    Asset,
    label="asset",
    filter_fields=[
        FilterField("label", FilterKind.TEXT, Asset.label),
        FilterField("type", FilterKind.TEXT, Asset.type),
        FilterField("model", FilterKind.TEXT, Asset.model),
        FilterField("serial_number", FilterKind.TEXT, Asset.serial_number),
        FilterField("asset_type", FilterKind.ENUM, Asset.asset_type),
        FilterField("status", FilterKind.ENUM, Asset.status),
        FilterField("is_active", FilterKind.BOOLEAN, Asset.is_active),
        FilterField("created", FilterKind.DATE_RANGE, Asset.created_at),
    ],
    search_fields=[
        Asset.label,
        Asset.type,
        Asset.model,
        Asset.serial_number,
        Asset.laptop_processor,
        Asset.status,
        Asset.phone_number,
        Asset.phone_company,
        Asset.mobile_imei_1,
        Asset.mobile_imei_2,
    ],
)


# =============================================================================
# 2. asset_tracking 테이블 CRUD
# =============================================================================
AssetTracking = ast_models.AssetTracking

# 자산/사용자 요약은 소프트 삭제 여부와 무관하게 로드합니다 (과거 배정 이력 표시).
TRACKING_LOAD_OPTIONS = (
    selectinload(AssetTracking.asset),
    selectinload(AssetTracking.user),
)


class CRUDAssetTracking(CRUDBase[ast_models.AssetTracking, ast_schemas.AssetTrackingCreate, ast_schemas.AssetTrackingUpdate]):
    def __init__(self):
        super().__init__(
            model=AssetTracking,
            label="asset tracking",
            filter_fields=[
                FilterField("asset_id", FilterKind.EXACT, AssetTracking.asset_id),
                FilterField("user_id", FilterKind.EXACT, AssetTracking.user_id),
                FilterField("assigned", FilterKind.DATE_RANGE, AssetTracking.assigned_at),
                FilterField("created", FilterKind.DATE_RANGE, AssetTracking.created_at),
            ],
        )

    def open_condition(self):
        """아직 회수되지 않은(removed_at IS NULL) 배정만."""
        return self.model.removed_at.is_(None)

    async def get_detail(self, db: AsyncSession, id: Any) -> ast_models.AssetTracking:
        return await self.get_or_404(db, id, options=TRACKING_LOAD_OPTIONS)

    async def create(
        self, db: AsyncSession, *, obj_in: ast_schemas.AssetTrackingCreate, extra: Optional[dict] = None
    ) -> ast_models.AssetTracking:
        """
        배정 기록을 생성합니다. assigned_at 생략 시 현재 시각, removed_at 생략 시 NULL 입니다.
        같은 자산의 다른 열린 배정 여부는 검사하지 않으며,
        존재하지 않는 자산/사용자 ID 는 외래 키 오류(데이터 무결성 오류)로 드러납니다.
        """
        db_obj = await super().create(
            db, obj_in=obj_in, extra={"assigned_at": obj_in.assigned_at or utc_now()}
        )
        return await self.get_detail(db, db_obj.id)

    async def update(
        self, db: AsyncSession, *, db_obj: ast_models.AssetTracking, obj_in: ast_schemas.AssetTrackingUpdate
    ) -> ast_models.AssetTracking:
        tracking_id = db_obj.id
        await super().update(db, db_obj=db_obj, obj_in=obj_in)
        return await self.get_detail(db, tracking_id)


asset_tracking = CRUDAssetTracking()
