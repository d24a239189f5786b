# hrms/domains/ast/routers.py

"""
'ast' 도메인 (자산, 자산 배정 이력)과 관련된 API 엔드포인트를 정의하는 모듈입니다.
모든 엔드포인트는 관리자 전용입니다.
"""

import uuid
from typing import Any, List, Optional, Tuple

from fastapi import APIRouter, Depends, Query, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.datastructures import UploadFile as StarletteUploadFile
from sqlmodel.ext.asyncio.session import AsyncSession

from hrms.core import dependencies as deps
from hrms.core.config import settings
from hrms.core.database import get_session
from hrms.core.exceptions import BadRequestError
from hrms.domains.shared import services as attachment_services
from hrms.domains.shared.models import AttachmentKind
from hrms.services.cross_domain_service import soft_delete_with_attachments
from hrms.utils.pagination import ListParams
from hrms.utils.storage import StorageBackend

from . import crud as ast_crud
from . import models as ast_models
from . import schemas as ast_schemas

router = APIRouter(
    tags=["Asset Management (자산 관리)"],
    dependencies=[Depends(deps.get_current_admin_user)],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. 자산 (Asset) 관리 엔드포인트
# =============================================================================
async def to_asset_read(db: AsyncSession, db_asset: ast_models.Asset) -> ast_schemas.AssetRead:
    attachments = await attachment_services.fetch_batch(db, entity_ids=[db_asset.id], kind=AttachmentKind.ASSETS)
    return ast_schemas.AssetRead.model_validate(db_asset).model_copy(
        update={"attachments": attachments.get(str(db_asset.id), [])}
    )


async def asset_create_payload(request: Request) -> Tuple[ast_schemas.AssetCreate, List[UploadFile]]:
    """
    자산 생성 요청 본문을 읽습니다.
    JSON 본문, 또는 자산 필드와 선택적인 `files` 를 담은 multipart 폼을 모두 받습니다.
    """
    files: List[UploadFile] = []
    if request.headers.get("content-type", "").startswith("multipart/form-data"):
        form = await request.form()
        files = [value for value in form.getlist("files") if isinstance(value, StarletteUploadFile)]
        payload: Any = {
            key: value for key, value in form.multi_items() if not isinstance(value, StarletteUploadFile)
        }
    else:
        try:
            payload = await request.json()
        except ValueError:
            raise BadRequestError("Invalid JSON body")

    try:
        asset_in = ast_schemas.AssetCreate.model_validate(payload)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors())
    return asset_in, files


@router.post("/assets", response_model=ast_schemas.AssetResponse, status_code=status.HTTP_201_CREATED, summary="새 자산 등록")
async def create_asset(
    payload: Tuple[ast_schemas.AssetCreate, List[UploadFile]] = Depends(asset_create_payload),
    db: AsyncSession = Depends(get_session),
    storage: StorageBackend = Depends(deps.get_storage),
):
    """
    자산을 등록합니다. multipart 요청에 `files` 가 있으면 같은 요청에서 첨부파일로 업로드합니다.
    업로드가 실패하면 방금 만든 자산을 소프트 삭제하고 오류를 그대로 돌려줍니다.
    """
    asset_in, files = payload
    if len(files) > settings.MAX_UPLOAD_FILES:
        raise BadRequestError(f"Too many files (max {settings.MAX_UPLOAD_FILES})")

    db_asset = await ast_crud.asset.create(db, obj_in=asset_in)
    if files:
        asset_id = db_asset.id
        try:
            await attachment_services.upload(
                db, storage=storage, files=files, entity_id=asset_id, kind=AttachmentKind.ASSETS
            )
        except Exception:
            await ast_crud.asset.soft_delete(db, id=asset_id)
            raise
        db_asset = await ast_crud.asset.get_or_404(db, asset_id)
    return {"message": "Asset created successfully", "asset": await to_asset_read(db, db_asset)}


@router.get("/assets", response_model=ast_schemas.AssetListResponse, summary="자산 목록 조회")
async def read_assets(
    params: ListParams = Depends(),
    label: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    model: Optional[str] = Query(None),
    serial_number: Optional[str] = Query(None),
    asset_type: Optional[ast_models.AssetType] = Query(None),
    asset_status: Optional[ast_models.AssetStatus] = Query(None, alias="status"),
    is_active: Optional[bool] = Query(None),
    createdFrom: Optional[str] = Query(None, description="YYYY-MM-DD (UTC)"),
    createdTo: Optional[str] = Query(None, description="YYYY-MM-DD (UTC)"),
    db: AsyncSession = Depends(get_session),
):
    filters = {
        "label": label,
        "type": type,
        "model": model,
        "serial_number": serial_number,
        "asset_type": asset_type,
        "status": asset_status,
        "is_active": is_active,
        "createdFrom": createdFrom,
        "createdTo": createdTo,
    }
    assets, meta = await ast_crud.asset.get_page(db, params=params, filters=filters)
    attachments = await attachment_services.fetch_batch(
        db, entity_ids=[db_asset.id for db_asset in assets], kind=AttachmentKind.ASSETS
    )
    assets_read = [
        ast_schemas.AssetRead.model_validate(db_asset).model_copy(
            update={"attachments": attachments.get(str(db_asset.id), [])}
        )
        for db_asset in assets
    ]
    return {"message": "Assets retrieved successfully", "assets": assets_read, **meta}


@router.get("/assets/{asset_id}", response_model=ast_schemas.AssetResponse, summary="특정 자산 조회")
async def read_asset(asset_id: uuid.UUID, db: AsyncSession = Depends(get_session)):
    db_asset = await ast_crud.asset.get_or_404(db, asset_id)
    return {"message": "Asset retrieved successfully", "asset": await to_asset_read(db, db_asset)}


@router.patch("/assets/{asset_id}", response_model=ast_schemas.AssetResponse, summary="자산 수정")
async def update_asset(asset_id: uuid.UUID, asset_in: ast_schemas.AssetUpdate, db: AsyncSession = Depends(get_session)):
    db_asset = await ast_crud.asset.get_or_404(db, asset_id)
    db_asset = await ast_crud.asset.update(db, db_obj=db_asset, obj_in=asset_in)
    return {"message": "Asset updated successfully", "asset": await to_asset_read(db, db_asset)}


@router.delete("/assets/{asset_id}", response_model=ast_schemas.AssetDeleteResponse, summary="자산 삭제")
async def delete_asset(asset_id: uuid.UUID, db: AsyncSession = Depends(get_session)):
    """자산과 그 첨부파일을 한 트랜잭션에서 소프트 삭제합니다."""
    await soft_delete_with_attachments(db, crud=ast_crud.asset, kind=AttachmentKind.ASSETS, entity_id=asset_id)
    return {"message": "Asset deleted successfully", "assetId": asset_id}


# =============================================================================
# 2. 자산 배정 이력 (AssetTracking) 엔드포인트
# =============================================================================
@router.post(
    "/asset-tracking",
    response_model=ast_schemas.AssetTrackingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="자산 배정 기록 생성",
)
async def create_asset_tracking(
    tracking_in: ast_schemas.AssetTrackingCreate, db: AsyncSession = Depends(get_session)
):
    db_tracking = await ast_crud.asset_tracking.create(db, obj_in=tracking_in)
    return {"message": "Asset tracking created successfully", "assetTracking": db_tracking}


@router.get("/asset-tracking", response_model=ast_schemas.AssetTrackingListResponse, summary="자산 배정 기록 목록 조회")
async def read_asset_trackings(
    params: ListParams = Depends(),
    asset_id: Optional[uuid.UUID] = Query(None),
    user_id: Optional[uuid.UUID] = Query(None),
    activeOnly: bool = Query(False, description="true 이면 회수되지 않은(removed_at 없음) 배정만"),
    assignedFrom: Optional[str] = Query(None, description="YYYY-MM-DD (UTC)"),
    assignedTo: Optional[str] = Query(None, description="YYYY-MM-DD (UTC)"),
    createdFrom: Optional[str] = Query(None, description="YYYY-MM-DD (UTC)"),
    createdTo: Optional[str] = Query(None, description="YYYY-MM-DD (UTC)"),
    db: AsyncSession = Depends(get_session),
):
    filters = {
        "asset_id": asset_id,
        "user_id": user_id,
        "assignedFrom": assignedFrom,
        "assignedTo": assignedTo,
        "createdFrom": createdFrom,
        "createdTo": createdTo,
    }
    conditions = [ast_crud.asset_tracking.open_condition()] if activeOnly else []
    trackings, meta = await ast_crud.asset_tracking.get_page(
        db, params=params, filters=filters, conditions=conditions, options=ast_crud.TRACKING_LOAD_OPTIONS
    )
    return {"message": "Asset trackings retrieved successfully", "assetTrackings": trackings, **meta}


@router.get(
    "/asset-tracking/{tracking_id}",
    response_model=ast_schemas.AssetTrackingResponse,
    summary="특정 자산 배정 기록 조회",
)
async def read_asset_tracking(tracking_id: uuid.UUID, db: AsyncSession = Depends(get_session)):
    db_tracking = await ast_crud.asset_tracking.get_detail(db, tracking_id)
    return {"message": "Asset tracking retrieved successfully", "assetTracking": db_tracking}


@router.patch(
    "/asset-tracking/{tracking_id}",
    response_model=ast_schemas.AssetTrackingResponse,
    summary="자산 배정 기록 수정 (회수 처리 포함)",
)
async def update_asset_tracking(
    tracking_id: uuid.UUID,
    tracking_in: ast_schemas.AssetTrackingUpdate,
    db: AsyncSession = Depends(get_session),
):
    db_tracking = await ast_crud.asset_tracking.get_detail(db, tracking_id)
    db_tracking = await ast_crud.asset_tracking.update(db, db_obj=db_tracking, obj_in=tracking_in)
    return {"message": "Asset tracking updated successfully", "assetTracking": db_tracking}


@router.delete(
    "/asset-tracking/{tracking_id}",
    response_model=ast_schemas.AssetTrackingDeleteResponse,
    summary="자산 배정 기록 삭제",
)
async def delete_asset_tracking(tracking_id: uuid.UUID, db: AsyncSession = Depends(get_session)):
    await ast_crud.asset_tracking.soft_delete(db, id=tracking_id)
    return {"message": "Asset tracking deleted successfully", "assetTrackingId": tracking_id}
