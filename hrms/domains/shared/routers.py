# hrms/domains/shared/routers.py

"""
'shared' 도메인 (첨부파일)의 API 엔드포인트를 정의하는 모듈입니다.

첨부파일은 소유 엔티티 경로 아래에 업로드/조회하고(`/users/{id}/attachments`, `/assets/{id}/attachments`),
삭제는 ID 목록으로 한 번에 처리합니다 (`DELETE /attachments`).
소유 엔티티 관리와 같은 관리자 권한이 필요합니다.
"""

import uuid
from typing import List

from fastapi import APIRouter, Body, Depends, File, UploadFile, status
from sqlmodel.ext.asyncio.session import AsyncSession

from hrms.core import dependencies as deps
from hrms.core.database import get_session
from hrms.utils.storage import StorageBackend

from . import models as shared_models
from . import schemas as shared_schemas
from . import services as shared_services

router = APIRouter(
    tags=["Attachments (첨부파일 관리)"],
    dependencies=[Depends(deps.get_current_admin_user)],
    responses={404: {"description": "Not found"}},
)


@router.post(
    "/{kind}/{entity_id}/attachments",
    response_model=shared_schemas.AttachmentListResponse,
    status_code=status.HTTP_201_CREATED,
    summary="엔티티에 첨부파일 업로드",
)
async def upload_attachments(
    kind: shared_models.AttachmentKind,
    entity_id: uuid.UUID,
    files: List[UploadFile] = File(..., description="업로드할 파일 (여러 개 가능)"),
    db: AsyncSession = Depends(get_session),
    storage: StorageBackend = Depends(deps.get_storage),
):
    attachments = await shared_services.upload(db, storage=storage, files=files, entity_id=entity_id, kind=kind)
    return {
        "message": "Attachments uploaded successfully",
        "attachments": attachments,
        "count": len(attachments),
    }


@router.get(
    "/{kind}/{entity_id}/attachments",
    response_model=shared_schemas.AttachmentListResponse,
    summary="엔티티의 첨부파일 목록 조회",
)
async def read_attachments(
    kind: shared_models.AttachmentKind,
    entity_id: uuid.UUID,
    db: AsyncSession = Depends(get_session),
):
    attachments = await shared_services.fetch(db, entity_id=entity_id, kind=kind)
    return {
        "message": "Attachments retrieved successfully",
        "attachments": attachments,
        "count": len(attachments),
    }


@router.delete(
    "/attachments",
    response_model=shared_schemas.AttachmentDeleteResponse,
    summary="첨부파일 일괄 삭제",
)
async def delete_attachments(
    delete_in: shared_schemas.AttachmentDeleteRequest = Body(...),
    db: AsyncSession = Depends(get_session),
    storage: StorageBackend = Depends(deps.get_storage),
):
    """활성 첨부파일만 삭제되며, 이미 삭제된 ID 는 건수에 포함되지 않습니다."""
    count = await shared_services.delete(db, storage=storage, ids=delete_in.ids)
    return {"message": "Attachments deleted successfully", "count": count}
