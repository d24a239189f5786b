# hrms/domains/shared/services.py

"""
파일 저장소와 DB 를 함께 다루는 첨부파일 서비스 모듈입니다.

- 업로드: 소유 엔티티 검증 -> 모든 파일을 저장소에 동시 기록 -> 메타데이터 일괄 삽입.
- 삭제: 활성 경로 조회(1회) -> 소프트 삭제 UPDATE(1회) -> 저장소 파일 동시 삭제(실패는 로그만).
  DB 가 존재 여부의 기준이며, 저장소와는 일시적으로 어긋날 수 있습니다.
"""

import asyncio
import logging
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List, Sequence

from fastapi import UploadFile
from sqlmodel.ext.asyncio.session import AsyncSession

from hrms.core.config import settings
from hrms.core.exceptions import BadRequestError
from hrms.core.transaction import with_transaction
from hrms.services.cross_domain_service import ensure_entity_exists
from hrms.utils.storage import StorageBackend
from . import crud as shared_crud
from . import models as shared_models
from . import schemas as shared_schemas

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"

# attachments 테이블 컬럼 길이
MAX_NAME_LENGTH = 255
MAX_TYPE_LENGTH = 100
MAX_EXTENSION_LENGTH = 10


def _extension(filename: str) -> str:
    return Path(filename).suffix.lstrip(".").lower()[:MAX_EXTENSION_LENGTH]


def _display_name(filename: str) -> str:
    """원본 파일명을 컬럼 길이에 맞게 자릅니다. 확장자는 유지합니다."""
    if len(filename) <= MAX_NAME_LENGTH:
        return filename
    suffix = Path(filename).suffix
    if len(suffix) >= MAX_NAME_LENGTH:
        return filename[:MAX_NAME_LENGTH]
    return filename[: MAX_NAME_LENGTH - len(suffix)] + suffix


def _content_type(upload_file: UploadFile) -> str:
    content_type = upload_file.content_type or DEFAULT_MIME_TYPE
    if len(content_type) > MAX_TYPE_LENGTH:
        raise BadRequestError(f"Invalid content type for file {upload_file.filename}")
    return content_type


async def _save_one(storage: StorageBackend, upload_file: UploadFile) -> str:
    content = await upload_file.read()
    return await storage.save(upload_file.filename or "file", content)


async def _delete_best_effort(storage: StorageBackend, paths: Sequence[str]) -> None:
    results = await asyncio.gather(*(storage.delete(path) for path in paths), return_exceptions=True)
    for path, outcome in zip(paths, results):
        if isinstance(outcome, Exception):
            logger.warning("attachment storage delete failed", extra={"path": path, "error": str(outcome)})


async def upload(
    db: AsyncSession,
    *,
    storage: StorageBackend,
    files: Sequence[UploadFile],
    entity_id: Any,
    kind: shared_models.AttachmentKind,
) -> List[shared_models.Attachment]:
    """
    여러 파일을 한 엔티티에 첨부합니다.
    일부 파일 저장이나 DB 삽입이 실패하면 이미 저장한 파일을 best-effort 로 지운 뒤
    (첫 번째) 원래 예외를 다시 발생시킵니다.
    """
    await ensure_entity_exists(db, kind, entity_id)
    if not files:
        raise BadRequestError("No files provided")
    if len(files) > settings.MAX_UPLOAD_FILES:
        raise BadRequestError(f"Too many files (max {settings.MAX_UPLOAD_FILES})")

    # 저장소에 쓰기 전에 메타데이터를 검증하여 잘못된 요청이 파일을 남기지 않게 합니다.
    content_types = [_content_type(upload_file) for upload_file in files]

    results = await asyncio.gather(
        *(_save_one(storage, upload_file) for upload_file in files), return_exceptions=True
    )
    paths = [result for result in results if not isinstance(result, BaseException)]
    failures = [result for result in results if isinstance(result, BaseException)]
    if failures:
        await _delete_best_effort(storage, paths)
        raise failures[0]

    objs_in = [
        shared_schemas.AttachmentCreate(
            entity_id=str(entity_id),
            entity_type=kind,
            name=_display_name(upload_file.filename or path),
            type=content_type,
            extension=_extension(upload_file.filename or ""),
            path_url=path,
        )
        for upload_file, content_type, path in zip(files, content_types, paths)
    ]

    async def _run(tx: AsyncSession) -> List[shared_models.Attachment]:
        return await shared_crud.attachment.bulk_create_in(tx, objs_in=objs_in)

    try:
        attachments = await with_transaction(db, _run)
    except Exception:
        await _delete_best_effort(storage, paths)
        raise
    logger.info("attachments uploaded", extra={"entity": kind.value, "entity_id": str(entity_id), "count": len(attachments)})
    return attachments


async def delete(db: AsyncSession, *, storage: StorageBackend, ids: Sequence[Any]) -> int:
    """첨부파일을 소프트 삭제하고 저장소 파일을 best-effort 로 지운 뒤, 삭제된 건수를 반환합니다."""
    if not ids:
        raise BadRequestError("No attachment IDs provided")

    async def _run(tx: AsyncSession) -> List[str]:
        rows = await shared_crud.attachment.active_paths_in(tx, ids=ids)
        if not rows:
            return []
        await shared_crud.attachment.soft_delete_many_in(tx, ids=[row_id for row_id, _ in rows])
        return [path for _, path in rows]

    paths = await with_transaction(db, _run)
    if paths:
        await _delete_best_effort(storage, paths)
    return len(paths)


async def fetch(
    db: AsyncSession, *, entity_id: Any, kind: shared_models.AttachmentKind
) -> List[shared_models.Attachment]:
    return await shared_crud.attachment.fetch(db, entity_id=entity_id, kind=kind)


async def fetch_batch(
    db: AsyncSession, *, entity_ids: Sequence[Any], kind: shared_models.AttachmentKind
) -> Dict[str, List[shared_schemas.AttachmentRead]]:
    """엔티티 ID(str) -> 최신순 첨부파일 목록. 첨부파일이 없는 엔티티는 키가 없습니다."""
    grouped: Dict[str, List[shared_schemas.AttachmentRead]] = defaultdict(list)
    for attachment in await shared_crud.attachment.fetch_batch(db, entity_ids=entity_ids, kind=kind):
        grouped[attachment.entity_id].append(shared_schemas.AttachmentRead.model_validate(attachment))
    return grouped


async def fetch_image_batch(
    db: AsyncSession, *, owner_ids: Sequence[Any], kind: shared_models.ImageOwnerKind
) -> Dict[str, List[shared_schemas.ImageRead]]:
    """소유 엔티티 ID(str) -> 최신순 이미지 목록."""
    grouped: Dict[str, List[shared_schemas.ImageRead]] = defaultdict(list)
    for image in await shared_crud.image.fetch_batch(db, owner_ids=owner_ids, kind=kind):
        grouped[image.owner_id].append(shared_schemas.ImageRead.model_validate(image))
    return grouped
