# hrms/services/cross_domain_service.py

"""
여러 도메인에 걸친 비즈니스 로직을 처리하는 서비스 모듈입니다.

- 첨부파일 종류(AttachmentKind)별 소유 모델 조회 테이블과 소유 엔티티 존재 검증.
- 소유 엔티티와 그 첨부파일/이미지를 하나의 트랜잭션으로 소프트 삭제.
"""

import logging
from typing import Any, Dict, Type

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from hrms.core.crud_base import CRUDBase
from hrms.core.exceptions import BadRequestError, NotFoundError
from hrms.core.transaction import with_transaction
from hrms.domains.ast import models as ast_models
from hrms.domains.shared import crud as shared_crud
from hrms.domains.shared.models import AttachmentKind, ImageOwnerKind
from hrms.domains.usr import models as usr_models

logger = logging.getLogger(__name__)

# 첨부파일 종류 -> 소유 테이블. 문자열 비교 대신 이 표로만 소유 테이블을 찾습니다.
OWNER_MODELS: Dict[AttachmentKind, Type[SQLModel]] = {
    AttachmentKind.USERS: usr_models.User,
    AttachmentKind.ASSETS: ast_models.Asset,
}

# 첨부파일 종류 -> 같은 소유자의 이미지 종류
IMAGE_OWNER_KINDS: Dict[AttachmentKind, ImageOwnerKind] = {
    AttachmentKind.USERS: ImageOwnerKind.USER,
    AttachmentKind.ASSETS: ImageOwnerKind.ASSET,
}


async def ensure_entity_exists(db: AsyncSession, kind: AttachmentKind, entity_id: Any) -> None:
    """
    entity_id 가 해당 종류의 활성 행을 가리키는지 확인합니다.
    다른 종류의 테이블에 같은 ID가 있더라도 통과하지 않습니다.
    """
    if entity_id is None or entity_id == "":
        raise BadRequestError(f"Invalid {kind.label.lower()} ID")
    model = OWNER_MODELS[kind]
    statement = select(model.id).where(model.id == entity_id, model.is_active.is_(True))
    result = await db.execute(statement)
    if result.first() is None:
        raise NotFoundError(f"{kind.label} with ID {entity_id} not found")


async def soft_delete_with_attachments(
    db: AsyncSession, *, crud: CRUDBase, kind: AttachmentKind, entity_id: Any
) -> Any:
    """
    소유 엔티티와 그 활성 첨부파일, 이미지를 한 트랜잭션에서 소프트 삭제합니다.
    엔티티가 이미 삭제되었거나 없으면 NotFoundError 이며, 첨부파일도 변경되지 않습니다.
    저장소의 파일은 지우지 않습니다 (소프트 삭제된 행이 계속 참조).
    """
    if entity_id is None or entity_id == "":
        raise BadRequestError(f"Invalid {crud.label} ID")

    async def _run(tx: AsyncSession) -> int:
        affected = await crud.soft_delete_in(tx, id=entity_id)
        if affected == 0:
            raise NotFoundError(f"{crud.label.capitalize()} with ID {entity_id} not found")
        await shared_crud.image.soft_delete_for_owner_in(tx, owner_id=entity_id, kind=IMAGE_OWNER_KINDS[kind])
        return await shared_crud.attachment.soft_delete_for_entity_in(tx, entity_id=entity_id, kind=kind)

    attachments_deleted = await with_transaction(db, _run)
    logger.info(
        "%s soft-deleted with attachments",
        crud.label,
        extra={"entity": kind.value, "entity_id": str(entity_id), "attachments": attachments_deleted},
    )
    return entity_id
