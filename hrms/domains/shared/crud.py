# hrms/domains/shared/crud.py

"""
'shared' 도메인 (첨부파일)의 CRUD 작업을 담당하는 모듈입니다.

첨부파일과 이미지는 여러 건을 한 번에 다루므로 단건 CRUD 대신 일괄 조회/삽입/소프트 삭제를 제공합니다.
`*_in` 메서드는 호출 측 트랜잭션 안에서 실행되며 커밋하지 않습니다.
"""

from typing import Any, List, Sequence, Tuple

from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from hrms.core.crud_base import CRUDBase
from hrms.core.lifecycle import Lifecycle
from . import models as shared_models
from . import schemas as shared_schemas


class CRUDAttachment(CRUDBase[shared_models.Attachment, shared_schemas.AttachmentCreate, shared_schemas.AttachmentCreate]):
    def __init__(self):
        super().__init__(model=shared_models.Attachment, label="attachment")

    async def fetch(
        self, db: AsyncSession, *, entity_id: Any, kind: shared_models.AttachmentKind
    ) -> List[shared_models.Attachment]:
        """한 엔티티의 활성 첨부파일을 최신순으로 조회합니다."""
        return await self.fetch_batch(db, entity_ids=[entity_id], kind=kind)

    async def fetch_batch(
        self, db: AsyncSession, *, entity_ids: Sequence[Any], kind: shared_models.AttachmentKind
    ) -> List[shared_models.Attachment]:
        """
        여러 엔티티의 활성 첨부파일을 한 번의 쿼리로 조회합니다 (목록 조회 시 N+1 방지).
        ID 목록이 비어 있으면 쿼리 없이 빈 목록을 반환합니다.
        """
        if not entity_ids:
            return []
        statement = (
            select(self.model)
            .where(
                self.model.entity_id.in_([str(entity_id) for entity_id in entity_ids]),
                self.model.entity_type == kind,
                self.model.is_active.is_(True),
            )
            .order_by(self.model.created_at.desc())
        )
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def bulk_create_in(
        self, tx: AsyncSession, *, objs_in: Sequence[shared_schemas.AttachmentCreate]
    ) -> List[shared_models.Attachment]:
        db_objs = [self.model.model_validate(obj_in) for obj_in in objs_in]
        tx.add_all(db_objs)
        await tx.flush()
        return db_objs

    async def active_paths_in(self, tx: AsyncSession, *, ids: Sequence[Any]) -> List[Tuple[Any, str]]:
        """삭제 대상 중 활성 상태인 첨부파일의 (id, path_url) 목록."""
        statement = select(self.model.id, self.model.path_url).where(
            self.model.id.in_(list(ids)), self.model.is_active.is_(True)
        )
        result = await tx.execute(statement)
        return [(row[0], row[1]) for row in result.all()]

    async def soft_delete_many_in(self, tx: AsyncSession, *, ids: Sequence[Any]) -> int:
        statement = (
            update(self.model)
            .where(self.model.id.in_(list(ids)), self.model.is_active.is_(True))
            .values(**Lifecycle.deleted().as_values())
        )
        result = await tx.execute(statement)
        return result.rowcount

    async def soft_delete_for_entity_in(
        self, tx: AsyncSession, *, entity_id: Any, kind: shared_models.AttachmentKind
    ) -> int:
        statement = (
            update(self.model)
            .where(
                self.model.entity_id == str(entity_id),
                self.model.entity_type == kind,
                self.model.is_active.is_(True),
            )
            .values(**Lifecycle.deleted().as_values())
        )
        result = await tx.execute(statement)
        return result.rowcount


attachment = CRUDAttachment()


# =============================================================================
# 이미지
# =============================================================================
class CRUDImage(CRUDBase[shared_models.Image, shared_schemas.ImageRead, shared_schemas.ImageRead]):
    def __init__(self):
        super().__init__(model=shared_models.Image, label="image")

    async def fetch_batch(
        self, db: AsyncSession, *, owner_ids: Sequence[Any], kind: shared_models.ImageOwnerKind
    ) -> List[shared_models.Image]:
        """여러 소유 엔티티의 활성 이미지를 최신순으로 한 번에 조회합니다."""
        if not owner_ids:
            return []
        statement = (
            select(self.model)
            .where(
                self.model.owner_id.in_([str(owner_id) for owner_id in owner_ids]),
                self.model.owner_type == kind,
                self.model.is_active.is_(True),
            )
            .order_by(self.model.created_at.desc())
        )
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def bulk_create_in(
        self, tx: AsyncSession, *, owner_id: Any, kind: shared_models.ImageOwnerKind, image_urls: Sequence[str]
    ) -> List[shared_models.Image]:
        db_objs = [
            self.model(owner_id=str(owner_id), owner_type=kind, image_url=image_url) for image_url in image_urls
        ]
        tx.add_all(db_objs)
        await tx.flush()
        return db_objs

    async def soft_delete_for_owner_in(
        self, tx: AsyncSession, *, owner_id: Any, kind: shared_models.ImageOwnerKind
    ) -> int:
        statement = (
            update(self.model)
            .where(
                self.model.owner_id == str(owner_id),
                self.model.owner_type == kind,
                self.model.is_active.is_(True),
            )
            .values(**Lifecycle.deleted().as_values())
        )
        result = await tx.execute(statement)
        return result.rowcount


image = CRUDImage()
