# hrms/domains/shared/models.py

"""
'shared' 도메인의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

첨부파일은 소유 엔티티를 외래 키가 아닌 (entity_id, entity_type) 쌍으로 참조하는 다형 연관입니다.
entity_type 은 AttachmentKind 값만 허용되며, 종류별 소유 테이블은
hrms.services.cross_domain_service.OWNER_MODELS 조회 테이블로 결정됩니다.
이미지는 저장소에 파일을 두지 않고 외부 URL 만 (owner_id, owner_type) 쌍과 함께 기록합니다.
"""

import uuid
from enum import Enum

from sqlalchemy import Column, Index, String, Text
from sqlmodel import Field, SQLModel

from hrms.core.lifecycle import SoftDeleteMixin, TimestampMixin, lifecycle_check
from hrms.core.types import value_enum


class AttachmentKind(str, Enum):
    """첨부파일을 소유할 수 있는 엔티티 종류."""
    USERS = "users"
    ASSETS = "assets"

    @property
    def label(self) -> str:
        # 오류 메시지용 단수형 이름 (예: "User")
        return self.value[:-1].capitalize()


class AttachmentBase(SQLModel):
    entity_id: str = Field(sa_column=Column(String(255), nullable=False), description="소유 엔티티 ID")
    entity_type: AttachmentKind = Field(sa_type=value_enum(AttachmentKind), description="소유 엔티티 종류")
    name: str = Field(max_length=255, description="원본 파일명")
    type: str = Field(max_length=100, description="MIME 타입")
    extension: str = Field(max_length=10, description="확장자 (점 제외)")
    path_url: str = Field(sa_column=Column(Text, nullable=False), description="저장소 상대 경로")


class Attachment(AttachmentBase, TimestampMixin, SoftDeleteMixin, table=True):
    __tablename__ = "attachments"
    __table_args__ = (
        lifecycle_check("attachments"),
        Index("ix_attachments_entity", "entity_id", "entity_type"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)


# =============================================================================
# 이미지 (URL 참조)
# =============================================================================
class ImageOwnerKind(str, Enum):
    """이미지를 소유할 수 있는 엔티티 종류 (첨부파일과 달리 단수형 값을 저장)."""
    USER = "user"
    ASSET = "asset"


class ImageBase(SQLModel):
    owner_id: str = Field(sa_column=Column(String(255), nullable=False), description="소유 엔티티 ID")
    owner_type: ImageOwnerKind = Field(sa_type=value_enum(ImageOwnerKind), description="소유 엔티티 종류")
    image_url: str = Field(sa_column=Column(Text, nullable=False), description="이미지 URL")


class Image(ImageBase, TimestampMixin, SoftDeleteMixin, table=True):
    __tablename__ = "images"
    __table_args__ = (
        lifecycle_check("images"),
        Index("ix_images_owner", "owner_id", "owner_type"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
