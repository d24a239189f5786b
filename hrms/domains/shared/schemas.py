# hrms/domains/shared/schemas.py

"""
'shared' 도메인 (첨부파일)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

import uuid
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field
from sqlmodel import SQLModel

from .models import AttachmentKind, ImageOwnerKind


class AttachmentCreate(SQLModel):
    """서비스 계층이 저장소에 파일을 쓴 뒤 일괄 삽입에 사용하는 내부 스키마"""
    entity_id: str
    entity_type: AttachmentKind
    name: str
    type: str
    extension: str
    path_url: str


class AttachmentRead(SQLModel):
    id: uuid.UUID
    entity_id: str
    entity_type: AttachmentKind
    name: str
    type: str
    extension: str
    path_url: str
    created_at: datetime
    updated_at: datetime


class ImageRead(SQLModel):
    id: uuid.UUID
    image_url: str
    owner_type: ImageOwnerKind
    created_at: datetime


class AttachmentDeleteRequest(BaseModel):
    ids: List[uuid.UUID] = Field(..., min_length=1, description="삭제할 첨부파일 ID 목록")


# =============================================================================
# 응답 스키마
# =============================================================================
class AttachmentListResponse(BaseModel):
    message: str
    attachments: List[AttachmentRead]
    count: int


class AttachmentDeleteResponse(BaseModel):
    message: str
    count: int
