# hrms/domains/usr/schemas.py

"""
'usr' 도메인 (사용자, 역할, 부서, 직함, 전화 관리)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.

- 부분 수정(XUpdate)은 `model_dump(exclude_unset=True)`로 처리됩니다.
  명시되지 않은 필드는 유지되고, 명시적 null 은 nullable 필드를 비웁니다.
- 목록 응답은 {message, <복수형>, count, total, page, limit, totalPages} 형태입니다.
"""

import uuid
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from sqlmodel import SQLModel

from hrms.domains.shared.schemas import AttachmentRead, ImageRead
from .models import WorkLocation


class LifecycleRead(SQLModel):
    """모든 조회 스키마가 공유하는 수명 주기/타임스탬프 필드"""
    is_active: bool
    deleted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class PageMeta(BaseModel):
    count: int
    total: int
    page: int
    limit: int
    totalPages: int


# =============================================================================
# 1. 역할 (Role) 스키마
# =============================================================================
class RoleCreate(SQLModel):
    name: str = Field(..., min_length=2, max_length=50)


class RoleUpdate(SQLModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)


class RoleSummary(SQLModel):
    id: uuid.UUID
    name: str


class RoleRead(LifecycleRead):
    id: uuid.UUID
    name: str


class RoleResponse(BaseModel):
    message: str
    role: RoleRead


class RoleListResponse(PageMeta):
    message: str
    roles: List[RoleRead]


class RoleDeleteResponse(BaseModel):
    message: str
    roleId: uuid.UUID


# =============================================================================
# 2. 직함 (Title) 스키마
# =============================================================================
class TitleCreate(SQLModel):
    name: str = Field(..., min_length=1, max_length=255)


class TitleUpdate(SQLModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)


class TitleRead(LifecycleRead):
    id: uuid.UUID
    name: str


class TitleResponse(BaseModel):
    message: str
    title: TitleRead


class TitleListResponse(PageMeta):
    message: str
    titles: List[TitleRead]


class TitleDeleteResponse(BaseModel):
    message: str
    titleId: uuid.UUID


# =============================================================================
# 3. 부서 (Department) 스키마
# =============================================================================
class DepartmentCreate(SQLModel):
    name: str = Field(..., min_length=1, max_length=255)


class DepartmentUpdate(SQLModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)


class DepartmentSummary(SQLModel):
    id: uuid.UUID
    name: str


class DepartmentRead(LifecycleRead):
    id: uuid.UUID
    name: str


class DepartmentResponse(BaseModel):
    message: str
    department: DepartmentRead


class DepartmentListResponse(PageMeta):
    message: str
    departments: List[DepartmentRead]


class DepartmentDeleteResponse(BaseModel):
    message: str
    departmentId: uuid.UUID


# =============================================================================
# 4. 전화 (Phone) 스키마
# =============================================================================
class PhoneBase(SQLModel):
    number: str = Field(..., min_length=1, max_length=50)
    company: Optional[str] = Field(None, max_length=255)
    current_plan: Optional[str] = Field(None, max_length=255)
    legal_owner: Optional[str] = Field(None, max_length=255)
    comment: Optional[str] = None
    user_id: Optional[uuid.UUID] = None


class PhoneCreate(PhoneBase):
    pass


class PhoneUpdate(SQLModel):
    number: Optional[str] = Field(None, min_length=1, max_length=50)
    company: Optional[str] = Field(None, max_length=255)
    current_plan: Optional[str] = Field(None, max_length=255)
    legal_owner: Optional[str] = Field(None, max_length=255)
    comment: Optional[str] = None
    user_id: Optional[uuid.UUID] = None


class PhoneRead(PhoneBase, LifecycleRead):
    id: uuid.UUID


class PhoneResponse(BaseModel):
    message: str
    phone: PhoneRead


class PhoneListResponse(PageMeta):
    message: str
    phones: List[PhoneRead]


class PhoneDeleteResponse(BaseModel):
    message: str
    phoneId: uuid.UUID


# =============================================================================
# 5. 사용자 (User) 스키마
# =============================================================================
class UserBase(SQLModel):
    """사용자 정보의 기본 필드를 정의하는 스키마"""
    user_number: str = Field(..., min_length=1, max_length=255)
    username: Optional[EmailStr] = Field(None, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., max_length=500)
    work_location: WorkLocation
    social_insurance: bool = False
    medical_insurance: bool = False
    join_date: date
    contract_date: Optional[date] = None
    exit_date: Optional[date] = None
    title: Optional[str] = Field(None, max_length=255)
    title_id: Optional[uuid.UUID] = None
    personal_phone: Optional[List[str]] = None


class UserCreate(UserBase):
    """사용자 생성을 위한 스키마. 역할은 이름으로 지정합니다 (기본값 'user')."""
    password: Optional[str] = Field(None, min_length=6, max_length=255)
    role: str = Field("user", min_length=2, max_length=50)
    department_ids: List[uuid.UUID] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list, max_length=10, description="사용자 이미지 URL 목록")

    @field_validator("images")
    @classmethod
    def images_not_blank(cls, value: List[str]) -> List[str]:
        urls = [url.strip() for url in value]
        if any(not url for url in urls):
            raise ValueError("image URL must not be empty")
        return urls


class UserUpdate(SQLModel):
    """사용자 정보 수정을 위한 스키마"""
    user_number: Optional[str] = Field(None, min_length=1, max_length=255)
    username: Optional[EmailStr] = Field(None, max_length=255)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    address: Optional[str] = Field(None, max_length=500)
    work_location: Optional[WorkLocation] = None
    social_insurance: Optional[bool] = None
    medical_insurance: Optional[bool] = None
    join_date: Optional[date] = None
    contract_date: Optional[date] = None
    exit_date: Optional[date] = None
    title: Optional[str] = Field(None, max_length=255)
    title_id: Optional[uuid.UUID] = None
    personal_phone: Optional[List[str]] = None
    password: Optional[str] = Field(None, min_length=6, max_length=255)
    role: Optional[str] = Field(None, min_length=2, max_length=50)
    department_ids: Optional[List[uuid.UUID]] = None

    @field_validator("contract_date", "exit_date", mode="before")
    @classmethod
    def blank_date_is_null(cls, value):
        return None if value == "" else value


class UserRead(UserBase, LifecycleRead):
    """
    사용자 정보 조회를 위한 스키마.
    비밀번호 해시값 등 민감한 정보는 제외됩니다.
    """
    id: uuid.UUID
    role_id: uuid.UUID
    role: Optional[RoleSummary] = None
    departments: List[DepartmentSummary] = Field(default_factory=list)
    attachments: List[AttachmentRead] = Field(default_factory=list)
    images: List[ImageRead] = Field(default_factory=list)


class UserResponse(BaseModel):
    message: str
    user: UserRead


class UserListResponse(PageMeta):
    message: str
    users: List[UserRead]


class UserDeleteResponse(BaseModel):
    message: str
    userId: uuid.UUID


# =============================================================================
# 6. 인증 (Auth) 스키마
# =============================================================================
class RegisterRequest(UserBase):
    """회원가입 요청. 역할은 항상 기본 'user' 역할이 부여됩니다."""
    username: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=6, max_length=255)
    department_ids: List[uuid.UUID] = Field(default_factory=list)


class LoginRequest(BaseModel):
    username: EmailStr
    password: str = Field(..., min_length=1)


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    message: str
    user: UserRead
    access_token: str
    refresh_token: str


class TokenRefreshResponse(BaseModel):
    message: str
    access_token: str
    refresh_token: str


class Token(BaseModel):
    """OAuth2 password 흐름(/auth/token) 응답 스키마"""
    model_config = ConfigDict(extra="ignore")

    access_token: str
    token_type: str = "bearer"
