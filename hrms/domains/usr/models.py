# hrms/domains/usr/models.py

"""
'usr' 도메인의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

이 모듈은 역할(roles), 직함(titles), 부서(departments), 사용자-부서 연결(user_departments),
전화(phones), 사용자(users) 테이블에 대한 SQLModel 클래스를 포함합니다.
모든 테이블은 UUID 기본 키, 생성/수정 일시, 소프트 삭제 수명 주기 컬럼을 공유합니다.
"""

import uuid
from datetime import date
from enum import Enum
from typing import List, Optional

from sqlalchemy import Column, ForeignKey, Index, JSON, text
from sqlmodel import Field, Relationship, SQLModel

from hrms.core.lifecycle import SoftDeleteMixin, TimestampMixin, lifecycle_check
from hrms.core.types import value_enum


def _active_unique_name(table_name: str) -> Index:
    """활성 행 사이에서만 name 이 유일하도록 하는 부분 유니크 인덱스."""
    return Index(
        f"uq_{table_name}_name_active",
        "name",
        unique=True,
        postgresql_where=text("is_active"),
        sqlite_where=text("is_active"),
    )


class WorkLocation(str, Enum):
    IN_OFFICE = "in-office"
    HYBRID = "hybrid"
    REMOTE = "remote"


# =============================================================================
# 1. roles 테이블 모델
# =============================================================================
class RoleBase(SQLModel):
    name: str = Field(min_length=2, max_length=50, description="역할 이름 (예: admin, user)")


class Role(RoleBase, TimestampMixin, SoftDeleteMixin, table=True):
    __tablename__ = "roles"
    __table_args__ = (lifecycle_check("roles"), _active_unique_name("roles"))

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    users: List["User"] = Relationship(back_populates="role")


# =============================================================================
# 2. titles 테이블 모델
# =============================================================================
class TitleBase(SQLModel):
    name: str = Field(min_length=1, max_length=255, description="직함 이름")


class Title(TitleBase, TimestampMixin, SoftDeleteMixin, table=True):
    __tablename__ = "titles"
    __table_args__ = (lifecycle_check("titles"), _active_unique_name("titles"))

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)


# =============================================================================
# 3. departments / user_departments 테이블 모델
# =============================================================================
class DepartmentBase(SQLModel):
    name: str = Field(min_length=1, max_length=255, description="부서명")


class Department(DepartmentBase, TimestampMixin, SoftDeleteMixin, table=True):
    __tablename__ = "departments"
    __table_args__ = (lifecycle_check("departments"), _active_unique_name("departments"))

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)


class UserDepartment(TimestampMixin, SoftDeleteMixin, table=True):
    """
    사용자-부서 연결 엔티티. 연결 자체도 수명 주기를 가지며,
    연결 해제는 행 삭제가 아닌 소프트 삭제입니다.
    """
    __tablename__ = "user_departments"
    __table_args__ = (
        lifecycle_check("user_departments"),
        Index("ix_user_departments_user_department", "user_id", "department_id"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(
        sa_column=Column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        description="사용자 ID (FK)"
    )
    department_id: uuid.UUID = Field(
        sa_column=Column(ForeignKey("departments.id", ondelete="CASCADE"), nullable=False, index=True),
        description="부서 ID (FK)"
    )


# =============================================================================
# 4. phones 테이블 모델
# =============================================================================
class PhoneBase(SQLModel):
    number: str = Field(min_length=1, max_length=50, description="전화번호")
    company: Optional[str] = Field(default=None, max_length=255, description="통신사")
    current_plan: Optional[str] = Field(default=None, max_length=255, description="요금제")
    legal_owner: Optional[str] = Field(default=None, max_length=255, description="명의자")
    comment: Optional[str] = Field(default=None, description="비고")
    user_id: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id", index=True, description="사용자 ID (FK)")


class Phone(PhoneBase, TimestampMixin, SoftDeleteMixin, table=True):
    __tablename__ = "phones"
    __table_args__ = (lifecycle_check("phones"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)


# =============================================================================
# 5. users 테이블 모델
# =============================================================================
class UserBase(SQLModel):
    """
    users 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    title 은 자유 입력 텍스트이며 title_id(직함 FK)와 별도로 유지됩니다.
    """
    user_number: str = Field(max_length=255, sa_column_kwargs={"unique": True}, description="사번")
    username: Optional[str] = Field(default=None, max_length=255, sa_column_kwargs={"unique": True}, description="로그인 이메일")
    name: str = Field(max_length=255, description="이름")
    address: str = Field(max_length=500, description="주소")
    work_location: WorkLocation = Field(sa_type=value_enum(WorkLocation), description="근무 형태")
    social_insurance: bool = Field(default=False, description="사회보험 가입 여부")
    medical_insurance: bool = Field(default=False, description="의료보험 가입 여부")
    join_date: date = Field(description="입사일")
    contract_date: Optional[date] = Field(default=None, description="계약일")
    exit_date: Optional[date] = Field(default=None, description="퇴사일")
    title: Optional[str] = Field(default=None, max_length=255, description="직함 (자유 입력)")
    personal_phone: Optional[List[str]] = Field(default=None, sa_column=Column(JSON), description="개인 연락처 목록")


class User(UserBase, TimestampMixin, SoftDeleteMixin, table=True):
    __tablename__ = "users"
    __table_args__ = (lifecycle_check("users"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    password_hash: Optional[str] = Field(default=None, max_length=255, description="해싱된 비밀번호")
    role_id: uuid.UUID = Field(
        sa_column=Column(ForeignKey("roles.id", ondelete="RESTRICT"), nullable=False, index=True),
        description="역할 ID (FK)"
    )
    title_id: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column(ForeignKey("titles.id", ondelete="SET NULL"), nullable=True),
        description="직함 ID (FK)"
    )

    # 관계 정의:
    role: Optional[Role] = Relationship(back_populates="users")
    phones: List[Phone] = Relationship(
        sa_relationship_kwargs={
            "primaryjoin": "and_(User.id == Phone.user_id, Phone.is_active == True)",
            "viewonly": True,
        },
    )
    # 활성 연결만 따라가는 읽기 전용 관계. 변경은 crud.user.replace_departments 로만 합니다.
    departments: List[Department] = Relationship(
        link_model=UserDepartment,
        sa_relationship_kwargs={
            "primaryjoin": "and_(User.id == UserDepartment.user_id, UserDepartment.is_active == True)",
            "secondaryjoin": "Department.id == UserDepartment.department_id",
            "viewonly": True,
        },
    )
