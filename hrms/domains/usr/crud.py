# hrms/domains/usr/crud.py

"""
'usr' 도메인의 CRUD 작업을 담당하는 모듈입니다.

- 역할/직함/부서: 이름은 활성 행 사이에서만 유일합니다 (삭제된 행의 이름은 재사용 가능).
- 사용자: 사번/로그인 이메일은 삭제 여부와 무관하게 전역 유일하며,
  부서 연결 교체는 빠진 연결의 소프트 삭제와 새 연결의 삽입으로 이루어집니다.
"""

from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select as sa_select, update
from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from hrms.core.crud_base import CRUDBase
from hrms.core.exceptions import ConflictError, NotFoundError
from hrms.core.lifecycle import Lifecycle
from hrms.core.security import ADMIN_ROLE, DEFAULT_ROLE, get_password_hash, verify_password
from hrms.core.transaction import with_transaction
from hrms.domains.shared import crud as shared_crud
from hrms.domains.shared.models import ImageOwnerKind
from hrms.utils.filters import FilterField, FilterKind
from . import models as usr_models
from . import schemas as usr_schemas


def _lifecycle_filters(model) -> List[FilterField]:
    return [
        FilterField("is_active", FilterKind.BOOLEAN, model.is_active),
        FilterField("created", FilterKind.DATE_RANGE, model.created_at),
        FilterField("updated", FilterKind.DATE_RANGE, model.updated_at),
    ]


# =============================================================================
# 1. 이름이 활성 행 사이에서 유일한 엔티티 (roles, titles, departments)
# =============================================================================
class CRUDNamed(CRUDBase):
    """name 컬럼 하나를 갖는 참조 테이블용 CRUD. 중복 이름은 409 입니다."""

    def __init__(self, model, *, label: str):
        super().__init__(
            model=model,
            label=label,
            filter_fields=[FilterField("name", FilterKind.TEXT, model.name), *_lifecycle_filters(model)],
            search_fields=[model.name],
        )

    async def get_by_name(self, db: AsyncSession, *, name: str):
        return await self.get_by_attribute(db, attribute="name", value=name)

    async def _ensure_name_available(self, db: AsyncSession, name: str, exclude_id: Any = None) -> None:
        if await self.get_by_attribute(db, attribute="name", value=name, exclude_id=exclude_id):
            raise ConflictError(f"{self.label.capitalize()} with this name already exists")

    async def create(self, db: AsyncSession, *, obj_in, extra: Optional[Dict[str, Any]] = None):
        await self._ensure_name_available(db, obj_in.name)
        return await super().create(db, obj_in=obj_in, extra=extra)

    async def update(self, db: AsyncSession, *, db_obj, obj_in):
        if getattr(obj_in, "name", None) is not None:
            await self._ensure_name_available(db, obj_in.name, exclude_id=db_obj.id)
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)


class CRUDRole(CRUDNamed):
    def __init__(self):
        super().__init__(usr_models.Role, label="role")

    async def resolve(self, db: AsyncSession, *, name: str) -> usr_models.Role:
        """이름으로 활성 역할을 찾습니다. 없으면 404."""
        db_role = await self.get_by_name(db, name=name)
        if db_role is None:
            raise NotFoundError(f"Role '{name}' not found")
        return db_role

    async def ensure_default_roles(
        self, db: AsyncSession, *, names: Sequence[str] = (ADMIN_ROLE, DEFAULT_ROLE)
    ) -> List[usr_models.Role]:
        """기본 역할이 없으면 생성하고, 이름 순서대로 역할 목록을 반환합니다."""
        roles = []
        for name in names:
            db_role = await self.get_by_name(db, name=name)
            if db_role is None:
                db_role = await super().create(db, obj_in=usr_schemas.RoleCreate(name=name))
            roles.append(db_role)
        return roles


role = CRUDRole()
title = CRUDNamed(usr_models.Title, label="title")
department = CRUDNamed(usr_models.Department, label="department")


# =============================================================================
# 2. phones 테이블 CRUD
# =============================================================================
phone = CRUDBase(
    usr_models.Phone,
    label="phone",
    filter_fields=[
        FilterField("number", FilterKind.TEXT, usr_models.Phone.number),
        FilterField("company", FilterKind.TEXT, usr_models.Phone.company),
        FilterField("user_id", FilterKind.EXACT, usr_models.Phone.user_id),
        *_lifecycle_filters(usr_models.Phone),
    ],
    search_fields=[usr_models.Phone.number, usr_models.Phone.company, usr_models.Phone.legal_owner],
)


# =============================================================================
# 3. users 테이블 CRUD
# =============================================================================
USER_FILTER_FIELDS = [
    FilterField("user_number", FilterKind.TEXT, usr_models.User.user_number),
    FilterField("name", FilterKind.TEXT, usr_models.User.name),
    FilterField("title", FilterKind.TEXT, usr_models.User.title),
    FilterField("work_location", FilterKind.ENUM, usr_models.User.work_location),
    FilterField("social_insurance", FilterKind.BOOLEAN, usr_models.User.social_insurance),
    FilterField("medical_insurance", FilterKind.BOOLEAN, usr_models.User.medical_insurance),
    FilterField("joinDate", FilterKind.DATE_RANGE, usr_models.User.join_date),
    *_lifecycle_filters(usr_models.User),
]

USER_SEARCH_FIELDS = [
    usr_models.User.user_number,
    usr_models.User.name,
    usr_models.User.address,
    usr_models.User.title,
]

# 사용자 응답에 항상 포함되는 관계 (역할, 활성 부서)
USER_LOAD_OPTIONS = (
    selectinload(usr_models.User.role),
    selectinload(usr_models.User.departments),
)


class CRUDUser(CRUDBase[usr_models.User, usr_schemas.UserCreate, usr_schemas.UserUpdate]):
    def __init__(self):
        super().__init__(
            model=usr_models.User,
            label="user",
            filter_fields=USER_FILTER_FIELDS,
            search_fields=USER_SEARCH_FIELDS,
        )

    async def get_detail(self, db: AsyncSession, id: Any) -> usr_models.User:
        """역할/부서를 함께 로드한 활성 사용자. 없으면 404."""
        return await self.get_or_404(db, id, options=USER_LOAD_OPTIONS)

    def role_condition(self, role_name: str):
        """역할 이름 필터. 존재하지 않는 역할이면 결과가 비게 됩니다."""
        role_ids = sa_select(usr_models.Role.id).where(
            usr_models.Role.name == role_name, usr_models.Role.is_active.is_(True)
        )
        return self.model.role_id.in_(role_ids)

    def department_condition(self, department_id: Any):
        user_ids = sa_select(usr_models.UserDepartment.user_id).where(
            usr_models.UserDepartment.department_id == department_id,
            usr_models.UserDepartment.is_active.is_(True),
        )
        return self.model.id.in_(user_ids)

    async def _ensure_unique(
        self, db: AsyncSession, *, user_number: Optional[str], username: Optional[str], exclude_id: Any = None
    ) -> None:
        # 사번/이메일은 삭제된 사용자까지 포함해 전역 유일합니다.
        if user_number is not None and await self.get_by_attribute(
            db, attribute="user_number", value=user_number, unscoped=True, exclude_id=exclude_id
        ):
            raise ConflictError("User with this user number already exists")
        if username is not None and await self.get_by_attribute(
            db, attribute="username", value=username, unscoped=True, exclude_id=exclude_id
        ):
            raise ConflictError("User with this username already exists")

    async def _ensure_departments_exist(self, db: AsyncSession, department_ids: Sequence[Any]) -> None:
        if not department_ids:
            return
        statement = select(usr_models.Department.id).where(
            usr_models.Department.id.in_(list(department_ids)),
            usr_models.Department.is_active.is_(True),
        )
        found = set((await db.execute(statement)).scalars().all())
        missing = [str(department_id) for department_id in department_ids if department_id not in found]
        if missing:
            raise NotFoundError(f"Department(s) not found: {', '.join(missing)}")

    async def replace_departments_in(self, tx: AsyncSession, *, user_id: Any, department_ids: Sequence[Any]) -> None:
        """
        사용자의 활성 부서 연결을 department_ids 로 교체합니다 (트랜잭션 안에서 실행).
        빠진 연결은 소프트 삭제하고, 새 연결만 삽입합니다.
        """
        wanted = list(dict.fromkeys(department_ids))
        statement = select(usr_models.UserDepartment.department_id).where(
            usr_models.UserDepartment.user_id == user_id,
            usr_models.UserDepartment.is_active.is_(True),
        )
        current = set((await tx.execute(statement)).scalars().all())

        dropped = current.difference(wanted)
        if dropped:
            await tx.execute(
                update(usr_models.UserDepartment)
                .where(
                    usr_models.UserDepartment.user_id == user_id,
                    usr_models.UserDepartment.department_id.in_(list(dropped)),
                    usr_models.UserDepartment.is_active.is_(True),
                )
                .values(**Lifecycle.deleted().as_values())
            )
        tx.add_all(
            usr_models.UserDepartment(user_id=user_id, department_id=department_id)
            for department_id in wanted
            if department_id not in current
        )
        await tx.flush()

    async def create(
        self,
        db: AsyncSession,
        *,
        obj_in: usr_schemas.UserBase,
        role: usr_models.Role,
        password: Optional[str] = None,
        department_ids: Sequence[Any] = (),
        image_urls: Sequence[str] = (),
    ) -> usr_models.User:
        """
        새로운 사용자를 생성하며 비밀번호를 해싱하고 중복/부서 존재를 검사합니다.
        사용자 행, 부서 연결, 이미지 URL 은 한 트랜잭션으로 저장됩니다.
        """
        await self._ensure_unique(db, user_number=obj_in.user_number, username=obj_in.username)
        await self._ensure_departments_exist(db, department_ids)

        user_data = obj_in.model_dump(include=set(usr_schemas.UserBase.model_fields))
        password_hash = get_password_hash(password) if password else None

        async def _run(tx: AsyncSession) -> usr_models.User:
            db_user = usr_models.User(**user_data, role_id=role.id, password_hash=password_hash)
            tx.add(db_user)
            await tx.flush()
            if department_ids:
                await self.replace_departments_in(tx, user_id=db_user.id, department_ids=department_ids)
            if image_urls:
                await shared_crud.image.bulk_create_in(
                    tx, owner_id=db_user.id, kind=ImageOwnerKind.USER, image_urls=image_urls
                )
            return db_user

        db_user = await with_transaction(db, _run)
        return await self.get_detail(db, db_user.id)

    async def update(
        self, db: AsyncSession, *, db_obj: usr_models.User, obj_in: usr_schemas.UserUpdate
    ) -> usr_models.User:
        """
        사용자 정보를 부분 수정합니다.
        role(이름), password, department_ids 는 각각 role_id, password_hash, 부서 연결 교체로 변환됩니다.
        """
        update_data = obj_in.model_dump(exclude_unset=True)
        if not update_data:
            return await super().update(db, db_obj=db_obj, obj_in=update_data)

        await self._ensure_unique(
            db,
            user_number=update_data.get("user_number"),
            username=update_data.get("username"),
            exclude_id=db_obj.id,
        )

        role_name = update_data.pop("role", None)
        if role_name is not None:
            update_data["role_id"] = (await role.resolve(db, name=role_name)).id

        password = update_data.pop("password", None)
        if password:
            update_data["password_hash"] = get_password_hash(password)

        department_ids = update_data.pop("department_ids", None)
        if department_ids is not None:
            await self._ensure_departments_exist(db, department_ids)

        user_id = db_obj.id

        async def _run(tx: AsyncSession) -> None:
            for key, value in update_data.items():
                setattr(db_obj, key, value)
            tx.add(db_obj)
            if department_ids is not None:
                await self.replace_departments_in(tx, user_id=user_id, department_ids=department_ids)
            await tx.flush()

        await with_transaction(db, _run)
        return await self.get_detail(db, user_id)

    async def get_by_username(self, db: AsyncSession, *, username: str) -> Optional[usr_models.User]:
        """삭제된 사용자까지 포함해 로그인 이메일로 조회합니다 (비활성 계정 구분용)."""
        statement = (
            select(self.model)
            .where(self.model.username == username)
            .options(selectinload(usr_models.User.role))
        )
        result = await db.execute(statement)
        return result.scalars().first()

    async def authenticate(self, db: AsyncSession, *, username: str, password: str) -> Optional[usr_models.User]:
        """사용자명과 비밀번호를 사용하여 사용자를 인증합니다. 활성 여부는 호출 측에서 확인합니다."""
        db_user = await self.get_by_username(db, username=username)
        if not db_user:
            return None
        if not verify_password(password, db_user.password_hash):
            return None
        return db_user


user = CRUDUser()
