# hrms/domains/usr/routers.py

"""
'usr' 도메인 (역할, 직함, 부서, 전화, 사용자 관리)과 관련된 API 엔드포인트를 정의하는 모듈입니다.

부서 조회(GET)는 인증된 모든 사용자에게 열려 있고, 그 밖의 모든 엔드포인트는 관리자 전용입니다.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from hrms.core import dependencies as deps
from hrms.core.database import get_session
from hrms.domains.shared import services as attachment_services
from hrms.domains.shared.models import AttachmentKind, ImageOwnerKind
from hrms.services.cross_domain_service import soft_delete_with_attachments
from hrms.utils.pagination import ListParams

from . import crud as usr_crud
from . import models as usr_models
from . import schemas as usr_schemas

# 관리자 전용 라우터 (prefix는 main.py에서 관리)
router = APIRouter(
    tags=["User Management (사용자/역할/직함/전화 관리)"],
    dependencies=[Depends(deps.get_current_admin_user)],
    responses={404: {"description": "Not found"}},
)

# 부서 라우터: 조회는 인증 사용자, 쓰기는 관리자
department_router = APIRouter(
    tags=["Department Management (부서 관리)"],
    dependencies=[Depends(deps.get_current_user)],
    responses={404: {"description": "Not found"}},
)


def lifecycle_filters(
    is_active: Optional[bool] = Query(None, description="활성 여부 (생략 시 활성만)"),
    createdFrom: Optional[str] = Query(None, description="YYYY-MM-DD (UTC)"),
    createdTo: Optional[str] = Query(None, description="YYYY-MM-DD (UTC)"),
    updatedFrom: Optional[str] = Query(None, description="YYYY-MM-DD (UTC)"),
    updatedTo: Optional[str] = Query(None, description="YYYY-MM-DD (UTC)"),
) -> dict:
    return {
        "is_active": is_active,
        "createdFrom": createdFrom,
        "createdTo": createdTo,
        "updatedFrom": updatedFrom,
        "updatedTo": updatedTo,
    }


# =============================================================================
# 1. 역할 (Role) 관리 엔드포인트
# =============================================================================
@router.post("/roles", response_model=usr_schemas.RoleResponse, status_code=status.HTTP_201_CREATED, summary="새 역할 생성")
async def create_role(role_in: usr_schemas.RoleCreate, db: AsyncSession = Depends(get_session)):
    db_role = await usr_crud.role.create(db, obj_in=role_in)
    return {"message": "Role created successfully", "role": db_role}


@router.get("/roles", response_model=usr_schemas.RoleListResponse, summary="역할 목록 조회")
async def read_roles(
    params: ListParams = Depends(),
    name: Optional[str] = Query(None),
    common: dict = Depends(lifecycle_filters),
    db: AsyncSession = Depends(get_session),
):
    roles, meta = await usr_crud.role.get_page(db, params=params, filters={"name": name, **common})
    return {"message": "Roles retrieved successfully", "roles": roles, **meta}


@router.get("/roles/{role_id}", response_model=usr_schemas.RoleResponse, summary="특정 역할 조회")
async def read_role(role_id: uuid.UUID, db: AsyncSession = Depends(get_session)):
    db_role = await usr_crud.role.get_or_404(db, role_id)
    return {"message": "Role retrieved successfully", "role": db_role}


@router.patch("/roles/{role_id}", response_model=usr_schemas.RoleResponse, summary="역할 수정")
async def update_role(role_id: uuid.UUID, role_in: usr_schemas.RoleUpdate, db: AsyncSession = Depends(get_session)):
    db_role = await usr_crud.role.get_or_404(db, role_id)
    db_role = await usr_crud.role.update(db, db_obj=db_role, obj_in=role_in)
    return {"message": "Role updated successfully", "role": db_role}


@router.delete("/roles/{role_id}", response_model=usr_schemas.RoleDeleteResponse, summary="역할 비활성화")
async def delete_role(role_id: uuid.UUID, db: AsyncSession = Depends(get_session)):
    await usr_crud.role.soft_delete(db, id=role_id)
    return {"message": "Role deactivated successfully", "roleId": role_id}


# =============================================================================
# 2. 직함 (Title) 관리 엔드포인트
# =============================================================================
@router.post("/titles", response_model=usr_schemas.TitleResponse, status_code=status.HTTP_201_CREATED, summary="새 직함 생성")
async def create_title(title_in: usr_schemas.TitleCreate, db: AsyncSession = Depends(get_session)):
    db_title = await usr_crud.title.create(db, obj_in=title_in)
    return {"message": "Title created successfully", "title": db_title}


@router.get("/titles", response_model=usr_schemas.TitleListResponse, summary="직함 목록 조회")
async def read_titles(
    params: ListParams = Depends(),
    name: Optional[str] = Query(None),
    common: dict = Depends(lifecycle_filters),
    db: AsyncSession = Depends(get_session),
):
    titles, meta = await usr_crud.title.get_page(db, params=params, filters={"name": name, **common})
    return {"message": "Titles retrieved successfully", "titles": titles, **meta}


@router.get("/titles/{title_id}", response_model=usr_schemas.TitleResponse, summary="특정 직함 조회")
async def read_title(title_id: uuid.UUID, db: AsyncSession = Depends(get_session)):
    db_title = await usr_crud.title.get_or_404(db, title_id)
    return {"message": "Title retrieved successfully", "title": db_title}


@router.patch("/titles/{title_id}", response_model=usr_schemas.TitleResponse, summary="직함 수정")
async def update_title(title_id: uuid.UUID, title_in: usr_schemas.TitleUpdate, db: AsyncSession = Depends(get_session)):
    db_title = await usr_crud.title.get_or_404(db, title_id)
    db_title = await usr_crud.title.update(db, db_obj=db_title, obj_in=title_in)
    return {"message": "Title updated successfully", "title": db_title}


@router.delete("/titles/{title_id}", response_model=usr_schemas.TitleDeleteResponse, summary="직함 삭제")
async def delete_title(title_id: uuid.UUID, db: AsyncSession = Depends(get_session)):
    await usr_crud.title.soft_delete(db, id=title_id)
    return {"message": "Title deleted successfully", "titleId": title_id}


# =============================================================================
# 3. 부서 (Department) 관리 엔드포인트
# =============================================================================
@department_router.post(
    "/departments",
    response_model=usr_schemas.DepartmentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(deps.get_current_admin_user)],
    summary="새 부서 생성",
)
async def create_department(department_in: usr_schemas.DepartmentCreate, db: AsyncSession = Depends(get_session)):
    db_department = await usr_crud.department.create(db, obj_in=department_in)
    return {"message": "Department created successfully", "department": db_department}


@department_router.get("/departments", response_model=usr_schemas.DepartmentListResponse, summary="부서 목록 조회")
async def read_departments(
    params: ListParams = Depends(),
    name: Optional[str] = Query(None),
    common: dict = Depends(lifecycle_filters),
    db: AsyncSession = Depends(get_session),
):
    departments, meta = await usr_crud.department.get_page(db, params=params, filters={"name": name, **common})
    return {"message": "Departments retrieved successfully", "departments": departments, **meta}


@department_router.get("/departments/{department_id}", response_model=usr_schemas.DepartmentResponse, summary="특정 부서 조회")
async def read_department(department_id: uuid.UUID, db: AsyncSession = Depends(get_session)):
    db_department = await usr_crud.department.get_or_404(db, department_id)
    return {"message": "Department retrieved successfully", "department": db_department}


@department_router.patch(
    "/departments/{department_id}",
    response_model=usr_schemas.DepartmentResponse,
    dependencies=[Depends(deps.get_current_admin_user)],
    summary="부서 수정",
)
async def update_department(
    department_id: uuid.UUID,
    department_in: usr_schemas.DepartmentUpdate,
    db: AsyncSession = Depends(get_session),
):
    db_department = await usr_crud.department.get_or_404(db, department_id)
    db_department = await usr_crud.department.update(db, db_obj=db_department, obj_in=department_in)
    return {"message": "Department updated successfully", "department": db_department}


@department_router.delete(
    "/departments/{department_id}",
    response_model=usr_schemas.DepartmentDeleteResponse,
    dependencies=[Depends(deps.get_current_admin_user)],
    summary="부서 삭제",
)
async def delete_department(department_id: uuid.UUID, db: AsyncSession = Depends(get_session)):
    await usr_crud.department.soft_delete(db, id=department_id)
    return {"message": "Department deleted successfully", "departmentId": department_id}


# =============================================================================
# 4. 전화 (Phone) 관리 엔드포인트
# =============================================================================
@router.post("/phones", response_model=usr_schemas.PhoneResponse, status_code=status.HTTP_201_CREATED, summary="새 전화 등록")
async def create_phone(phone_in: usr_schemas.PhoneCreate, db: AsyncSession = Depends(get_session)):
    db_phone = await usr_crud.phone.create(db, obj_in=phone_in)
    return {"message": "Phone created successfully", "phone": db_phone}


@router.get("/phones", response_model=usr_schemas.PhoneListResponse, summary="전화 목록 조회")
async def read_phones(
    params: ListParams = Depends(),
    number: Optional[str] = Query(None),
    company: Optional[str] = Query(None),
    user_id: Optional[uuid.UUID] = Query(None),
    common: dict = Depends(lifecycle_filters),
    db: AsyncSession = Depends(get_session),
):
    filters = {"number": number, "company": company, "user_id": user_id, **common}
    phones, meta = await usr_crud.phone.get_page(db, params=params, filters=filters)
    return {"message": "Phones retrieved successfully", "phones": phones, **meta}


@router.get("/phones/{phone_id}", response_model=usr_schemas.PhoneResponse, summary="특정 전화 조회")
async def read_phone(phone_id: uuid.UUID, db: AsyncSession = Depends(get_session)):
    db_phone = await usr_crud.phone.get_or_404(db, phone_id)
    return {"message": "Phone retrieved successfully", "phone": db_phone}


@router.patch("/phones/{phone_id}", response_model=usr_schemas.PhoneResponse, summary="전화 수정")
async def update_phone(phone_id: uuid.UUID, phone_in: usr_schemas.PhoneUpdate, db: AsyncSession = Depends(get_session)):
    db_phone = await usr_crud.phone.get_or_404(db, phone_id)
    db_phone = await usr_crud.phone.update(db, db_obj=db_phone, obj_in=phone_in)
    return {"message": "Phone updated successfully", "phone": db_phone}


@router.delete("/phones/{phone_id}", response_model=usr_schemas.PhoneDeleteResponse, summary="전화 삭제")
async def delete_phone(phone_id: uuid.UUID, db: AsyncSession = Depends(get_session)):
    await usr_crud.phone.soft_delete(db, id=phone_id)
    return {"message": "Phone deleted successfully", "phoneId": phone_id}


# =============================================================================
# 5. 사용자 (User) 관리 엔드포인트
# =============================================================================
async def to_user_reads(db: AsyncSession, users: List[usr_models.User]) -> List[usr_schemas.UserRead]:
    """사용자 응답 목록에 활성 첨부파일과 이미지를 붙입니다 (종류별 한 번의 쿼리)."""
    user_ids = [db_user.id for db_user in users]
    attachments = await attachment_services.fetch_batch(db, entity_ids=user_ids, kind=AttachmentKind.USERS)
    images = await attachment_services.fetch_image_batch(db, owner_ids=user_ids, kind=ImageOwnerKind.USER)
    return [
        usr_schemas.UserRead.model_validate(db_user).model_copy(
            update={
                "attachments": attachments.get(str(db_user.id), []),
                "images": images.get(str(db_user.id), []),
            }
        )
        for db_user in users
    ]


async def to_user_read(db: AsyncSession, db_user: usr_models.User) -> usr_schemas.UserRead:
    return (await to_user_reads(db, [db_user]))[0]


@router.post("/users", response_model=usr_schemas.UserResponse, status_code=status.HTTP_201_CREATED, summary="새 사용자 생성")
async def create_user(user_in: usr_schemas.UserCreate, db: AsyncSession = Depends(get_session)):
    db_role = await usr_crud.role.resolve(db, name=user_in.role)
    db_user = await usr_crud.user.create(
        db,
        obj_in=user_in,
        role=db_role,
        password=user_in.password,
        department_ids=user_in.department_ids,
        image_urls=user_in.images,
    )
    return {"message": "User created successfully", "user": await to_user_read(db, db_user)}


@router.get("/users", response_model=usr_schemas.UserListResponse, summary="사용자 목록 조회")
async def read_users(
    params: ListParams = Depends(),
    user_number: Optional[str] = Query(None),
    name: Optional[str] = Query(None),
    title: Optional[str] = Query(None),
    work_location: Optional[usr_models.WorkLocation] = Query(None),
    social_insurance: Optional[bool] = Query(None),
    medical_insurance: Optional[bool] = Query(None),
    role: Optional[str] = Query(None, description="역할 이름"),
    department_id: Optional[uuid.UUID] = Query(None),
    joinDateFrom: Optional[str] = Query(None, description="YYYY-MM-DD (UTC)"),
    joinDateTo: Optional[str] = Query(None, description="YYYY-MM-DD (UTC)"),
    common: dict = Depends(lifecycle_filters),
    db: AsyncSession = Depends(get_session),
):
    filters = {
        "user_number": user_number,
        "name": name,
        "title": title,
        "work_location": work_location,
        "social_insurance": social_insurance,
        "medical_insurance": medical_insurance,
        "joinDateFrom": joinDateFrom,
        "joinDateTo": joinDateTo,
        **common,
    }
    conditions = []
    if role:
        conditions.append(usr_crud.user.role_condition(role))
    if department_id:
        conditions.append(usr_crud.user.department_condition(department_id))

    users, meta = await usr_crud.user.get_page(
        db, params=params, filters=filters, conditions=conditions, options=usr_crud.USER_LOAD_OPTIONS
    )
    users_read = await to_user_reads(db, users)
    return {"message": "Users retrieved successfully", "users": users_read, **meta}


@router.get("/users/{user_id}", response_model=usr_schemas.UserResponse, summary="특정 사용자 조회")
async def read_user(user_id: uuid.UUID, db: AsyncSession = Depends(get_session)):
    db_user = await usr_crud.user.get_detail(db, user_id)
    return {"message": "User retrieved successfully", "user": await to_user_read(db, db_user)}


@router.patch("/users/{user_id}", response_model=usr_schemas.UserResponse, summary="사용자 수정")
async def update_user(user_id: uuid.UUID, user_in: usr_schemas.UserUpdate, db: AsyncSession = Depends(get_session)):
    db_user = await usr_crud.user.get_detail(db, user_id)
    db_user = await usr_crud.user.update(db, db_obj=db_user, obj_in=user_in)
    return {"message": "User updated successfully", "user": await to_user_read(db, db_user)}


@router.delete("/users/{user_id}", response_model=usr_schemas.UserDeleteResponse, summary="사용자 삭제")
async def delete_user(user_id: uuid.UUID, db: AsyncSession = Depends(get_session)):
    """사용자와 그 첨부파일을 한 트랜잭션에서 소프트 삭제합니다."""
    await soft_delete_with_attachments(db, crud=usr_crud.user, kind=AttachmentKind.USERS, entity_id=user_id)
    return {"message": "User deleted successfully", "userId": user_id}
