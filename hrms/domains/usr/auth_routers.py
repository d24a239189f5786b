# hrms/domains/usr/auth_routers.py

"""
인증(회원가입, 로그인, 토큰 발급/갱신, 내 정보) API 엔드포인트를 정의하는 모듈입니다.

/auth/me 를 제외한 엔드포인트는 토큰 없이 호출할 수 있습니다.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from jose import ExpiredSignatureError, JWTError
from sqlmodel.ext.asyncio.session import AsyncSession

from hrms.core import dependencies as deps
from hrms.core import security
from hrms.core.database import get_session
from hrms.core.exceptions import ConflictError, UnauthorizedError

from . import crud as usr_crud
from . import models as usr_models
from . import schemas as usr_schemas
from .routers import to_user_read

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication (인증)"],
    responses={401: {"description": "Unauthorized"}},
)


async def _authenticate_active(db: AsyncSession, username: str, password: str) -> usr_models.User:
    db_user = await usr_crud.user.authenticate(db, username=username, password=password)
    if db_user is None:
        logger.info("login failed", extra={"username": username})
        raise UnauthorizedError("Invalid credentials")
    if not db_user.is_active:
        raise UnauthorizedError("User is not active")
    return db_user


@router.post(
    "/register",
    response_model=usr_schemas.UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="회원가입",
)
async def register(register_in: usr_schemas.RegisterRequest, db: AsyncSession = Depends(get_session)):
    """
    새 사용자를 기본 'user' 역할로 등록합니다.
    기본 역할이 아직 없으면 409 Conflict 입니다.
    """
    default_role = await usr_crud.role.get_by_name(db, name=security.DEFAULT_ROLE)
    if default_role is None:
        raise ConflictError(f"Default role '{security.DEFAULT_ROLE}' does not exist")

    db_user = await usr_crud.user.create(
        db,
        obj_in=register_in,
        role=default_role,
        password=register_in.password,
        department_ids=register_in.department_ids,
    )
    return {"message": "User registered successfully", "user": await to_user_read(db, db_user)}


@router.post("/login", response_model=usr_schemas.LoginResponse, summary="로그인")
async def login(login_in: usr_schemas.LoginRequest, db: AsyncSession = Depends(get_session)):
    db_user = await _authenticate_active(db, login_in.username, login_in.password)
    tokens = security.issue_tokens(db_user)
    db_user = await usr_crud.user.get_detail(db, db_user.id)
    return {"message": "User logged in successfully", "user": await to_user_read(db, db_user), **tokens}


@router.post("/token", response_model=usr_schemas.Token, summary="Access Token 획득 (OAuth2 password)")
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_session),
):
    """Swagger UI 의 Authorize 버튼에서 사용하는 OAuth2 password 흐름입니다."""
    db_user = await _authenticate_active(db, form_data.username, form_data.password)
    return {"access_token": security.create_access_token(db_user), "token_type": "bearer"}


@router.post("/refresh", response_model=usr_schemas.TokenRefreshResponse, summary="토큰 갱신")
async def refresh_tokens(refresh_in: usr_schemas.RefreshTokenRequest, db: AsyncSession = Depends(get_session)):
    try:
        payload = security.decode_token(refresh_in.refresh_token)
    except (ExpiredSignatureError, JWTError):
        raise UnauthorizedError("Invalid or expired refresh token")

    if payload.get("type") != security.REFRESH_TOKEN_TYPE:
        raise UnauthorizedError("Invalid token type")

    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise UnauthorizedError("Invalid or expired refresh token")

    db_user = await security.load_user_for_auth(db, user_id)
    if db_user is None:
        raise UnauthorizedError("Invalid or expired refresh token")
    if not db_user.is_active:
        raise UnauthorizedError("User is not active")

    return {"message": "Token refreshed successfully", **security.issue_tokens(db_user)}


@router.get("/me", response_model=usr_schemas.UserResponse, summary="현재 사용자 정보 조회")
async def read_users_me(
    current_user: usr_models.User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(get_session),
):
    db_user = await usr_crud.user.get_detail(db, current_user.id)
    return {"message": "User retrieved successfully", "user": await to_user_read(db, db_user)}
