# hrms/core/security.py

"""
애플리케이션의 보안 관련 유틸리티 함수 및 의존성 주입을 정의하는 모듈입니다.

- 비밀번호 해싱 및 검증 (bcrypt).
- JWT(JSON Web Token) Access/Refresh 토큰 생성 및 검증.
- OAuth2 Password Bearer 스키마를 사용하여 현재 사용자 획득.
- 역할(role) 이름 기반 권한 부여(Authorization) 검사.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from hrms import API_PREFIX
from hrms.core.config import settings
from hrms.core.database import get_session
from hrms.core.exceptions import ForbiddenError, UnauthorizedError
from hrms.domains.usr import models as usr_models

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
DEFAULT_ROLE = "user"

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


# --- 비밀번호 해싱 설정 ---
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    일반 텍스트 비밀번호와 해싱된 비밀번호를 비교하여 일치하는지 확인합니다.
    비밀번호가 설정되지 않은 계정은 항상 불일치로 처리합니다.
    """
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


# --- OAuth2 스키마 설정 ---
# Swagger UI 의 Authorize 버튼이 /auth/token 폼 엔드포인트로 토큰을 요청합니다.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{API_PREFIX}/auth/token")


# --- JWT 토큰 생성 및 검증 ---
def _encode(claims: Dict[str, Any], expires_delta: timedelta) -> str:
    to_encode = claims.copy()
    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(to_encode, settings.SECRET_KEY.get_secret_value(), algorithm=settings.ALGORITHM)


def create_access_token(user: usr_models.User, expires_delta: Optional[timedelta] = None) -> str:
    """
    Access Token을 생성합니다.
    클레임: sub(사용자 ID), user_number, name, role_id, role_name, type="access", exp
    """
    claims = {
        "sub": str(user.id),
        "user_number": user.user_number,
        "name": user.name,
        "role_id": str(user.role_id),
        "role_name": user.role.name if user.role else None,
        "type": ACCESS_TOKEN_TYPE,
    }
    return _encode(claims, expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))


def create_refresh_token(user: usr_models.User, expires_delta: Optional[timedelta] = None) -> str:
    """
    Refresh Token을 생성합니다.
    Refresh Token 만료 시간은 Access Token보다 훨씬 길게 설정합니다.
    """
    claims = {"sub": str(user.id), "type": REFRESH_TOKEN_TYPE}
    return _encode(claims, expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))


def decode_token(token: str) -> Dict[str, Any]:
    """
    토큰을 디코딩합니다. 서명/만료 검증 실패 시 jose 의 JWTError 계열 예외가 그대로 전파됩니다.
    """
    return jwt.decode(token, settings.SECRET_KEY.get_secret_value(), algorithms=[settings.ALGORITHM])


def issue_tokens(user: usr_models.User) -> Dict[str, str]:
    return {
        "access_token": create_access_token(user),
        "refresh_token": create_refresh_token(user),
    }


async def load_user_for_auth(db: AsyncSession, user_id: Any) -> Optional[usr_models.User]:
    """
    인증용 사용자 조회. 삭제된 사용자도 조회하여 호출 측이 "비활성" 여부를 구분할 수 있게 합니다.
    """
    statement = (
        select(usr_models.User)
        .where(usr_models.User.id == user_id)
        .options(selectinload(usr_models.User.role))
    )
    result = await db.execute(statement)
    return result.scalars().one_or_none()


async def get_current_user_from_token(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_session),
) -> usr_models.User:
    """
    JWT 토큰을 디코딩하고 검증하여 현재 사용자를 데이터베이스에서 가져옵니다.
    """
    try:
        payload = decode_token(token)
    except ExpiredSignatureError:
        raise UnauthorizedError("Token has expired")
    except JWTError:
        raise UnauthorizedError("Could not validate credentials")

    if payload.get("type") != ACCESS_TOKEN_TYPE or not payload.get("sub"):
        raise UnauthorizedError("Could not validate credentials")

    try:
        user_id = uuid.UUID(str(payload["sub"]))
    except ValueError:
        raise UnauthorizedError("Could not validate credentials")

    user = await load_user_for_auth(db, user_id)
    if user is None:
        raise UnauthorizedError("Could not validate credentials")
    if not user.is_active:
        raise UnauthorizedError("User is not active")
    return user


# --- 역할 기반 권한 부여 의존성 ---
def get_current_admin_user(
    current_user: usr_models.User = Depends(get_current_user_from_token),
) -> usr_models.User:
    """
    현재 인증된 관리자(role.name == "admin") 사용자를 반환합니다.
    관리자 권한이 없는 경우 403 Forbidden을 발생시킵니다.
    """
    role_name = current_user.role.name if current_user.role else None
    if role_name != ADMIN_ROLE:
        logger.info("admin access denied", extra={"user_id": str(current_user.id), "role": role_name})
        raise ForbiddenError()
    return current_user
