# tests/conftest.py

import os
import sys
import tempfile
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncGenerator, Awaitable, Callable

# 설정 모듈이 임포트되기 전에 테스트용 환경 변수를 지정합니다.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-hrms")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="hrms-uploads-"))

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

# hrms.main을 임포트하여 FastAPI 앱 인스턴스에 접근합니다.
from hrms.main import app as main_app
from hrms.core import dependencies as deps
from hrms.core.security import ADMIN_ROLE, DEFAULT_ROLE
from hrms.utils.storage import LocalStorage

# --- 모든 모델 임포트 ---
#  SQLModel.metadata.create_all()이 모든 테이블을 인식하려면 모든 모델이 한 번 이상 임포트되어야 합니다.
from hrms.domains.models import *    # noqa: F401, F403
from hrms.domains.usr import crud as usr_crud
from hrms.domains.usr import models as usr_models
from hrms.domains.usr import schemas as usr_schemas

# --- 경로 설정 ---
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))


# --- 테스트용 데이터베이스 설정 ---
# 기본값은 인메모리 SQLite 이며, TEST_DATABASE_URL 로 PostgreSQL 등을 지정할 수 있습니다.
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

API = "/api/v1"
ADMIN_PASSWORD = "adminpass123"
USER_PASSWORD = "userpass123"


def _create_test_engine() -> AsyncEngine:
    if not TEST_DATABASE_URL.startswith("sqlite"):
        return create_async_engine(TEST_DATABASE_URL, echo=False, future=True)

    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,   # 인메모리 DB 를 모든 세션이 공유하도록 하나의 연결만 사용
    )

    @event.listens_for(test_engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return test_engine


# --- 데이터베이스 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    각 테스트 함수마다 모든 테이블을 생성하고, 테스트 종료 후 삭제합니다.
    """
    engine = _create_test_engine()
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine  # 테스트 실행

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(test_engine: AsyncEngine):
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """테스트 데이터 준비 및 결과 확인용 세션. API 요청은 요청마다 별도의 세션을 사용합니다."""
    async with session_factory() as session:
        yield session


@pytest.fixture(scope="function")
def storage(tmp_path) -> LocalStorage:
    return LocalStorage(str(tmp_path / "uploads"))


@pytest_asyncio.fixture(scope="function", autouse=True)
async def override_dependencies(session_factory, storage: LocalStorage):
    """get_session 과 저장소 의존성을 테스트용으로 교체하고, 테스트 후 원래대로 되돌립니다."""
    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    original_overrides = main_app.dependency_overrides.copy()
    main_app.dependency_overrides.update({
        deps.get_session: override_get_session,
        deps.get_storage: lambda: storage,
    })
    yield
    main_app.dependency_overrides.clear()
    main_app.dependency_overrides.update(original_overrides)


@pytest_asyncio.fixture(scope="function")
async def client() -> AsyncGenerator[AsyncClient, None]:
    """인증 헤더가 없는 클라이언트."""
    transport = ASGITransport(app=main_app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client


# --- 역할 / 사용자 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def default_roles(db_session: AsyncSession) -> dict:
    """admin, user 기본 역할을 생성하고 이름 -> Role 딕셔너리로 반환합니다."""
    roles = await usr_crud.role.ensure_default_roles(db_session)
    return {db_role.name: db_role for db_role in roles}


@pytest_asyncio.fixture(scope="function")
def user_factory(db_session: AsyncSession, default_roles: dict) -> Callable[..., Awaitable[usr_models.User]]:
    """
    역할과 속성을 지정하여 테스트 사용자를 생성하는 팩토리 함수를 반환합니다.
    **kwargs 는 UserCreate 스키마에 그대로 전달됩니다.
    """
    async def _create_user(
        user_number: str,
        username: str,
        password: str,
        role: str = DEFAULT_ROLE,
        **kwargs,
    ) -> usr_models.User:
        user_data = {
            "user_number": user_number,
            "username": username,
            "name": kwargs.pop("name", f"Test {user_number}"),
            "address": kwargs.pop("address", "1 Test Street"),
            "work_location": kwargs.pop("work_location", usr_models.WorkLocation.IN_OFFICE),
            "join_date": kwargs.pop("join_date", date(2024, 1, 15)),
            **kwargs,
        }
        user_in = usr_schemas.UserCreate(**user_data, role=role, password=password)
        return await usr_crud.user.create(
            db_session, obj_in=user_in, role=default_roles[role], password=password
        )
    return _create_user


@pytest_asyncio.fixture(scope="function")
async def test_admin_user(user_factory: Callable) -> usr_models.User:
    """관리자(admin) 사용자를 생성합니다."""
    return await user_factory("ADM001", "admin@example.com", ADMIN_PASSWORD, role=ADMIN_ROLE, name="Admin User")


@pytest_asyncio.fixture(scope="function")
async def test_user(user_factory: Callable) -> usr_models.User:
    """일반 사용자(user)를 생성합니다."""
    return await user_factory("EMP001", "user@example.com", USER_PASSWORD, name="General User")


# --- 역할별 인증 클라이언트 픽스처 ---
# 실제 /auth/login 라우트를 호출하여 받은 access_token 을 Authorization 헤더에 넣습니다.
@pytest.fixture(scope="function")
def authorized_client_factory() -> Callable[[usr_models.User, str], AsyncGenerator[AsyncClient, None]]:
    """
    특정 사용자로 로그인된 AsyncClient 를 만드는 비동기 컨텍스트 매니저 팩토리를 반환합니다.
    """
    @asynccontextmanager
    async def _create_client_context(user: usr_models.User, password: str) -> AsyncGenerator[AsyncClient, None]:
        transport = ASGITransport(app=main_app)
        async with AsyncClient(transport=transport, base_url="http://test") as test_client:
            res = await test_client.post(f"{API}/auth/login", json={"username": user.username, "password": password})
            if res.status_code != 200:
                pytest.fail(f"Login failed for {user.username}: {res.text}")

            token = res.json()["access_token"]
            test_client.headers["Authorization"] = f"Bearer {token}"
            yield test_client

    return _create_client_context


@pytest_asyncio.fixture(scope="function")
async def admin_client(
    authorized_client_factory: Callable[..., AsyncGenerator[AsyncClient, None]],
    test_admin_user: usr_models.User,
) -> AsyncGenerator[AsyncClient, None]:
    """관리자로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_admin_user, ADMIN_PASSWORD) as test_client:
        yield test_client


@pytest_asyncio.fixture(scope="function")
async def user_client(
    authorized_client_factory: Callable[..., AsyncGenerator[AsyncClient, None]],
    test_user: usr_models.User,
) -> AsyncGenerator[AsyncClient, None]:
    """일반 사용자로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_user, USER_PASSWORD) as test_client:
        yield test_client
