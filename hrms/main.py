# hrms/main.py

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlmodel.ext.asyncio.session import AsyncSession

# 핵심 설정 및 데이터베이스 모듈 임포트
from hrms import API_PREFIX
from hrms.core.config import settings
from hrms.core.database import engine, get_session
from hrms.core.exceptions import register_exception_handlers
from hrms.core.logging_utils import setup_logging

# 각 도메인의 라우터들을 임포트합니다.
from hrms.domains.ast.routers import router as ast_router
from hrms.domains.shared.routers import router as shared_router
from hrms.domains.usr.auth_routers import router as auth_router
from hrms.domains.usr.routers import department_router, router as usr_router

setup_logging()
logger = logging.getLogger(__name__)


# -- 애플리케이션 수명 주기 이벤트 핸들러 --
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI 애플리케이션의 수명 주기를 처리합니다.
    스키마는 마이그레이션 또는 scripts/ 의 부트스트랩으로 관리하며, 종료 시 연결 풀을 닫습니다.
    """
    logger.info("application starting", extra={"env": settings.APP_ENV, "version": settings.APP_VERSION})
    yield
    await engine.dispose()
    logger.info("application stopped, database pool disposed")


# -- FastAPI 애플리케이션 인스턴스 생성 --
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# -- CORS 미들웨어 설정 --
# 운영 환경에서는 CORS_ORIGINS 에 실제 프론트엔드 도메인만 지정합니다.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "request_complete",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        },
    )
    return response


register_exception_handlers(app)

# -- 도메인 라우터 포함 --
app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(usr_router, prefix=API_PREFIX)
app.include_router(department_router, prefix=API_PREFIX)
app.include_router(ast_router, prefix=API_PREFIX)
app.include_router(shared_router, prefix=API_PREFIX)


# -- 루트 엔드포인트 --
@app.get("/", summary="API Root", response_description="Welcome message and documentation link.")
async def read_root():
    return {"message": "Welcome to HRMS API. Visit /docs for interactive API documentation."}


# -- 헬스 체크 엔드포인트 --
@app.get("/health-check", summary="Health Check", response_description="Status of the application and database connection.")
async def health_check(session: AsyncSession = Depends(get_session)):
    """
    데이터베이스에 SELECT 1 을 실행하여 서비스의 정상 작동 여부를 확인합니다.
    """
    try:
        result = await session.execute(text("SELECT 1"))
        if result.scalar() == 1:
            return {"status": "ok", "database_connection": "successful"}
    except Exception as e:
        logger.exception("health check failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database connection error during health check: {e}",
        )
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Database health check failed: No result from test query",
    )
