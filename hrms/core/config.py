# hrms/core/config.py

from typing import Any, List
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
import os

# 프로젝트의 루트 디렉토리 경로를 계산합니다.
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class Settings(BaseSettings):
    """
    애플리케이션의 모든 설정을 정의하는 Pydantic BaseSettings 모델입니다.
    환경 변수 및 .env 파일에서 값을 자동으로 로드합니다.
    """

    # --- Pydantic Settings 설정 ---
    model_config = SettingsConfigDict(
        env_file=os.path.join(BASE_DIR, '.env'),  # 프로젝트 루트의 .env 파일
        env_file_encoding='utf-8',
        extra='ignore',                           # 모델에 없는 변수는 무시
        case_sensitive=True                       # 환경 변수 이름 대소문자 구분
    )

    # --- 애플리케이션 기본 설정 ---
    APP_NAME: str = "HRMS FastAPI API"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Human Resources Management System (HRMS) API"
    APP_ENV: str = Field("development", description="Application environment (e.g., development, production, testing)")
    DEBUG_MODE: bool = Field(False, description="Echo SQL statements and enable verbose errors")

    # --- 로깅 설정 ---
    LOG_LEVEL: str = Field("INFO", description="Root log level")
    LOG_JSON: bool = Field(False, description="Emit one JSON object per log line")

    # --- 데이터베이스 설정 ---
    DATABASE_URL: SecretStr = Field(..., description="Async database connection URL (postgresql+asyncpg://...)")
    DB_POOL_SIZE: int = Field(10, description="Persistent connections kept in the pool")
    DB_MAX_OVERFLOW: int = Field(20, description="Extra connections allowed above pool size")
    DB_POOL_TIMEOUT: int = Field(30, description="Seconds to wait for a pooled connection")
    DB_POOL_RECYCLE: int = Field(3600, description="Seconds before a pooled connection is recycled")

    # --- JWT (JSON Web Token) 설정 ---
    SECRET_KEY: SecretStr = Field(..., description="Secret key for JWT token signing. Keep this highly secure!")
    ALGORITHM: str = Field("HS256", description="Algorithm used for JWT signing (e.g., HS256)")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60, description="Access token expiration time in minutes")
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(7, description="Refresh token expiration time in days")

    # --- 파일 업로드 설정 ---
    UPLOAD_DIR: str = Field(..., description="Directory for uploaded attachment files.")
    MAX_UPLOAD_FILES: int = Field(10, description="Maximum number of files accepted by one upload request")

    # --- CORS 설정 ---
    CORS_ORIGINS: str = Field("*", description="Comma separated list of allowed origins")

    def model_post_init(self, __context: Any) -> None:  # noqa: ANN001
        # 상대 경로로 지정된 업로드 디렉토리는 프로젝트 루트를 기준으로 해석합니다.
        if not os.path.isabs(self.UPLOAD_DIR):
            self.UPLOAD_DIR = os.path.join(BASE_DIR, self.UPLOAD_DIR)

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()
