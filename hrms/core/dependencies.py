# hrms/core/dependencies.py

"""
FastAPI 애플리케이션의 의존성 주입(Dependency Injection)을 한 곳에서 노출하는 모듈입니다.

- 데이터베이스 세션 (get_session).
- 현재 인증된 사용자 / 관리자 사용자.
- 첨부파일 저장소 백엔드.
라우터는 개별 모듈 대신 이 모듈에서 의존성을 가져옵니다.
테스트에서는 `app.dependency_overrides[get_session]`으로 세션을 교체합니다.
"""

# flake8: noqa
from hrms.core.database import get_session
from hrms.core.security import (
    get_current_user_from_token as get_current_user,
    get_current_admin_user,
)
from hrms.utils.storage import get_storage

__all__ = ["get_session", "get_current_user", "get_current_admin_user", "get_storage"]
