# hrms/core/__init__.py

"""
FastAPI 애플리케이션의 핵심 구성 요소 패키지입니다.

- `config.py`: 애플리케이션 설정 및 환경 변수 관리 (Pydantic Settings).
- `database.py`: 비동기 엔진, 세션 관리 (SQLModel 및 AsyncSQLAlchemy).
- `types.py`: 백엔드에 무관한 UTC 타임스탬프 컬럼 타입.
- `lifecycle.py`: 소프트 삭제(Active / Deleted) 상태 모델과 믹스인.
- `transaction.py`: 트랜잭션 단위 작업(Unit of Work) 래퍼.
- `crud_base.py`: 필터/정렬/페이지네이션/소프트 삭제를 지원하는 공통 CRUD 클래스.
- `exceptions.py`: 타입이 지정된 HTTP 예외와 공통 오류 응답 핸들러.
- `logging_utils.py`: 로깅 설정.
- `security.py`: 비밀번호 해싱, JWT 발급/검증, 역할 기반 권한 검사.
- `dependencies.py`: FastAPI 의존성 주입에서 사용되는 공통 함수들.
"""

__title__ = "HRMS Core"
__description__ = "Core components for HRMS FastAPI application."
__version__ = "0.1.0"
__all__ = []
