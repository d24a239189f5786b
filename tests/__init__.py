# tests/__init__.py

"""
HRMS FastAPI 애플리케이션의 테스트 스위트 패키지입니다.

주요 하위 디렉토리:
- `core/`: 페이지네이션, 필터/정렬, 소프트 삭제 상태, 트랜잭션 래퍼 등 공통 유틸리티 단위 테스트.
- `domains/`: 각 비즈니스 도메인(usr, ast, shared)의 API 통합 테스트.
- `conftest.py`: 테스트용 데이터베이스, 의존성 오버라이드, 역할별 인증 클라이언트 픽스처.
"""

__title__ = "HRMS API Tests"
__description__ = "Test suite for HRMS FastAPI application."
__version__ = "0.1.0"
__all__ = []
