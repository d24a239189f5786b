# hrms/domains/ast/__init__.py

"""
HRMS 애플리케이션의 'ast' (자산) 도메인 패키지입니다.

장비 자산(전화/휴대폰/노트북)과, 자산을 사용자에게 배정한 이력을
기간(assigned_at ~ removed_at) 단위로 기록하는 자산 배정 이력(asset tracking)을 관리합니다.

주요 서브모듈:
- `models.py`: assets, asset_tracking 테이블 SQLModel 정의.
- `schemas.py`: 요청/응답 DTO.
- `crud.py`: 비동기 CRUD 로직.
- `routers.py`: 자산 및 자산 배정 이력 API 엔드포인트.
"""

__title__ = "HRMS Asset Domain"
__description__ = "Manages equipment assets and their assignment history."
__version__ = "0.1.0"
__all__ = []
