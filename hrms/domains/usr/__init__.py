# hrms/domains/usr/__init__.py

"""
HRMS 애플리케이션의 'usr' 도메인 패키지입니다.

'usr' 도메인은 사용자, 역할, 부서, 직함, 전화 정보와
인증/권한 부여와 관련된 핵심 데이터를 관리하는 역할을 합니다.

주요 서브모듈:
- `models.py`: roles, titles, departments, user_departments, phones, users 테이블 SQLModel 정의.
- `schemas.py`: 요청/응답 DTO (인증 스키마 포함).
- `crud.py`: 비동기 CRUD 로직, 부서 연결 교체, 사용자 인증 로직.
- `routers.py`: 역할/직함/부서/전화/사용자 관리 API 엔드포인트.
- `auth_routers.py`: 회원가입, 로그인, 토큰 갱신 API 엔드포인트.
"""

__title__ = "HRMS User Domain"
__description__ = "Manages users, roles, departments, titles and phones, and handles authentication."
__version__ = "0.1.0"
__all__ = []
