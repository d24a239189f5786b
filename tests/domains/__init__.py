# tests/domains/__init__.py

"""
도메인별 API 통합 테스트 패키지입니다.

- `test_auth.py`: 회원가입, 로그인, 토큰 갱신, 권한 검사.
- `test_usr.py`: 역할, 직함, 부서, 전화, 사용자.
- `test_ast.py`: 자산, 자산 배정 이력.
- `test_shared.py`: 첨부파일 업로드/조회/삭제.
"""

__title__ = "HRMS Domain Tests"
__description__ = "Categorized tests for each business domain in HRMS FastAPI application."
__version__ = "0.1.0"
__all__ = []
