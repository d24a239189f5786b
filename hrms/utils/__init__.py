# hrms/utils/__init__.py

"""
도메인에 무관한 쿼리 보조 유틸리티 패키지입니다.

- `pagination.py`: page/limit 정규화와 응답 메타데이터 계산.
- `filters.py`: 선언적 필터 필드 정의로부터 SQLAlchemy WHERE/ORDER BY 절 생성.
- `storage.py`: 첨부 파일 바이트를 저장하는 스토리지 백엔드.
"""

__all__ = []
