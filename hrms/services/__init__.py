# hrms/services/__init__.py

"""
HRMS 애플리케이션의 서비스 계층 패키지입니다.

각 도메인의 `crud.py`가 자기 테이블만 다루는 반면, 이 패키지는
여러 도메인에 걸친 작업(첨부파일 소유 엔티티 검증, 엔티티와 첨부파일의 동시 소프트 삭제 등)을
하나의 트랜잭션으로 조합하는 상위 수준의 로직을 담당합니다.
"""

__title__ = "HRMS Services"
__description__ = "Cross-domain business logic for the HRMS API."
__version__ = "0.1.0"
__all__ = []
