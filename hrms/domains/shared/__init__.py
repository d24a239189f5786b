# hrms/domains/shared/__init__.py

"""
HRMS 애플리케이션의 'shared' 도메인 패키지입니다.

여러 도메인이 공통으로 사용하는 첨부파일(attachments)을 관리합니다.
첨부파일은 외래 키 대신 (entity_id, entity_type) 쌍으로 소유 엔티티를 가리키며,
소유 엔티티의 존재 여부는 애플리케이션 계층(hrms.services.cross_domain_service)에서 검증합니다.

주요 서브모듈:
- `models.py`: attachments 테이블과 AttachmentKind 정의.
- `schemas.py`: 첨부파일 응답 DTO.
- `crud.py`: 일괄 조회/삽입/소프트 삭제.
- `services.py`: 파일 저장소와 DB 를 함께 다루는 업로드/삭제 서비스.
- `routers.py`: 첨부파일 API 엔드포인트.
"""

__title__ = "HRMS Shared Domain"
__description__ = "Manages polymorphic file attachments."
__version__ = "0.1.0"
__all__ = []
