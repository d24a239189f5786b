# hrms/domains/models/__init__.py

"""
모든 도메인의 SQLModel 모델들을 한 곳에서 임포트하여
SQLModel.metadata가 모든 테이블을 인식하도록 보장합니다.
(create_db_and_tables, 테스트의 create_all 에서 사용)
"""

# flake8: noqa
# usr (Role, Title, Department, UserDepartment, Phone, User)
from hrms.domains.usr.models import Role, Title, Department, UserDepartment, Phone, User, WorkLocation

# ast (Asset, AssetTracking)
from hrms.domains.ast.models import Asset, AssetTracking, AssetType, AssetStatus

# shared (Attachment, Image)
from hrms.domains.shared.models import Attachment, AttachmentKind, Image, ImageOwnerKind
