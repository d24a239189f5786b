# tests/domains/test_shared.py

"""
'shared' 도메인 (첨부파일) 관련 API 엔드포인트와 서비스에 대한 통합 테스트 모듈입니다.
"""

import io
import logging
import uuid

import pytest
from fastapi import UploadFile
from httpx import AsyncClient
from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from hrms.core.exceptions import BadRequestError
from hrms.domains.shared import models as shared_models
from hrms.domains.shared import services as shared_services
from hrms.domains.usr import models as usr_models
from starlette.datastructures import Headers

from hrms.utils.storage import MAX_FILENAME_BYTES, LocalStorage, stored_name

API = "/api/v1"


def _files(*names: str) -> list:
    return [("files", (name, f"content of {name}".encode(), "text/plain")) for name in names]


async def _upload(client: AsyncClient, kind: str, entity_id, *names: str) -> dict:
    response = await client.post(f"{API}/{kind}/{entity_id}/attachments", files=_files(*names))
    assert response.status_code == 201, response.text
    return response.json()


# =============================================================================
# 1. 업로드 / 조회
# =============================================================================
@pytest.mark.asyncio
async def test_upload_and_list_user_attachments(
    admin_client: AsyncClient, test_user: usr_models.User, storage: LocalStorage
):
    body = await _upload(admin_client, "users", test_user.id, "contract.txt", "id-card.txt")

    assert body["message"] == "Attachments uploaded successfully"
    assert body["count"] == 2
    for attachment in body["attachments"]:
        assert attachment["entity_id"] == str(test_user.id)
        assert attachment["entity_type"] == "users"
        assert attachment["type"] == "text/plain"
        assert attachment["extension"] == "txt"
        assert (storage.base_dir / attachment["path_url"]).exists()

    listed = await admin_client.get(f"{API}/users/{test_user.id}/attachments")
    assert listed.status_code == 200
    assert listed.json()["count"] == 2
    assert {attachment["name"] for attachment in listed.json()["attachments"]} == {"contract.txt", "id-card.txt"}


@pytest.mark.asyncio
async def test_user_response_embeds_attachments(admin_client: AsyncClient, test_user: usr_models.User):
    await _upload(admin_client, "users", test_user.id, "photo.txt")

    detail = await admin_client.get(f"{API}/users/{test_user.id}")
    listed = await admin_client.get(f"{API}/users", params={"search": "EMP001"})

    assert [attachment["name"] for attachment in detail.json()["user"]["attachments"]] == ["photo.txt"]
    assert [attachment["name"] for attachment in listed.json()["users"][0]["attachments"]] == ["photo.txt"]


@pytest.mark.asyncio
async def test_asset_attachments(admin_client: AsyncClient):
    created = await admin_client.post(f"{API}/assets", json={"label": "Laptop-9"})
    asset_id = created.json()["asset"]["id"]

    await _upload(admin_client, "assets", asset_id, "invoice.txt")

    detail = await admin_client.get(f"{API}/assets/{asset_id}")
    assert [attachment["name"] for attachment in detail.json()["asset"]["attachments"]] == ["invoice.txt"]


@pytest.mark.asyncio
async def test_upload_to_missing_owner_is_not_found(admin_client: AsyncClient):
    missing_id = uuid.uuid4()

    response = await admin_client.post(f"{API}/users/{missing_id}/attachments", files=_files("a.txt"))

    assert response.status_code == 404
    assert response.json()["message"] == [f"User with ID {missing_id} not found"]


@pytest.mark.asyncio
async def test_upload_checks_owner_kind(admin_client: AsyncClient, test_user: usr_models.User):
    # 사용자 ID 로 자산 첨부를 시도하면 다른 테이블에 존재하더라도 404 입니다.
    response = await admin_client.post(f"{API}/assets/{test_user.id}/attachments", files=_files("a.txt"))

    assert response.status_code == 404
    assert response.json()["message"] == [f"Asset with ID {test_user.id} not found"]


@pytest.mark.asyncio
async def test_upload_unknown_kind_is_rejected(admin_client: AsyncClient, test_user: usr_models.User):
    response = await admin_client.post(f"{API}/roles/{test_user.id}/attachments", files=_files("a.txt"))

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_upload_too_many_files(admin_client: AsyncClient, test_user: usr_models.User, storage: LocalStorage):
    names = [f"file-{index}.txt" for index in range(11)]

    response = await admin_client.post(f"{API}/users/{test_user.id}/attachments", files=_files(*names))

    assert response.status_code == 400
    assert response.json()["message"] == ["Too many files (max 10)"]
    assert not storage.base_dir.exists() or not any(storage.base_dir.iterdir())


@pytest.mark.asyncio
async def test_upload_service_rejects_empty_file_list(
    db_session: AsyncSession, test_user: usr_models.User, storage: LocalStorage
):
    with pytest.raises(BadRequestError) as exc_info:
        await shared_services.upload(
            db_session, storage=storage, files=[], entity_id=test_user.id, kind=shared_models.AttachmentKind.USERS
        )
    assert exc_info.value.detail == "No files provided"


@pytest.mark.asyncio
async def test_attachments_require_admin(user_client: AsyncClient, test_user: usr_models.User):
    response = await user_client.get(f"{API}/users/{test_user.id}/attachments")

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_fetch_batch_without_ids_returns_empty(db_session: AsyncSession):
    assert await shared_services.fetch_batch(db_session, entity_ids=[], kind=shared_models.AttachmentKind.USERS) == {}


# =============================================================================
# 2. 삭제
# =============================================================================
@pytest.mark.asyncio
async def test_delete_attachments(admin_client: AsyncClient, test_user: usr_models.User, storage: LocalStorage):
    uploaded = await _upload(admin_client, "users", test_user.id, "a.txt", "b.txt")
    first, second = uploaded["attachments"]

    response = await admin_client.request("DELETE", f"{API}/attachments", json={"ids": [first["id"]]})

    assert response.status_code == 200
    assert response.json() == {"message": "Attachments deleted successfully", "count": 1}
    assert not (storage.base_dir / first["path_url"]).exists()
    assert (storage.base_dir / second["path_url"]).exists()

    listed = await admin_client.get(f"{API}/users/{test_user.id}/attachments")
    assert [attachment["id"] for attachment in listed.json()["attachments"]] == [second["id"]]

    again = await admin_client.request("DELETE", f"{API}/attachments", json={"ids": [first["id"]]})
    assert again.json()["count"] == 0


@pytest.mark.asyncio
async def test_delete_requires_ids(admin_client: AsyncClient):
    response = await admin_client.request("DELETE", f"{API}/attachments", json={"ids": []})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_storage_delete_failure_is_logged_not_raised(
    admin_client: AsyncClient, test_user: usr_models.User, storage: LocalStorage, caplog
):
    uploaded = await _upload(admin_client, "users", test_user.id, "gone.txt")
    attachment = uploaded["attachments"][0]
    (storage.base_dir / attachment["path_url"]).unlink()

    with caplog.at_level(logging.WARNING, logger="hrms.domains.shared.services"):
        response = await admin_client.request("DELETE", f"{API}/attachments", json={"ids": [attachment["id"]]})

    assert response.status_code == 200
    assert response.json()["count"] == 1
    assert any("storage delete failed" in record.getMessage() for record in caplog.records)


@pytest.mark.asyncio
async def test_deleting_owner_soft_deletes_its_attachments(
    admin_client: AsyncClient, db_session: AsyncSession, test_user: usr_models.User, storage: LocalStorage
):
    uploaded = await _upload(admin_client, "users", test_user.id, "cv.txt")
    path_url = uploaded["attachments"][0]["path_url"]

    response = await admin_client.delete(f"{API}/users/{test_user.id}")
    assert response.status_code == 200

    result = await db_session.execute(
        select(shared_models.Attachment).where(shared_models.Attachment.entity_id == str(test_user.id))
    )
    rows = list(result.scalars().all())
    assert len(rows) == 1
    assert rows[0].is_active is False
    # 소프트 삭제된 행이 계속 참조하므로 파일은 남겨 둡니다.
    assert (storage.base_dir / path_url).exists()


# =============================================================================
# 3. 파일명 / 메타데이터 경계
# =============================================================================
def _stored_files(storage: LocalStorage) -> list:
    if not storage.base_dir.exists():
        return []
    return list(storage.base_dir.iterdir())


async def _attachment_count(db: AsyncSession, entity_id) -> int:
    result = await db.execute(
        select(func.count()).select_from(shared_models.Attachment).where(
            shared_models.Attachment.entity_id == str(entity_id)
        )
    )
    return result.scalar_one()


def test_stored_name_fits_filesystem_limit():
    name = stored_name("a" * 300 + ".txt")

    assert len(name.encode()) <= MAX_FILENAME_BYTES
    assert name.endswith(".txt")


def test_stored_name_cuts_multibyte_names_on_character_boundary():
    stem = "급여명세서" * 40
    name = stored_name(stem + ".pdf")

    assert len(name.encode()) <= MAX_FILENAME_BYTES
    assert name.endswith(".pdf")
    # "<uuid>-" 접두사(37자) 뒤에는 잘리지 않은 문자만 남습니다.
    assert stem.startswith(name[37:-4])


def test_stored_name_drops_oversized_suffix():
    name = stored_name("r" * 300 + "." + "x" * 40)

    assert len(name.encode()) == MAX_FILENAME_BYTES
    assert name[37:] == "r" * (MAX_FILENAME_BYTES - 37)


@pytest.mark.asyncio
async def test_upload_long_filename_is_clipped(
    admin_client: AsyncClient, test_user: usr_models.User, storage: LocalStorage
):
    long_name = "a" * 300 + ".txt"

    body = await _upload(admin_client, "users", test_user.id, long_name)

    attachment = body["attachments"][0]
    assert len(attachment["name"]) == 255
    assert attachment["name"].endswith(".txt")
    assert attachment["extension"] == "txt"
    assert len(attachment["path_url"].encode()) <= MAX_FILENAME_BYTES
    assert (storage.base_dir / attachment["path_url"]).exists()


@pytest.mark.asyncio
async def test_upload_overlong_content_type_is_bad_request(
    admin_client: AsyncClient, db_session: AsyncSession, test_user: usr_models.User, storage: LocalStorage
):
    files = [
        ("files", ("ok.txt", b"fine", "text/plain")),
        ("files", ("odd.bin", b"odd", "application/" + "x" * 120)),
    ]

    response = await admin_client.post(f"{API}/users/{test_user.id}/attachments", files=files)

    assert response.status_code == 400
    assert response.json()["message"] == ["Invalid content type for file odd.bin"]
    assert _stored_files(storage) == []
    assert await _attachment_count(db_session, test_user.id) == 0


class _FailingStorage(LocalStorage):
    """특정 파일명 저장에서 OSError 를 내는 저장소."""

    async def save(self, name: str, content: bytes) -> str:
        if name == "bad.txt":
            raise OSError("No space left on device")
        return await super().save(name, content)


def _upload_file(name: str) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(f"content of {name}".encode()),
        filename=name,
        headers=Headers({"content-type": "text/plain"}),
    )


@pytest.mark.asyncio
async def test_partial_save_failure_removes_saved_files(db_session: AsyncSession, test_user: usr_models.User, tmp_path):
    failing = _FailingStorage(str(tmp_path / "failing"))
    entity_id = test_user.id
    files = [_upload_file("good-1.txt"), _upload_file("bad.txt"), _upload_file("good-2.txt")]

    with pytest.raises(OSError):
        await shared_services.upload(
            db_session, storage=failing, files=files, entity_id=entity_id, kind=shared_models.AttachmentKind.USERS
        )

    assert _stored_files(failing) == []
    assert await _attachment_count(db_session, entity_id) == 0
