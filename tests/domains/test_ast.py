# tests/domains/test_ast.py

"""
'ast' 도메인 (자산, 자산 배정 이력) 관련 API 엔드포인트에 대한 통합 테스트 모듈입니다.
"""

import uuid
from datetime import UTC, datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from hrms.domains.ast import models as ast_models
from hrms.domains.usr import models as usr_models
from hrms.utils.storage import LocalStorage

API = "/api/v1"

LAPTOP = {
    "label": "Laptop-001",
    "type": "Laptop",
    "asset_type": "laptop",
    "model": "ThinkPad X1",
    "serial_number": "SN-LAP-001",
    "ram": "32GB",
    "status": "Active",
    "laptop_processor": "Intel i7",
    "laptop_ssd": "1TB",
}

MOBILE = {
    "label": "Mobile-007",
    "type": "Mobile",
    "asset_type": "mobile",
    "model": "Pixel 8",
    "serial_number": "SN-MOB-007",
    "status": "Inactive",
    "mobile_imei_1": "356938035643809",
}


async def _create_asset(client: AsyncClient, payload: dict) -> dict:
    response = await client.post(f"{API}/assets", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["asset"]


async def _create_tracking(client: AsyncClient, payload: dict) -> dict:
    response = await client.post(f"{API}/asset-tracking", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["assetTracking"]


# =============================================================================
# 1. 자산 (Asset) 관리 엔드포인트 테스트
# =============================================================================
@pytest.mark.asyncio
async def test_create_and_read_asset(admin_client: AsyncClient):
    asset = await _create_asset(admin_client, LAPTOP)

    assert asset["label"] == "Laptop-001"
    assert asset["asset_type"] == "laptop"
    assert asset["status"] == "Active"
    assert asset["attachments"] == []

    response = await admin_client.get(f"{API}/assets/{asset['id']}")
    assert response.status_code == 200
    assert response.json()["message"] == "Asset retrieved successfully"
    assert response.json()["asset"]["laptop_processor"] == "Intel i7"


@pytest.mark.asyncio
async def test_create_asset_rejects_unknown_enum(admin_client: AsyncClient):
    response = await admin_client.post(f"{API}/assets", json={**LAPTOP, "asset_type": "tablet"})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_assets_filters_and_search(admin_client: AsyncClient):
    await _create_asset(admin_client, LAPTOP)
    await _create_asset(admin_client, MOBILE)

    async def _labels(**params):
        response = await admin_client.get(f"{API}/assets", params=params)
        assert response.status_code == 200, response.text
        return sorted(asset["label"] for asset in response.json()["assets"])

    assert await _labels() == ["Laptop-001", "Mobile-007"]
    assert await _labels(asset_type="mobile") == ["Mobile-007"]
    assert await _labels(status="Active") == ["Laptop-001"]
    assert await _labels(model="thinkpad") == ["Laptop-001"]
    assert await _labels(search="3569380") == ["Mobile-007"]
    assert await _labels(search="inactive") == ["Mobile-007"]


@pytest.mark.asyncio
async def test_list_assets_sorting(admin_client: AsyncClient):
    await _create_asset(admin_client, LAPTOP)
    await _create_asset(admin_client, MOBILE)

    ascending = await admin_client.get(f"{API}/assets", params={"sortBy": "serialNumber", "sortOrder": "ASC"})
    descending = await admin_client.get(f"{API}/assets", params={"sortBy": "serial_number", "sortOrder": "desc"})

    assert [asset["serial_number"] for asset in ascending.json()["assets"]] == ["SN-LAP-001", "SN-MOB-007"]
    assert [asset["serial_number"] for asset in descending.json()["assets"]] == ["SN-MOB-007", "SN-LAP-001"]


@pytest.mark.asyncio
async def test_update_asset_partial(admin_client: AsyncClient):
    asset = await _create_asset(admin_client, LAPTOP)

    response = await admin_client.patch(f"{API}/assets/{asset['id']}", json={"status": "Inactive", "ram": None})

    assert response.status_code == 200
    updated = response.json()["asset"]
    assert response.json()["message"] == "Asset updated successfully"
    assert updated["status"] == "Inactive"
    assert updated["ram"] is None
    assert updated["model"] == "ThinkPad X1"


@pytest.mark.asyncio
async def test_delete_asset(admin_client: AsyncClient):
    asset = await _create_asset(admin_client, LAPTOP)

    response = await admin_client.delete(f"{API}/assets/{asset['id']}")
    assert response.json() == {"message": "Asset deleted successfully", "assetId": asset["id"]}

    assert (await admin_client.get(f"{API}/assets/{asset['id']}")).status_code == 404
    assert (await admin_client.delete(f"{API}/assets/{asset['id']}")).status_code == 404

    patched = await admin_client.patch(f"{API}/assets/{asset['id']}", json={"status": "Inactive"})
    assert patched.status_code == 404
    assert patched.json()["message"] == [f"Asset with ID {asset['id']} not found"]


# =============================================================================
# 2. 자산 배정 이력 (AssetTracking) 엔드포인트 테스트
# =============================================================================
@pytest.mark.asyncio
async def test_create_tracking_round_trips_timestamp(admin_client: AsyncClient, test_user: usr_models.User):
    asset = await _create_asset(admin_client, LAPTOP)

    created = await _create_tracking(
        admin_client,
        {"asset_id": asset["id"], "user_id": str(test_user.id), "assigned_at": "2025-01-01T00:00:00Z"},
    )
    fetched = await admin_client.get(f"{API}/asset-tracking/{created['id']}")

    assert fetched.status_code == 200
    tracking = fetched.json()["assetTracking"]
    assert fetched.json()["message"] == "Asset tracking retrieved successfully"
    assert datetime.fromisoformat(tracking["assigned_at"]) == datetime(2025, 1, 1, tzinfo=UTC)
    assert tracking["removed_at"] is None
    assert tracking["asset"]["serial_number"] == "SN-LAP-001"
    assert tracking["user"]["user_number"] == "EMP001"


@pytest.mark.asyncio
async def test_create_tracking_defaults_assigned_at_to_now(admin_client: AsyncClient, test_user: usr_models.User):
    asset = await _create_asset(admin_client, LAPTOP)
    before = datetime.now(UTC)

    created = await _create_tracking(admin_client, {"asset_id": asset["id"], "user_id": str(test_user.id)})

    assigned_at = datetime.fromisoformat(created["assigned_at"])
    assert assigned_at.tzinfo is not None
    assert assigned_at >= before.replace(microsecond=0)


@pytest.mark.asyncio
async def test_create_tracking_with_unknown_asset_is_integrity_error(
    admin_client: AsyncClient, test_user: usr_models.User
):
    response = await admin_client.post(
        f"{API}/asset-tracking", json={"asset_id": str(uuid.uuid4()), "user_id": str(test_user.id)}
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_same_asset_may_have_overlapping_open_assignments(
    admin_client: AsyncClient, test_user: usr_models.User, test_admin_user: usr_models.User
):
    asset = await _create_asset(admin_client, LAPTOP)

    await _create_tracking(admin_client, {"asset_id": asset["id"], "user_id": str(test_user.id)})
    await _create_tracking(admin_client, {"asset_id": asset["id"], "user_id": str(test_admin_user.id)})

    response = await admin_client.get(f"{API}/asset-tracking", params={"asset_id": asset["id"], "activeOnly": "true"})
    assert response.json()["total"] == 2


@pytest.mark.asyncio
async def test_returned_asset_leaves_active_only_view(admin_client: AsyncClient, test_user: usr_models.User):
    asset = await _create_asset(admin_client, LAPTOP)
    tracking = await _create_tracking(admin_client, {"asset_id": asset["id"], "user_id": str(test_user.id)})

    returned = await admin_client.patch(
        f"{API}/asset-tracking/{tracking['id']}", json={"removed_at": datetime.now(UTC).isoformat()}
    )
    assert returned.status_code == 200
    assert returned.json()["message"] == "Asset tracking updated successfully"
    assert returned.json()["assetTracking"]["removed_at"] is not None

    active_only = await admin_client.get(f"{API}/asset-tracking", params={"activeOnly": "true"})
    everything = await admin_client.get(f"{API}/asset-tracking")

    assert active_only.json()["assetTrackings"] == []
    assert [row["id"] for row in everything.json()["assetTrackings"]] == [tracking["id"]]
    assert everything.json()["message"] == "Asset trackings retrieved successfully"


@pytest.mark.asyncio
async def test_deleted_tracking_hidden_from_both_views(admin_client: AsyncClient, test_user: usr_models.User):
    asset = await _create_asset(admin_client, LAPTOP)
    tracking = await _create_tracking(admin_client, {"asset_id": asset["id"], "user_id": str(test_user.id)})

    deleted = await admin_client.delete(f"{API}/asset-tracking/{tracking['id']}")
    assert deleted.json() == {"message": "Asset tracking deleted successfully", "assetTrackingId": tracking["id"]}

    for params in ({}, {"activeOnly": "true"}):
        response = await admin_client.get(f"{API}/asset-tracking", params=params)
        assert response.json()["total"] == 0

    missing = await admin_client.get(f"{API}/asset-tracking/{tracking['id']}")
    assert missing.status_code == 404
    assert missing.json()["message"] == [f"Asset tracking with ID {tracking['id']} not found"]

    patched = await admin_client.patch(
        f"{API}/asset-tracking/{tracking['id']}", json={"removed_at": "2025-01-01T00:00:00Z"}
    )
    assert patched.status_code == 404


@pytest.mark.asyncio
async def test_tracking_keeps_deleted_asset_summary(admin_client: AsyncClient, test_user: usr_models.User):
    asset = await _create_asset(admin_client, LAPTOP)
    tracking = await _create_tracking(admin_client, {"asset_id": asset["id"], "user_id": str(test_user.id)})

    await admin_client.delete(f"{API}/assets/{asset['id']}")

    response = await admin_client.get(f"{API}/asset-tracking/{tracking['id']}")
    assert response.status_code == 200
    assert response.json()["assetTracking"]["asset"]["is_active"] is False


@pytest.mark.asyncio
async def test_tracking_filters_by_user_and_assigned_range(
    admin_client: AsyncClient, test_user: usr_models.User, test_admin_user: usr_models.User
):
    asset = await _create_asset(admin_client, LAPTOP)
    january = await _create_tracking(
        admin_client,
        {"asset_id": asset["id"], "user_id": str(test_user.id), "assigned_at": "2025-01-15T09:30:00Z"},
    )
    await _create_tracking(
        admin_client,
        {"asset_id": asset["id"], "user_id": str(test_admin_user.id), "assigned_at": "2025-03-01T00:00:00Z"},
    )

    by_user = await admin_client.get(f"{API}/asset-tracking", params={"user_id": str(test_user.id)})
    by_range = await admin_client.get(
        f"{API}/asset-tracking", params={"assignedFrom": "2025-01-15", "assignedTo": "2025-01-15"}
    )

    assert [row["id"] for row in by_user.json()["assetTrackings"]] == [january["id"]]
    assert [row["id"] for row in by_range.json()["assetTrackings"]] == [january["id"]]


@pytest.mark.asyncio
async def test_tracking_update_clears_removed_at_with_blank(admin_client: AsyncClient, test_user: usr_models.User):
    asset = await _create_asset(admin_client, LAPTOP)
    tracking = await _create_tracking(
        admin_client,
        {"asset_id": asset["id"], "user_id": str(test_user.id), "removed_at": "2025-02-01T00:00:00Z"},
    )

    response = await admin_client.patch(f"{API}/asset-tracking/{tracking['id']}", json={"removed_at": ""})

    assert response.status_code == 200
    assert response.json()["assetTracking"]["removed_at"] is None


@pytest.mark.asyncio
async def test_tracking_invalid_id(admin_client: AsyncClient):
    response = await admin_client.get(f"{API}/asset-tracking/not-a-uuid")

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_assets_accepts_slash_dates(admin_client: AsyncClient):
    await _create_asset(admin_client, LAPTOP)
    today = datetime.now(UTC)
    tomorrow = today + timedelta(days=1)

    included = await admin_client.get(f"{API}/assets", params={"createdFrom": today.strftime("%Y/%m/%d")})
    excluded = await admin_client.get(f"{API}/assets", params={"createdFrom": tomorrow.strftime("%Y/%m/%d")})
    invalid = await admin_client.get(f"{API}/assets", params={"createdFrom": "not-a-date"})

    assert included.status_code == 200
    assert [asset["label"] for asset in included.json()["assets"]] == ["Laptop-001"]
    assert excluded.json()["assets"] == []
    assert invalid.status_code == 400


# =============================================================================
# 3. 파일을 포함한 자산 등록 (multipart)
# =============================================================================
def _asset_files(*names: str) -> list:
    return [("files", (name, f"content of {name}".encode(), "text/plain")) for name in names]


@pytest.mark.asyncio
async def test_create_asset_with_files(admin_client: AsyncClient, storage: LocalStorage):
    response = await admin_client.post(
        f"{API}/assets",
        data={"label": "Laptop-MP", "asset_type": "laptop", "status": "Active"},
        files=_asset_files("invoice.txt", "warranty.txt"),
    )

    assert response.status_code == 201, response.text
    asset = response.json()["asset"]
    assert asset["label"] == "Laptop-MP"
    assert asset["asset_type"] == "laptop"
    assert sorted(attachment["name"] for attachment in asset["attachments"]) == ["invoice.txt", "warranty.txt"]
    for attachment in asset["attachments"]:
        assert attachment["entity_type"] == "assets"
        assert (storage.base_dir / attachment["path_url"]).exists()


@pytest.mark.asyncio
async def test_create_asset_multipart_without_files(admin_client: AsyncClient):
    response = await admin_client.post(
        f"{API}/assets", data={"label": "Mobile-MP"}, files={"note": ("note.txt", b"ignored", "text/plain")}
    )

    assert response.status_code == 201, response.text
    assert response.json()["asset"]["attachments"] == []


@pytest.mark.asyncio
async def test_create_asset_multipart_validation(admin_client: AsyncClient):
    response = await admin_client.post(
        f"{API}/assets", data={"label": "Laptop-MP", "asset_type": "tablet"}, files=_asset_files("a.txt")
    )

    assert response.status_code == 400
    assert "asset_type" in " ".join(response.json()["message"])


@pytest.mark.asyncio
async def test_create_asset_too_many_files_creates_nothing(
    admin_client: AsyncClient, db_session: AsyncSession, storage: LocalStorage
):
    names = [f"file-{index}.txt" for index in range(11)]

    response = await admin_client.post(f"{API}/assets", data={"label": "Laptop-MP"}, files=_asset_files(*names))

    assert response.status_code == 400
    assert response.json()["message"] == ["Too many files (max 10)"]
    result = await db_session.execute(select(ast_models.Asset).where(ast_models.Asset.label == "Laptop-MP"))
    assert result.scalars().all() == []
    assert not storage.base_dir.exists() or not any(storage.base_dir.iterdir())


@pytest.mark.asyncio
async def test_create_asset_upload_failure_rolls_back_asset(
    admin_client: AsyncClient, db_session: AsyncSession, storage: LocalStorage
):
    files = [("files", ("odd.bin", b"odd", "application/" + "x" * 120))]

    response = await admin_client.post(f"{API}/assets", data={"label": "Laptop-MP"}, files=files)

    assert response.status_code == 400
    assert (await admin_client.get(f"{API}/assets")).json()["assets"] == []
    result = await db_session.execute(select(ast_models.Asset).where(ast_models.Asset.label == "Laptop-MP"))
    rows = list(result.scalars().all())
    assert len(rows) == 1
    assert rows[0].is_active is False


@pytest.mark.asyncio
async def test_create_asset_invalid_json_is_bad_request(admin_client: AsyncClient):
    response = await admin_client.post(
        f"{API}/assets", content=b"{not json", headers={"content-type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["message"] == ["Invalid JSON body"]
