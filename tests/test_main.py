# tests/test_main.py

"""
FastAPI 애플리케이션의 메인 엔드포인트에 대한 통합 테스트를 정의하는 모듈입니다.

- 애플리케이션의 루트 경로 (`/`) 응답을 테스트합니다.
- 데이터베이스 연결 헬스 체크 엔드포인트 (`/health-check`)를 테스트합니다.
- 공통 오류 응답 형식을 테스트합니다.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_read_root(client: AsyncClient):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to HRMS API. Visit /docs for interactive API documentation."}


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """
    헬스 체크 엔드포인트가 테스트 세션을 통해 SELECT 1 을 실행하는지 확인합니다.
    """
    response = await client.get("/health-check")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database_connection": "successful"}


@pytest.mark.asyncio
async def test_error_envelope_for_missing_token(client: AsyncClient):
    """
    토큰 없이 보호된 엔드포인트를 호출하면 공통 오류 형식의 401 응답을 받습니다.
    """
    response = await client.get("/api/v1/roles")

    assert response.status_code == 401
    body = response.json()
    assert body["statusCode"] == 401
    assert body["path"] == "/api/v1/roles"
    assert body["method"] == "GET"
    assert isinstance(body["message"], list)
    assert body["error"] == "Unauthorized"
    assert "timestamp" in body


@pytest.mark.asyncio
async def test_validation_error_envelope(admin_client: AsyncClient):
    """
    요청 본문 검증 실패는 400 과 필드별 메시지 목록으로 응답합니다.
    """
    response = await admin_client.post("/api/v1/roles", json={"name": "x"})

    assert response.status_code == 400
    body = response.json()
    assert body["statusCode"] == 400
    assert body["error"] == "Bad Request"
    assert any("name" in message for message in body["message"])
