# hrms/utils/storage.py

"""
첨부파일 바이트를 저장하는 외부 저장소 어댑터입니다.

DB 에는 저장소가 돌려준 상대 경로(path_url)만 기록합니다.
로컬 디스크 외의 백엔드(오브젝트 스토리지 등)는 같은 프로토콜을 구현해 교체할 수 있습니다.
"""

import uuid
from pathlib import Path
from typing import Protocol

import aiofiles
import aiofiles.os

from hrms.core.config import settings


class StorageBackend(Protocol):
    async def save(self, name: str, content: bytes) -> str:
        """바이트를 저장하고 상대 경로를 반환합니다."""
        ...

    async def delete(self, path: str) -> None:
        ...


# 대부분의 파일시스템이 허용하는 파일명 최대 바이트 수
MAX_FILENAME_BYTES = 255
MAX_SUFFIX_BYTES = 16


def stored_name(name: str) -> str:
    """
    `<uuid>-<원본파일명>` 형태의 저장 파일명을 만듭니다.
    파일명 한도를 넘으면 확장자는 유지하고 이름 부분을 UTF-8 바이트 기준으로 자릅니다.
    """
    base = Path(name).name or "file"
    suffix = Path(base).suffix
    if len(suffix.encode()) > MAX_SUFFIX_BYTES:
        suffix = ""
    stem = base[: len(base) - len(suffix)] if suffix else base
    prefix = f"{uuid.uuid4()}-"
    budget = MAX_FILENAME_BYTES - len(prefix) - len(suffix.encode())
    stem = stem.encode()[:budget].decode("utf-8", errors="ignore")
    return f"{prefix}{stem}{suffix}"


class LocalStorage:
    """UPLOAD_DIR 아래에 stored_name() 규칙의 파일명으로 저장하는 로컬 디스크 백엔드."""

    def __init__(self, base_dir: str):
        self.base_dir = Path(base_dir)

    def _resolve(self, path: str) -> Path:
        # 디렉토리 탈출을 막기 위해 파일명 부분만 사용합니다.
        return self.base_dir / Path(path).name

    async def save(self, name: str, content: bytes) -> str:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        safe_name = stored_name(name)
        async with aiofiles.open(self._resolve(safe_name), "wb") as f:
            await f.write(content)
        return safe_name

    async def delete(self, path: str) -> None:
        await aiofiles.os.remove(self._resolve(path))


def get_storage() -> StorageBackend:
    """
    FastAPI 의존성. settings 를 런타임에 참조하므로 테스트에서 UPLOAD_DIR 을 바꿔도 반영됩니다.
    """
    return LocalStorage(settings.UPLOAD_DIR)
