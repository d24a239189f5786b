# hrms/core/transaction.py

"""
트랜잭션 단위 작업(Unit of Work) 래퍼 모듈입니다.

`with_transaction(db, run)`은 `run(db)`을 실행하고,
- 정상 반환 시 커밋하고 결과를 돌려주며,
- 예외 발생 시 롤백을 시도한 뒤 원래 예외를 그대로 다시 발생시킵니다.
  (롤백 중 발생한 오류는 로그만 남기고 삼킵니다. 드라이버가 이미 트랜잭션을 중단한 경우 등)

원자성이 필요한 모든 쓰기 작업은 `run`에 전달된 세션 핸들을 사용해야 합니다.
"""

import logging
from typing import Awaitable, Callable, TypeVar

from sqlmodel.ext.asyncio.session import AsyncSession

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_transaction(db: AsyncSession, run: Callable[[AsyncSession], Awaitable[T]]) -> T:
    try:
        result = await run(db)
        await db.commit()
        return result
    except Exception as exc:
        try:
            await db.rollback()
        except Exception as rollback_exc:  # noqa: BLE001
            logger.warning(
                "rollback failed after %s: %s", type(exc).__name__, rollback_exc,
            )
        raise
