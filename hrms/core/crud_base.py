# hrms/core/crud_base.py

"""
공통 CRUD(Create, Read, Update, Delete) 작업을 위한 기본 클래스 모듈입니다.

- 모든 조회는 기본적으로 활성(is_active=true) 레코드로 한정되며, `unscoped=True`로 해제할 수 있습니다.
- 목록 조회는 선언적 필터 필드, 검색, 단일 키 정렬, 페이지네이션을 지원합니다.
- 삭제는 항상 소프트 삭제(한 번의 UPDATE)이며, 영향받은 행이 없으면 NotFoundError를 발생시킵니다.
- 쓰기 작업은 with_transaction 으로 커밋/롤백됩니다.
"""

import logging
from typing import Any, Dict, Generic, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import func, update
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from hrms.core.exceptions import BadRequestError, NotFoundError
from hrms.core.lifecycle import Lifecycle
from hrms.core.transaction import with_transaction
from hrms.utils.filters import FilterField, build_order_clause, build_search_clause, build_where_clause
from hrms.utils.pagination import ListParams, calculate_offset, get_pagination_metadata, get_pagination_params

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    모든 CRUD 작업에 대한 기본 클래스를 정의합니다.

    Args:
        model: SQLModel 테이블 클래스 (SoftDeleteMixin 포함)
        label: 오류 메시지에 쓰일 사람이 읽는 이름 (예: "asset tracking")
        filter_fields: 목록 조회에 적용할 FilterField 선언 목록
        search_fields: `search` 파라미터가 OR 로 검색할 컬럼 목록
        default_sort: sortBy 가 없거나 잘못된 경우의 정렬 컬럼
    """
    def __init__(
        self,
        model: Type[ModelType],
        *,
        label: str,
        filter_fields: Sequence[FilterField] = (),
        search_fields: Sequence[Any] = (),
        default_sort: str = "created_at",
    ):
        self.model = model
        self.label = label
        self.filter_fields = list(filter_fields)
        self.search_fields = list(search_fields)
        self.default_sort = default_sort

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------
    def _scope(self, query, unscoped: bool):
        if unscoped:
            return query
        return query.where(self.model.is_active.is_(True))

    async def get(
        self, db: AsyncSession, id: Any, *, unscoped: bool = False, options: Sequence[Any] = ()
    ) -> Optional[ModelType]:
        """ID를 기준으로 단일 레코드를 조회합니다."""
        query = self._scope(select(self.model).where(self.model.id == id), unscoped)
        if options:
            query = query.options(*options).execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.scalars().one_or_none()

    async def get_or_404(
        self, db: AsyncSession, id: Any, *, unscoped: bool = False, options: Sequence[Any] = ()
    ) -> ModelType:
        if id is None or id == "":
            raise BadRequestError(f"Invalid {self.label} ID")
        db_obj = await self.get(db, id, unscoped=unscoped, options=options)
        if db_obj is None:
            raise NotFoundError(f"{self.label.capitalize()} with ID {id} not found")
        return db_obj

    async def get_by_attribute(
        self,
        db: AsyncSession,
        *,
        attribute: str,
        value: Any,
        unscoped: bool = False,
        exclude_id: Any = None,
    ) -> Optional[ModelType]:
        """
        속성 값으로 첫 번째 레코드를 조회합니다. 중복 검사에 사용됩니다.
        exclude_id 를 주면 해당 레코드는 제외합니다 (수정 시 자기 자신 제외).
        """
        query = self._scope(select(self.model).where(getattr(self.model, attribute) == value), unscoped)
        if exclude_id is not None:
            query = query.where(self.model.id != exclude_id)
        result = await db.execute(query.limit(1))
        return result.scalars().first()

    async def get_filtered(
        self,
        db: AsyncSession,
        *,
        filters: Optional[Mapping[str, Any]] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        conditions: Sequence[Any] = (),
        options: Sequence[Any] = (),
        unscoped: bool = False,
    ) -> Tuple[List[ModelType], int]:
        """
        필터/검색/정렬/페이지네이션을 적용한 목록과 (필터 기준) 전체 건수를 반환합니다.
        page/limit 은 get_pagination_params 규칙으로 보정됩니다.
        """
        filters = dict(filters or {})
        page, limit = get_pagination_params(page, limit)

        where = [*conditions]
        # is_active 필터가 명시되면 그 값이 기본 활성 범위를 대신합니다.
        if not unscoped and filters.get("is_active") in (None, ""):
            where.append(self.model.is_active.is_(True))

        filter_clause = build_where_clause(filters, self.filter_fields)
        if filter_clause is not None:
            where.append(filter_clause)

        search_clause = build_search_clause(search, self.search_fields)
        if search_clause is not None:
            where.append(search_clause)

        count_query = select(func.count()).select_from(self.model)
        query = select(self.model)
        if where:
            count_query = count_query.where(*where)
            query = query.where(*where)

        total = (await db.execute(count_query)).scalar_one()

        query = (
            query.order_by(build_order_clause(self.model, sort_by, sort_order, default_sort=self.default_sort))
            .offset(calculate_offset(page, limit))
            .limit(limit)
        )
        if options:
            query = query.options(*options).execution_options(populate_existing=True)

        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def get_page(
        self,
        db: AsyncSession,
        *,
        params: ListParams,
        filters: Optional[Mapping[str, Any]] = None,
        conditions: Sequence[Any] = (),
        options: Sequence[Any] = (),
    ) -> Tuple[List[ModelType], Dict[str, Any]]:
        """
        목록 엔드포인트용 조회. (rows, {count, total, page, limit, totalPages}) 를 반환합니다.
        잘못된 요청/없음 오류는 그대로 전파하고,
        그 밖의 실패는 "Failed to retrieve <복수형>" BadRequestError 로 감쌉니다.
        """
        try:
            rows, total = await self.get_filtered(
                db,
                filters=filters,
                search=params.search,
                sort_by=params.sort_by,
                sort_order=params.sort_order,
                page=params.page,
                limit=params.limit,
                conditions=conditions,
                options=options,
            )
        except (BadRequestError, NotFoundError):
            raise
        except Exception as exc:
            logger.exception("list query failed", extra={"entity": self.model.__tablename__})
            raise BadRequestError(f"Failed to retrieve {self.label}s") from exc

        page, limit = get_pagination_params(params.page, params.limit)
        return rows, {"count": len(rows), **get_pagination_metadata(total, page, limit)}

    # -------------------------------------------------------------------------
    # 생성 / 수정 / 삭제
    # -------------------------------------------------------------------------
    async def create(
        self, db: AsyncSession, *, obj_in: CreateSchemaType, extra: Optional[Dict[str, Any]] = None
    ) -> ModelType:
        """새로운 레코드를 생성합니다."""
        async def _run(tx: AsyncSession) -> ModelType:
            db_obj = self.model.model_validate(obj_in, update=extra or {})
            tx.add(db_obj)
            await tx.flush()
            return db_obj

        db_obj = await with_transaction(db, _run)
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self, db: AsyncSession, *, db_obj: ModelType, obj_in: UpdateSchemaType | Dict[str, Any]
    ) -> ModelType:
        """
        기존 활성 레코드를 부분 수정합니다.
        명시되지 않은 필드는 유지되고, 명시적 None 은 해당 필드를 비웁니다.
        """
        update_data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        if not update_data:
            raise BadRequestError("No fields provided to update")

        async def _run(tx: AsyncSession) -> ModelType:
            for key, value in update_data.items():
                setattr(db_obj, key, value)
            tx.add(db_obj)
            await tx.flush()
            return db_obj

        db_obj = await with_transaction(db, _run)
        await db.refresh(db_obj)
        return db_obj

    async def soft_delete_in(self, tx: AsyncSession, *, id: Any) -> int:
        """
        트랜잭션 안에서 한 번의 UPDATE로 활성 레코드를 삭제 상태로 전환합니다.
        영향받은 행 수를 반환합니다 (커밋하지 않음).
        """
        statement = (
            update(self.model)
            .where(self.model.id == id, self.model.is_active.is_(True))
            .values(**Lifecycle.deleted().as_values())
        )
        result = await tx.execute(statement)
        return result.rowcount

    async def soft_delete(self, db: AsyncSession, *, id: Any) -> Any:
        """
        활성 레코드를 소프트 삭제합니다.
        이미 삭제되었거나 존재하지 않으면 NotFoundError를 발생시킵니다.
        """
        if id is None or id == "":
            raise BadRequestError(f"Invalid {self.label} ID")

        async def _run(tx: AsyncSession) -> int:
            affected = await self.soft_delete_in(tx, id=id)
            if affected == 0:
                raise NotFoundError(f"{self.label.capitalize()} with ID {id} not found")
            return affected

        await with_transaction(db, _run)
        logger.info("%s soft-deleted", self.label, extra={"entity": self.model.__tablename__, "entity_id": str(id)})
        return id
