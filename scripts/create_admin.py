# flake8: noqa
# scripts/create_admin.py

import asyncio
from datetime import date

import typer
from sqlmodel.ext.asyncio.session import AsyncSession

from hrms.core.database import create_db_and_tables, engine, get_async_session_context
from hrms.core.security import ADMIN_ROLE
from hrms.domains.usr import crud as usr_crud
from hrms.domains.usr import schemas as usr_schemas
from hrms.domains.usr.models import WorkLocation

cli = typer.Typer()


async def create_admin_user(db: AsyncSession, user_in: usr_schemas.UserCreate) -> None:
    """
    기본 역할(admin, user)을 보장한 뒤 관리자 사용자를 생성하는 비동기 함수
    """
    roles = await usr_crud.role.ensure_default_roles(db)
    admin_role = next(db_role for db_role in roles if db_role.name == ADMIN_ROLE)

    if await usr_crud.user.get_by_username(db, username=user_in.username):
        print(f"오류: 이미 존재하는 사용자명(이메일)입니다: {user_in.username}")
        raise typer.Exit(code=1)

    await usr_crud.user.create(db, obj_in=user_in, role=admin_role, password=user_in.password)
    print(f"관리자 계정이 성공적으로 생성되었습니다: {user_in.username} ({user_in.user_number})")


@cli.command()
def main(
    email: str = typer.Option(
        ..., '--email', '-e',
        prompt="관리자 이메일을 입력하세요",
        help="로그인 시 사용할 이메일(username)입니다."
    ),
    password: str = typer.Option(
        ..., '--password', '-p',
        prompt="관리자 비밀번호를 입력하세요",
        hide_input=True,
        confirmation_prompt=True,
        help="생성할 관리자 계정의 비밀번호입니다. (최소 6자 이상)"
    ),
    user_number: str = typer.Option(
        "ADMIN001", '--user-number', '-u',
        help="관리자의 사번입니다."
    ),
    name: str = typer.Option(
        "Admin", '--name', '-n',
        prompt="관리자 이름을 입력하세요",
        help="관리자의 이름입니다."
    ),
    create_tables: bool = typer.Option(
        False, '--create-tables',
        help="마이그레이션 없이 개발 DB를 부트스트랩할 때 누락된 테이블을 먼저 생성합니다."
    ),
):
    """
    HRMS 애플리케이션을 위한 새로운 관리자(admin 역할) 계정을 생성합니다.
    """
    if len(password) < 6:
        print("오류: 비밀번호는 최소 6자 이상이어야 합니다.")
        raise typer.Abort()

    user_data = usr_schemas.UserCreate(
        user_number=user_number,
        username=email,
        password=password,
        name=name,
        address="-",
        work_location=WorkLocation.IN_OFFICE,
        join_date=date.today(),
        role=ADMIN_ROLE,
    )

    async def run_creation():
        try:
            if create_tables:
                await create_db_and_tables()
            async with get_async_session_context() as db:
                await create_admin_user(db=db, user_in=user_data)
        finally:
            await engine.dispose()

    print("관리자 계정 생성을 시작합니다...")
    asyncio.run(run_creation())


if __name__ == "__main__":
    cli()
