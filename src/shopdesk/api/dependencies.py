"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shopdesk.database import Database


def get_database(request: Request) -> Database:
    """The store client the application was started with."""
    return request.app.state.database


async def get_db_session(
    database: Annotated[Database, Depends(get_database)],
) -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async with database.session() as session:
        yield session


@dataclass(frozen=True)
class Caller:
    """Who is asking, as passed in the query string.

    None of this is authenticated; it only scopes what a listing returns.
    """

    shop_name: str | None
    user_role: str | None
    user_id: str | None


async def get_caller(
    shop_name: Annotated[str | None, Query(alias="shopName")] = None,
    user_role: Annotated[str | None, Query(alias="userRole")] = None,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
    shop_name_snake: Annotated[
        str | None, Query(alias="shop_name", include_in_schema=False)
    ] = None,
    user_role_snake: Annotated[
        str | None, Query(alias="user_role", include_in_schema=False)
    ] = None,
    user_id_snake: Annotated[str | None, Query(alias="user_id", include_in_schema=False)] = None,
) -> Caller:
    """Extract caller identity from query parameters."""
    return Caller(
        shop_name=shop_name or shop_name_snake,
        user_role=user_role or user_role_snake,
        user_id=user_id or user_id_snake,
    )


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
CallerInfo = Annotated[Caller, Depends(get_caller)]
