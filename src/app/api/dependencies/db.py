"""Database session dependencies."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.app.core.db import SessionFactory, get_session


async def get_db_session() -> AsyncGenerator[AsyncSession]:
    """Get a request-scoped database session."""
    async with get_session() as session:
        yield session


def get_session_factory(request: Request) -> SessionFactory:
    """Session factory for work that runs after the request session closes."""
    return request.app.state.session_factory


DBSession = Annotated[AsyncSession, Depends(get_db_session)]
SessionFactoryDep = Annotated[SessionFactory, Depends(get_session_factory)]
