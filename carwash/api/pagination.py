"""Page/per_page handling for list endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import Query
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from carwash.config import settings
from carwash.schemas.common import PageMeta


@dataclass(frozen=True)
class PageParams:
    page: int
    per_page: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


def page_params(
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.default_per_page, ge=1, le=settings.max_per_page),
) -> PageParams:
    """FastAPI dependency for pagination query params."""
    return PageParams(page=page, per_page=per_page)


async def paginate(
    db: AsyncSession, stmt: Select, params: PageParams
) -> tuple[list[Any], PageMeta]:
    """Run a select for one page and count the full result.

    Returns:
        (rows on the page, page metadata)
    """
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = (await db.execute(count_stmt)).scalar_one()

    result = await db.execute(stmt.offset(params.offset).limit(params.per_page))
    items = list(result.scalars().all())

    last_page = max(1, -(-total // params.per_page))
    return items, PageMeta(
        current_page=params.page,
        last_page=last_page,
        per_page=params.per_page,
        total=total,
    )
