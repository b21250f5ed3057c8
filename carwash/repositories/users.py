"""User lookups shared by the user and branch routers."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carwash.models.user import User

EMAIL_TAKEN = "The email has already been taken"


async def email_taken(db: AsyncSession, email: str, exclude_id: Optional[int] = None) -> bool:
    # Deleted accounts still hold their address in the unique column.
    stmt = select(User.id).where(User.email == email).execution_options(include_deleted=True)
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    result = await db.execute(stmt.limit(1))
    return result.scalar_one_or_none() is not None
