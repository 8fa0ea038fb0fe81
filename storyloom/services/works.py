# services/works.py
# Read-only view of works for the collaboration and page services.
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storyloom.errors import ForbiddenError, NotFoundError
from storyloom.models import Work


async def get_work(db: AsyncSession, work_id: int) -> Optional[Work]:
    q = select(Work).where(Work.id == work_id).execution_options(populate_existing=True)
    return (await db.execute(q)).scalars().first()


async def require_work(db: AsyncSession, work_id: int) -> Work:
    work = await get_work(db, work_id)
    if not work:
        raise NotFoundError("Work not found", {"work_id": work_id})
    return work


def require_owner(work: Work, acting_user_id: int) -> None:
    if work.author_id != acting_user_id:
        raise ForbiddenError(
            "Only the work owner can perform this action",
            {"work_id": work.id, "user_id": acting_user_id},
        )
