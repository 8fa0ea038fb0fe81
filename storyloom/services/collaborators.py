# services/collaborators.py
"""Collaboration registry: per-(work, user) request and approval state.

A row with ``approved_at`` NULL is a pending request; a stamped row is an
approved collaborator. Removal is a hard delete from either state.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storyloom.errors import ConflictError, ForbiddenError, NotFoundError
from storyloom.models import WorkCollaborator
from storyloom.services.works import require_owner, require_work

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def _get_row(db: AsyncSession, work_id: int, user_id: int) -> WorkCollaborator | None:
    q = (
        select(WorkCollaborator)
        .where(WorkCollaborator.work_id == work_id, WorkCollaborator.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return (await db.execute(q)).scalars().first()


async def request_collaboration(db: AsyncSession, work_id: int, user_id: int) -> WorkCollaborator:
    work = await require_work(db, work_id)
    if not work.allow_collaboration:
        raise ForbiddenError("Collaboration is not allowed for this work", {"work_id": work_id})
    if work.author_id == user_id:
        raise ForbiddenError("You cannot collaborate on your own work", {"work_id": work_id})

    existing = await _get_row(db, work_id, user_id)
    if existing:
        if existing.is_approved:
            raise ForbiddenError("You are already a collaborator on this work", {"work_id": work_id})
        raise ConflictError("You already have a pending collaboration request", {"work_id": work_id})

    row = WorkCollaborator(work_id=work_id, user_id=user_id, approved_at=None)
    db.add(row)
    try:
        await db.commit()
    except IntegrityError:
        # a concurrent request for the same pair won the insert
        await db.rollback()
        raise ConflictError("You already have a pending collaboration request", {"work_id": work_id})

    logger.info("Collaboration requested: work=%s user=%s", work_id, user_id)
    return await _get_row(db, work_id, user_id)


async def approve_collaborator(
    db: AsyncSession, work_id: int, user_id: int, acting_user_id: int
) -> WorkCollaborator:
    work = await require_work(db, work_id)
    require_owner(work, acting_user_id)

    row = await _get_row(db, work_id, user_id)
    if not row:
        raise NotFoundError("Collaboration request not found", {"work_id": work_id, "user_id": user_id})
    if row.is_approved:
        raise ConflictError("Collaboration request is already approved", {"work_id": work_id, "user_id": user_id})

    row.approved_at = _now()
    await db.commit()
    logger.info("Collaborator approved: work=%s user=%s by=%s", work_id, user_id, acting_user_id)
    return await _get_row(db, work_id, user_id)


async def remove_collaborator(db: AsyncSession, work_id: int, user_id: int, acting_user_id: int) -> dict:
    work = await require_work(db, work_id)
    require_owner(work, acting_user_id)

    row = await _get_row(db, work_id, user_id)
    if not row:
        raise NotFoundError("Collaborator not found", {"work_id": work_id, "user_id": user_id})

    was_approved = row.is_approved
    await db.delete(row)
    await db.commit()
    logger.info(
        "Collaborator removed: work=%s user=%s (%s) by=%s",
        work_id, user_id, "approved" if was_approved else "pending", acting_user_id,
    )
    return {"message": "Collaborator removed successfully"}


async def get_collaborators(db: AsyncSession, work_id: int) -> list[WorkCollaborator]:
    q = (
        select(WorkCollaborator)
        .where(WorkCollaborator.work_id == work_id, WorkCollaborator.approved_at.is_not(None))
        .order_by(WorkCollaborator.id.asc())
        .execution_options(populate_existing=True)
    )
    return list((await db.execute(q)).scalars().all())


async def get_pending_requests(db: AsyncSession, work_id: int, acting_user_id: int) -> list[WorkCollaborator]:
    work = await require_work(db, work_id)
    require_owner(work, acting_user_id)
    q = (
        select(WorkCollaborator)
        .where(WorkCollaborator.work_id == work_id, WorkCollaborator.approved_at.is_(None))
        .order_by(WorkCollaborator.id.asc())
        .execution_options(populate_existing=True)
    )
    return list((await db.execute(q)).scalars().all())
