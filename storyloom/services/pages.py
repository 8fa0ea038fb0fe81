# services/pages.py
"""Page ledger: the ordered, approved pages of a work plus its pending queue.

Approved pages of a work are numbered densely from 1. Pending pages carry
no number until the owner approves them; deleting an approved page shifts
every later page down by one inside the same transaction.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storyloom.errors import (
    BadRequestError,
    ConflictError,
    ContentTooLongError,
    ForbiddenError,
    NotFoundError,
)
from storyloom.models import Page, PageStatus, User, Work
from storyloom.services.works import require_owner, require_work

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _check_length(work: Work, content: str) -> None:
    if len(content) > work.page_char_limit:
        raise ContentTooLongError(len(content), work.page_char_limit)


async def _next_page_number(db: AsyncSession, work_id: int) -> int:
    current = await db.scalar(
        select(func.max(Page.page_number)).where(
            Page.work_id == work_id, Page.status == PageStatus.approved
        )
    )
    return (current or 0) + 1


async def _get_page(db: AsyncSession, page_id: int, *, with_work: bool = False) -> Page | None:
    q = select(Page).where(Page.id == page_id).execution_options(populate_existing=True)
    if with_work:
        q = q.options(selectinload(Page.work))
    return (await db.execute(q)).scalars().first()


async def _require_page(db: AsyncSession, page_id: int, *, with_work: bool = False) -> Page:
    page = await _get_page(db, page_id, with_work=with_work)
    if not page:
        raise NotFoundError("Page not found", {"page_id": page_id})
    return page


async def _commit_numbered(db: AsyncSession, work_id: int, page_number: int) -> None:
    # (work_id, page_number) is unique: a concurrent max+1 loses here
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning("Page number race on work=%s number=%s", work_id, page_number)
        raise ConflictError(
            "Another page took this position; retry the request",
            {"work_id": work_id, "page_number": page_number},
        )


def _require_approved(page: Page) -> None:
    if page.status != PageStatus.approved:
        raise ForbiddenError("Only approved pages can be modified", {"page_id": page.id})


def _require_author(page: Page, acting_user_id: int) -> None:
    if page.author_id != acting_user_id:
        raise ForbiddenError("You are not the author of this page", {"page_id": page.id})


def _require_pending(page: Page) -> None:
    if page.status != PageStatus.pending:
        raise BadRequestError("Page is not pending approval", {"page_id": page.id})


# ---------------------------
# Contributions
# ---------------------------
async def create(db: AsyncSession, work_id: int, author_id: int, content: str) -> Page:
    """Add a page to ``work_id``.

    The owner's pages are approved immediately and take the next number.
    Anyone else may contribute while the work allows collaboration; those
    pages wait in the pending queue for the owner, even for approved
    collaborators.
    """
    work = await require_work(db, work_id)
    is_owner = work.author_id == author_id
    if not is_owner and not work.allow_collaboration:
        raise ForbiddenError("This work does not allow contributions", {"work_id": work_id})
    _check_length(work, content)

    if is_owner:
        number = await _next_page_number(db, work_id)
        page = Page(
            work_id=work_id,
            author_id=author_id,
            content=content,
            page_number=number,
            status=PageStatus.approved,
            approved_at=_now(),
        )
        db.add(page)
        await _commit_numbered(db, work_id, number)
        logger.info("Page %s created on work=%s as number %s", page.id, work_id, number)
    else:
        page = Page(
            work_id=work_id,
            author_id=author_id,
            content=content,
            page_number=None,
            status=PageStatus.pending,
            approved_at=None,
        )
        db.add(page)
        await db.commit()
        logger.info("Contribution %s queued on work=%s by user=%s", page.id, work_id, author_id)
    return await _get_page(db, page.id)


async def get_pending_contributions(db: AsyncSession, work_id: int, acting_user_id: int) -> list[Page]:
    work = await require_work(db, work_id)
    require_owner(work, acting_user_id)
    q = (
        select(Page)
        .where(Page.work_id == work_id, Page.status == PageStatus.pending)
        .order_by(Page.created_at.asc(), Page.id.asc())
        .execution_options(populate_existing=True)
    )
    return list((await db.execute(q)).scalars().all())


async def approve_contribution(db: AsyncSession, page_id: int, acting_user_id: int) -> Page:
    page = await _require_page(db, page_id, with_work=True)
    _require_pending(page)
    require_owner(page.work, acting_user_id)

    number = await _next_page_number(db, page.work_id)
    page.status = PageStatus.approved
    page.page_number = number
    page.approved_at = _now()
    await _commit_numbered(db, page.work_id, number)
    logger.info("Contribution %s approved on work=%s as number %s", page_id, page.work_id, number)
    return await _get_page(db, page_id)


async def reject_contribution(db: AsyncSession, page_id: int, acting_user_id: int) -> dict:
    page = await _require_page(db, page_id, with_work=True)
    _require_pending(page)
    require_owner(page.work, acting_user_id)

    work_id = page.work_id
    await db.delete(page)
    await db.commit()
    logger.info("Contribution %s rejected on work=%s", page_id, work_id)
    return {"message": "Contribution rejected successfully"}


# ---------------------------
# Reading
# ---------------------------
async def find_all(db: AsyncSession, work_id: int) -> list[Page]:
    await require_work(db, work_id)
    q = (
        select(Page)
        .where(Page.work_id == work_id, Page.status == PageStatus.approved)
        .order_by(Page.page_number.asc())
        .execution_options(populate_existing=True)
    )
    return list((await db.execute(q)).scalars().all())


async def find_one(db: AsyncSession, work_id: int, page_number: int) -> Page:
    q = (
        select(Page)
        .where(Page.work_id == work_id)
        .where(Page.page_number == page_number)
        .where(Page.status == PageStatus.approved)
        .execution_options(populate_existing=True)
    )
    page = (await db.execute(q)).scalars().first()
    if not page:
        raise NotFoundError("Page not found", {"work_id": work_id, "page_number": page_number})
    return page


async def get_collaborators(db: AsyncSession, work_id: int) -> list[dict]:
    """Authors of approved pages, most pages first, ties by username."""
    await require_work(db, work_id)
    page_count = func.count(Page.id).label("page_count")
    q = (
        select(User.id, User.username, page_count)
        .join(Page, Page.author_id == User.id)
        .where(Page.work_id == work_id, Page.status == PageStatus.approved)
        .group_by(User.id, User.username)
    )
    rows = (await db.execute(q)).all()
    # ties by code point, not by the database collation
    rows = sorted(rows, key=lambda row: (-row.page_count, row.username))
    return [
        {"user_id": row.id, "username": row.username, "page_count": row.page_count}
        for row in rows
    ]


# ---------------------------
# Author edits
# ---------------------------
async def update_page(db: AsyncSession, page_id: int, acting_user_id: int, content: str) -> Page:
    page = await _require_page(db, page_id, with_work=True)
    _require_approved(page)
    _require_author(page, acting_user_id)
    _check_length(page.work, content)

    page.content = content
    await db.commit()
    logger.info("Page %s updated by user=%s", page_id, acting_user_id)
    return await _get_page(db, page_id)


async def remove(db: AsyncSession, page_id: int, acting_user_id: int) -> dict:
    page = await _require_page(db, page_id)
    _require_approved(page)
    _require_author(page, acting_user_id)

    work_id, number = page.work_id, page.page_number
    later = (
        Page.work_id == work_id,
        Page.status == PageStatus.approved,
        Page.page_number > number,
    )
    try:
        await db.execute(delete(Page).where(Page.id == page_id))
        # Shift through negative numbers so the unique index never sees a
        # transient duplicate, whatever order the rows are visited in.
        shifted = await db.execute(
            update(Page)
            .where(*later)
            .values(page_number=-Page.page_number)
            .execution_options(synchronize_session=False)
        )
        await db.execute(
            update(Page)
            .where(Page.work_id == work_id, Page.page_number < 0)
            .values(page_number=-Page.page_number - 1)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Renumbering failed while deleting page %s on work=%s", page_id, work_id)
        raise

    logger.info(
        "Page %s (number %s) deleted on work=%s; %s later pages renumbered",
        page_id, number, work_id, shifted.rowcount,
    )
    return {"message": "Page deleted successfully"}
