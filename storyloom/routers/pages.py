from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from storyloom.database import get_db
from storyloom.models import User
from storyloom.schemas import ContributorRank, MessageRead, PageCreate, PageRead, PageUpdate
from storyloom.services import pages as page_service
from storyloom.utils import require_authenticated_user

router = APIRouter(tags=["pages"])


@router.post("/works/{work_id}/pages", response_model=PageRead, status_code=status.HTTP_201_CREATED)
async def create_page(
    work_id: int,
    payload: PageCreate,
    user: User = Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return await page_service.create(db, work_id, user.id, payload.content)


@router.get("/works/{work_id}/pages", response_model=List[PageRead])
async def list_pages(work_id: int, db: AsyncSession = Depends(get_db)):
    return await page_service.find_all(db, work_id)


# Literal segments must be registered before /{page_number}
@router.get("/works/{work_id}/pages/pending", response_model=List[PageRead])
async def list_pending_pages(
    work_id: int,
    user: User = Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return await page_service.get_pending_contributions(db, work_id, user.id)


@router.get("/works/{work_id}/pages/contributors", response_model=List[ContributorRank])
async def list_contributors(work_id: int, db: AsyncSession = Depends(get_db)):
    return await page_service.get_collaborators(db, work_id)


@router.get("/works/{work_id}/pages/{page_number}", response_model=PageRead)
async def get_page(work_id: int, page_number: int, db: AsyncSession = Depends(get_db)):
    return await page_service.find_one(db, work_id, page_number)


@router.patch("/pages/{page_id}", response_model=PageRead)
async def update_page(
    page_id: int,
    payload: PageUpdate,
    user: User = Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return await page_service.update_page(db, page_id, user.id, payload.content)


@router.delete("/pages/{page_id}", response_model=MessageRead)
async def delete_page(
    page_id: int,
    user: User = Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return await page_service.remove(db, page_id, user.id)


@router.post("/pages/{page_id}/approve", response_model=PageRead)
async def approve_page(
    page_id: int,
    user: User = Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return await page_service.approve_contribution(db, page_id, user.id)


@router.delete("/pages/{page_id}/reject", response_model=MessageRead)
async def reject_page(
    page_id: int,
    user: User = Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return await page_service.reject_contribution(db, page_id, user.id)


__all__ = ["router"]
