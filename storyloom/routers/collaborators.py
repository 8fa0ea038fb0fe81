from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from storyloom.database import get_db
from storyloom.models import User
from storyloom.schemas import CollaboratorRead, MessageRead
from storyloom.services import collaborators as collaborator_service
from storyloom.utils import require_authenticated_user

router = APIRouter(prefix="/works/{work_id}/collaborators", tags=["collaborators"])


@router.post("/request", response_model=CollaboratorRead, status_code=status.HTTP_201_CREATED)
async def request_collaboration(
    work_id: int,
    user: User = Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return await collaborator_service.request_collaboration(db, work_id, user.id)


@router.get("", response_model=List[CollaboratorRead])
async def list_collaborators(work_id: int, db: AsyncSession = Depends(get_db)):
    return await collaborator_service.get_collaborators(db, work_id)


@router.get("/pending", response_model=List[CollaboratorRead])
async def list_pending_requests(
    work_id: int,
    user: User = Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return await collaborator_service.get_pending_requests(db, work_id, user.id)


@router.post("/{user_id}/approve", response_model=CollaboratorRead)
async def approve_collaborator(
    work_id: int,
    user_id: int,
    user: User = Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return await collaborator_service.approve_collaborator(db, work_id, user_id, user.id)


@router.delete("/{user_id}", response_model=MessageRead)
async def remove_collaborator(
    work_id: int,
    user_id: int,
    user: User = Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return await collaborator_service.remove_collaborator(db, work_id, user_id, user.id)


__all__ = ["router"]
