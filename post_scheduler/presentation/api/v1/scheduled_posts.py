from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, status

from ....application.dtos import (
    CancelResultDTO,
    PublishedPostResponseDTO,
    ScheduledPostResponseDTO,
    SchedulePostDTO,
    ScheduleResultDTO,
    UpdateScheduledPostDTO,
)
from ....application.services import ScheduleCoordinator
from ...middleware import AuthenticatedUser, require_auth
from ..dependencies import get_schedule_coordinator

router = APIRouter(prefix="/scheduled-posts", tags=["scheduled-posts"])


@router.post(
    "/",
    response_model=ScheduleResultDTO,
    status_code=status.HTTP_201_CREATED,
    summary="Schedule a post",
    description="Schedule a post for publication at a future time.",
)
async def schedule_post(
    request: SchedulePostDTO,
    user: Annotated[AuthenticatedUser, Depends(require_auth)],
    coordinator: ScheduleCoordinator = Depends(get_schedule_coordinator),
    idempotency_key: Annotated[UUID | None, Header()] = None,
) -> ScheduleResultDTO:
    """Schedule a post. Retries carrying the same Idempotency-Key reuse its id."""
    record_id = str(idempotency_key) if idempotency_key else None
    return await coordinator.schedule(user.user_id, request, record_id=record_id)


@router.get(
    "/",
    response_model=list[ScheduledPostResponseDTO],
    summary="List pending posts",
)
async def list_scheduled_posts(
    user: Annotated[AuthenticatedUser, Depends(require_auth)],
    coordinator: ScheduleCoordinator = Depends(get_schedule_coordinator),
) -> list[ScheduledPostResponseDTO]:
    """Pending posts of the caller, earliest first."""
    return await coordinator.list_scheduled(user.user_id)


@router.get(
    "/published",
    response_model=list[PublishedPostResponseDTO],
    summary="List published posts",
)
async def list_published_posts(
    user: Annotated[AuthenticatedUser, Depends(require_auth)],
    coordinator: ScheduleCoordinator = Depends(get_schedule_coordinator),
    limit: Annotated[int, Query(ge=1, le=50)] = 20,
    before: datetime | None = None,
) -> list[PublishedPostResponseDTO]:
    return await coordinator.list_published(user.user_id, limit=limit, before=before)


@router.put(
    "/{post_id}",
    response_model=ScheduleResultDTO,
    summary="Reschedule a post",
    description="Replace content, media and time of a pending post.",
)
async def update_scheduled_post(
    post_id: str,
    request: UpdateScheduledPostDTO,
    user: Annotated[AuthenticatedUser, Depends(require_auth)],
    coordinator: ScheduleCoordinator = Depends(get_schedule_coordinator),
) -> ScheduleResultDTO:
    return await coordinator.update(user.user_id, post_id, request)


@router.delete(
    "/{post_id}",
    response_model=CancelResultDTO,
    summary="Cancel a scheduled post",
)
async def cancel_scheduled_post(
    post_id: str,
    user: Annotated[AuthenticatedUser, Depends(require_auth)],
    coordinator: ScheduleCoordinator = Depends(get_schedule_coordinator),
) -> CancelResultDTO:
    return await coordinator.cancel(user.user_id, post_id)
