from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from travel_booking.api.auth import Principal, get_principal
from travel_booking.api.dependencies import AppServices, get_services
from travel_booking.api.schemas.notifications import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)

router = APIRouter(prefix="/notifications")


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
    principal: Principal = Depends(get_principal),
    services: AppServices = Depends(get_services),
) -> NotificationListResponse:
    items = await services.notifications.list_notifications(
        principal.user_id, page=page, page_size=page_size
    )
    unread = await services.notifications.unread_count(principal.user_id)
    return NotificationListResponse(
        notifications=[NotificationResponse.from_entity(n) for n in items],
        unread_count=unread,
        page=page,
        page_size=page_size,
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    principal: Principal = Depends(get_principal),
    services: AppServices = Depends(get_services),
) -> UnreadCountResponse:
    return UnreadCountResponse(count=await services.notifications.unread_count(principal.user_id))


@router.put("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    principal: Principal = Depends(get_principal),
    services: AppServices = Depends(get_services),
) -> MarkAllReadResponse:
    async with services.transaction_manager.start():
        updated = await services.notifications.mark_all_as_read(principal.user_id)
    return MarkAllReadResponse(updated=updated)


@router.put("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_read(
    notification_id: UUID,
    principal: Principal = Depends(get_principal),
    services: AppServices = Depends(get_services),
) -> None:
    async with services.transaction_manager.start():
        await services.notifications.mark_as_read(notification_id, principal.user_id)
