from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.auth.dependencies import ActorIdentity, get_identity
from app.api.notifications.schemas import NotificationItem, CountResponse
from app.api.notifications.service import NotificationService
from app.database.transaction import TransactionalStore, get_transactional_store

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


def get_notification_service(
        transactions: TransactionalStore = Depends(get_transactional_store),
        identity: ActorIdentity = Depends(get_identity),
) -> NotificationService:
    return NotificationService(transactions, identity)


@router.get("/", response_model=List[NotificationItem])
def get_notifications(
        limit: int = Query(20, ge=1, le=100),
        service: NotificationService = Depends(get_notification_service)
):
    return service.get_notifications(limit)


@router.get("/unread-count", response_model=CountResponse)
def get_unread_count(service: NotificationService = Depends(get_notification_service)):
    return {"count": service.get_unread_count()}


@router.get("/pending-requests-count", response_model=CountResponse)
def get_pending_requests_count(service: NotificationService = Depends(get_notification_service)):
    return {"count": service.get_pending_request_count()}


@router.put("/read-all")
def mark_all_read(service: NotificationService = Depends(get_notification_service)):
    service.mark_all_read()
    return {"success": True}


@router.put("/{notification_id}/read")
def mark_notification_read(
        notification_id: int,
        service: NotificationService = Depends(get_notification_service)
):
    success = service.mark_read(notification_id)
    if not success:
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"success": True}
