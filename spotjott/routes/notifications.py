from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from spotjott.deps import CurrentUser, get_current_user, get_db, get_pagination
from spotjott.pagination import Pagination
from spotjott.schemas import FCMTokenOut, FCMTokenRequest, NotificationOut, dump, envelope
from spotjott.services.notifications import NotificationService

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("")
def list_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    pagination: Pagination = Depends(get_pagination),
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    page = NotificationService(db).list(caller.id, pagination, unread_only)
    return envelope({
        "notifications": [dump(NotificationOut.model_validate(n)) for n in page.items],
        "hasMore": page.has_more,
        "page": page.pagination.page,
        "limit": page.pagination.limit,
    })


@router.get("/unread-count")
def unread_count(caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"count": NotificationService(db).unread_count(caller.id)})


@router.put("/read-all")
def mark_all_read(caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    updated = NotificationService(db).mark_all_read(caller.id)
    return envelope({"updated": updated}, "All notifications marked as read")


@router.put("/{notification_id}/read")
def mark_read(notification_id: int, caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    notification = NotificationService(db).mark_read(caller.id, notification_id)
    return envelope(dump(NotificationOut.model_validate(notification)), "Notification marked as read")


@router.post("/fcm-token", status_code=201)
def register_token(body: FCMTokenRequest, caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    record = NotificationService(db).register_token(caller.id, body.token, body.device_type, body.device_id)
    return envelope(dump(FCMTokenOut.model_validate(record)), "FCM token registered successfully")


@router.delete("/fcm-token")
def unregister_token(body: FCMTokenRequest, caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    removed = NotificationService(db).unregister_token(caller.id, body.token)
    return envelope({"removed": removed}, "FCM token removed")
