#cems/api/v1/endpoints/notifications.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from cems.api import deps
from cems.core.exceptions import NotFoundError
from cems.crud import crud_notification
from cems.db.session import get_db
from cems.schemas.common import MessageResponse, build_pagination, page_offset
from cems.schemas.notification import NotificationListResponse
from cems.schemas.token import TokenPayload

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = Query(False, alias="unreadOnly"),
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    items, total = crud_notification.notification.get_multi_by_user(
        db,
        user_id=current_user.sub,
        skip=page_offset(page, limit),
        limit=limit,
        unread_only=unread_only,
    )
    unread = crud_notification.notification.count_unread(db, user_id=current_user.sub)
    return {
        "notifications": items,
        "unreadCount": unread,
        "pagination": build_pagination(page, limit, total),
    }


@router.put("/mark-all-read", response_model=MessageResponse)
def mark_all_read(
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    updated = crud_notification.notification.mark_all_read(db, user_id=current_user.sub)
    return {"message": f"{updated} notifications marked as read"}


@router.put("/{notificationId}/read", response_model=MessageResponse)
def mark_read(
    notificationId: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    notification = crud_notification.notification.get_for_user(
        db, id=notificationId, user_id=current_user.sub
    )
    if not notification:
        raise NotFoundError("Notification not found")
    crud_notification.notification.update(db, db_obj=notification, obj_in={"is_read": True})
    return {"message": "Notification marked as read"}


@router.delete("/{notificationId}", response_model=MessageResponse)
def delete_notification(
    notificationId: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    notification = crud_notification.notification.get_for_user(
        db, id=notificationId, user_id=current_user.sub
    )
    if not notification:
        raise NotFoundError("Notification not found")
    crud_notification.notification.remove(db, id=notification.id)
    return {"message": "Notification deleted"}


@router.delete("", response_model=MessageResponse)
def delete_all_notifications(
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    deleted = crud_notification.notification.remove_all_for_user(db, user_id=current_user.sub)
    return {"message": f"{deleted} notifications deleted"}
