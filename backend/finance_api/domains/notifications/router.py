from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from finance_api.api.deps import Tenant, get_tenant
from finance_api.db.session import get_session
from finance_api.models.notification import Notification

router = APIRouter(prefix="/notifications", tags=["notifications"])


class NotificationOut(BaseModel):
    id: str
    type: str
    title: str
    message: str
    action_url: str | None = None
    read: bool
    created_at: datetime | None = None


class NotificationUpdate(BaseModel):
    read: bool


def _to_out(row: Notification) -> NotificationOut:
    return NotificationOut(
        id=row.id,
        type=row.type,
        title=row.title,
        message=row.message,
        action_url=row.action_url,
        read=row.read,
        created_at=row.created_at,
    )


def _get_owned(db: Session, tenant: Tenant, notification_id: str) -> Notification:
    row = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.brand_id == tenant.brand_id)
        .one_or_none()
    )
    if not row:
        raise HTTPException(status_code=404, detail="Notification not found")
    return row


@router.get("", response_model=list[NotificationOut])
def list_notifications(tenant: Tenant = Depends(get_tenant), db: Session = Depends(get_session)):
    rows = (
        db.query(Notification)
        .filter(Notification.brand_id == tenant.brand_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(100)
        .all()
    )
    return [_to_out(r) for r in rows]


@router.patch("/{notification_id}", response_model=NotificationOut)
def update_notification(
    notification_id: str,
    payload: NotificationUpdate,
    tenant: Tenant = Depends(get_tenant),
    db: Session = Depends(get_session),
):
    row = _get_owned(db, tenant, notification_id)
    row.read = payload.read
    db.commit()
    db.refresh(row)
    return _to_out(row)


@router.delete("/{notification_id}", status_code=204)
def delete_notification(notification_id: str, tenant: Tenant = Depends(get_tenant), db: Session = Depends(get_session)):
    row = _get_owned(db, tenant, notification_id)
    db.delete(row)
    db.commit()
    return None
