# portal/api/routes/notifications.py
from fastapi import APIRouter, Depends

from portal.api.deps import Services, get_current_user, get_services, require_admin
from portal.models.user import User

router = APIRouter()


@router.get("/notifications")
def get_notifications(user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    notifications = services.notifications.list_notifications(user.id)
    return {
        "status": "success",
        "unread": sum(1 for n in notifications if not n.read),
        "notifications": [n.model_dump(mode="json") for n in notifications]
    }


@router.post("/notifications/read")
def mark_notifications_read(user: User = Depends(get_current_user), services: Services = Depends(get_services)):
    updated = services.notifications.mark_all_read(user.id)
    return {"status": "success", "updated": updated, "message": "Notifications marked as read"}


@router.post("/notifications/expire")
def expire_notifications(admin: User = Depends(require_admin), services: Services = Depends(get_services)):
    expired = services.notifications.mark_expired_notifications()
    return {"status": "success", "expired": expired}
