"""
Notification feed endpoint.
"""
from fastapi import APIRouter, Depends

from ..models.api_responses import NotificationFeed
from ..services import NotificationCenter
from ..utils.dependencies import get_notification_center

router = APIRouter()


@router.get("/notifications", response_model=NotificationFeed)
async def drain_notifications(
    notifications: NotificationCenter = Depends(get_notification_center)
) -> NotificationFeed:
    """Return pending notifications and mark them shown."""
    return NotificationFeed(notifications=notifications.drain())
