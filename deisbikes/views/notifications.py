"""
Notification Views
------------------

Lets the presentation layer poll for things the rider should be told,
such as their rental running out of time.
"""
from aiohttp_apispec import docs

from deisbikes.serializer import JSendSchema, JSendStatus, Many
from deisbikes.serializer.decorators import returns
from deisbikes.serializer.models import NotificationSchema
from deisbikes.views.base import BaseView


class NotificationsView(BaseView):
    url = "/notifications"
    name = "notifications"

    @docs(summary="Get Recent Notifications")
    @returns(JSendSchema.of(notifications=Many(NotificationSchema())))
    async def get(self):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"notifications": self.notification_logger.notifications}
        }
