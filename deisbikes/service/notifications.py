"""
Notifications
-------------

Listens to a session's events and turns the ones a rider or an admin
should hear about into notifications. Delivery is up to whoever reads
them; the engine does not wait around for it.
"""
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Deque, List, Optional

from deisbikes import logger
from deisbikes.models import RentalState, RentalType
from deisbikes.service.coordinator import SessionCoordinator, SessionEvent


@dataclass
class Notification:
    kind: str
    message: str
    bike_id: Optional[str] = None
    time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class NotificationLogger:
    """
    Logs every event from the coordinator, and keeps the most recent
    notifications around for the presentation layer to pick up.
    """

    def __init__(self, coordinator: SessionCoordinator, max_notifications: int = 50):
        self._notifications: Deque[Notification] = deque(maxlen=max_notifications)

        coordinator.hub.subscribe(SessionEvent.rental_started, self._rental_started)
        coordinator.hub.subscribe(SessionEvent.bike_reassigned, self._bike_reassigned)
        coordinator.hub.subscribe(SessionEvent.state_changed, self._state_changed)
        coordinator.hub.subscribe(SessionEvent.ride_expired, self._ride_expired)
        coordinator.hub.subscribe(SessionEvent.admin_notification_requested, self._admin_notification_requested)
        coordinator.hub.subscribe(SessionEvent.rental_completed, self._rental_completed)
        coordinator.hub.subscribe(SessionEvent.rental_cancelled, self._rental_cancelled)

    @property
    def notifications(self) -> List[Notification]:
        """The stored notifications, most recent last."""
        return list(self._notifications)

    def _notify(self, kind: str, message: str, bike_id: Optional[str] = None):
        self._notifications.append(Notification(kind, message, bike_id))

    def _rental_started(self, bike_id: str, rental_type: RentalType):
        logger.info("Assigned %s for a %s rental", bike_id, rental_type.value)
        self._notify("rental_started", f"Assigned {bike_id}.", bike_id)

    def _bike_reassigned(self, old_bike_id, new_bike_id, reason):
        logger.info("Swapped %s for %s (%s)", old_bike_id, new_bike_id, reason or "no reason given")
        self._notify("bike_reassigned", f"Assigned {new_bike_id}.", new_bike_id)

    def _state_changed(self, state: RentalState):
        logger.debug("Rental is now %s", state.value)

    def _ride_expired(self, bike_id):
        logger.warning("Rental on %s has run out of time", bike_id)
        self._notify(
            "ride_expired", "Your rental time has ended. Please return to the shelter immediately.", bike_id
        )

    def _admin_notification_requested(self, reason, bike_id):
        logger.info("Admin notification: %s", reason)
        self._notify("admin_notification_requested", reason, bike_id)

    def _rental_completed(self, bike_id):
        logger.info("Rental on %s completed", bike_id)
        self._notify("rental_completed", "Thanks for riding DeisBikes.", bike_id)

    def _rental_cancelled(self, bike_id):
        logger.info("Rental on %s cancelled", bike_id)
        self._notify("rental_cancelled", "Rental canceled before ride started.", bike_id)
