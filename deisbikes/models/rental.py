"""
Rental
---------------------------

Contains the rental and the states it moves through on its way
from an assigned bike to a bike back in the shelter.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Tuple


class RentalType(str, Enum):
    """We subclass string to make json serialization work."""
    COMMUTER = "commuter"
    REGULAR = "regular"

    @property
    def max_duration(self) -> timedelta:
        """The longest a rental of this type may last."""
        return timedelta(hours=24) if self is RentalType.COMMUTER else timedelta(hours=4)


class RentalState(str, Enum):
    """
    The states of a rental, declared in the order a rental moves through them.

    ``NONE`` is not a state a rental can be in, it stands for "no rental".
    """
    NONE = "none"
    ASSIGNED = "assigned"
    CHECKLIST_COMPLETE = "checklist_complete"
    CHAIN_UNLOCKED = "chain_unlocked"
    CHAIN_SECURED_CONFIRMED = "chain_secured_confirmed"
    WHEEL_UNLOCKED = "wheel_unlocked"
    IN_RIDE = "in_ride"
    ENDING = "ending"
    COMPLETED = "completed"

    @staticmethod
    def order() -> Tuple['RentalState', ...]:
        return tuple(RentalState)

    @property
    def position(self) -> int:
        return RentalState.order().index(self)


@dataclass
class RentalUpdate:
    state: RentalState
    time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class SafetyChecklist:
    """The checks a rider confirms before the chain is unlocked."""
    tires_ok: bool = False
    seat_adjusted: bool = False
    helmet: bool = False
    lights_ok: bool = False

    @property
    def complete(self) -> bool:
        return not self.missing

    @property
    def missing(self) -> List[str]:
        return [check.name for check in fields(self) if not getattr(self, check.name)]


@dataclass
class Rental:
    type: RentalType
    bike_id: str
    start: datetime
    due: datetime
    remaining_seconds: int
    state: RentalState = RentalState.ASSIGNED
    chain_verified: bool = False
    """Whether the lock controller saw the chain secured to the right slot. Only read while ending."""
    updates: List[RentalUpdate] = field(default_factory=list)

    @classmethod
    def create(cls, rental_type: RentalType, bike_id: str, start: datetime = None) -> 'Rental':
        """Creates a freshly assigned rental, with the full allowance of time left on it."""
        start = start if start is not None else datetime.now(timezone.utc)
        return cls(
            type=rental_type,
            bike_id=bike_id,
            start=start,
            due=start + rental_type.max_duration,
            remaining_seconds=int(rental_type.max_duration.total_seconds()),
            updates=[RentalUpdate(RentalState.ASSIGNED, start)],
        )

    @property
    def expired(self) -> bool:
        return self.remaining_seconds == 0

    def __str__(self):
        return f"[{self.type.value}] {self.bike_id} {self.state.value}"
