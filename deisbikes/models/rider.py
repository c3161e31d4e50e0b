"""
Rider
-----

The onboarding flow lives outside of the engine. All the engine needs to
know is whether the rider made it through to the end of it.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RiderStatus(str, Enum):
    LOGGED_OUT = "logged_out"
    NEEDS_WAIVER = "needs_waiver"
    NEEDS_MOODLE = "needs_moodle"
    PENDING_APPROVAL = "pending_approval"
    ACTIVE_RIDER = "active_rider"
    SUSPENDED = "suspended"


@dataclass
class Rider:
    status: RiderStatus = RiderStatus.ACTIVE_RIDER
    email: Optional[str] = None

    @property
    def is_eligible(self) -> bool:
        """Only approved riders may rent a bike."""
        return self.status is RiderStatus.ACTIVE_RIDER
