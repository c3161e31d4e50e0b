"""
Bike
-------------------------

Represents a bike in the fleet. Whether a bike is available is decided by
the :class:`~deisbikes.service.coordinator.SessionCoordinator`, which is the
only thing that flips it through the
:class:`~deisbikes.service.fleet.FleetRegistry`.
"""
from dataclasses import dataclass


@dataclass
class Bike:
    id: str
    available: bool = True
    battery_percent: int = 100
    """The charge of the smart lock on the bike."""
    condition_note: str = ""

    def __post_init__(self):
        if not 0 <= self.battery_percent <= 100:
            raise ValueError(f"Battery must be between 0 and 100, not {self.battery_percent}.")

    def __str__(self):
        return f"{self.id} ({self.battery_percent}%)"
