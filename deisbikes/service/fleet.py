"""
Fleet Registry
--------------

The single source of truth for which bikes are free and how much charge
their locks have left.

Responsibilities
================

- list the available bikes
- pick the best bike to hand out next
- flip a bike between available and rented

Only the :class:`~deisbikes.service.coordinator.SessionCoordinator` should
call :meth:`FleetRegistry.set_availability` and :meth:`FleetRegistry.claim_best`.
"""
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from deisbikes.models import Bike
from deisbikes.service.errors import BikeNotFoundError, NoBikesAvailableError


class FleetRegistry:
    """
    Keeps track of the bikes in the fleet.

    None of the methods here await, so a :meth:`claim_best` can never be
    interleaved with another on the event loop and two sessions sharing
    the registry can never be handed the same bike.
    """

    def __init__(self, bikes: Iterable[Bike] = ()):
        self._bikes: Dict[str, Bike] = {}
        for bike in bikes:
            if bike.id in self._bikes:
                raise ValueError(f"Duplicate bike id {bike.id}.")
            self._bikes[bike.id] = bike

    @classmethod
    def from_seed(cls, seed: Iterable[Tuple[str, int, str]]) -> 'FleetRegistry':
        """Creates a registry of available bikes from (id, battery, condition note) tuples."""
        return cls(Bike(bike_id, True, battery, note) for bike_id, battery, note in seed)

    def get(self, target: Union[Bike, str]) -> Bike:
        """
        Gets a bike by its id.

        :raises BikeNotFoundError: If the bike isn't in the fleet.
        """
        bike_id = target.id if isinstance(target, Bike) else target
        try:
            return self._bikes[bike_id]
        except KeyError:
            raise BikeNotFoundError(bike_id) from None

    def list_available(self) -> List[Bike]:
        """Gets all the available bikes."""
        return [bike for bike in self if bike.available]

    @property
    def available_count(self) -> int:
        return sum(1 for bike in self._bikes.values() if bike.available)

    def best_available(self, excluding: Optional[str] = None) -> Bike:
        """
        Picks the available bike with the most battery left, ignoring the excluded bike.
        Bikes with the same battery are tie-broken by lowest id.

        :raises NoBikesAvailableError: If there is no bike to pick.
        """
        candidates = [bike for bike in self.list_available() if bike.id != excluding]
        if not candidates:
            raise NoBikesAvailableError()

        return min(candidates, key=lambda bike: (-bike.battery_percent, bike.id))

    def set_availability(self, bike_id: str, available: bool) -> Bike:
        """
        Marks a bike as available or not. Setting the value it already has is fine.

        :raises BikeNotFoundError: If the bike isn't in the fleet.
        """
        bike = self.get(bike_id)
        bike.available = available
        return bike

    def claim_best(self, excluding: Optional[str] = None) -> Bike:
        """
        Picks the best available bike and marks it as taken in one go.

        :raises NoBikesAvailableError: If there is no bike to pick.
        """
        bike = self.best_available(excluding)
        bike.available = False
        return bike

    def __contains__(self, target: Union[Bike, str]):
        """Check if a bike is part of the fleet."""
        return (target.id if isinstance(target, Bike) else target) in self._bikes

    def __iter__(self) -> Iterator[Bike]:
        return iter(sorted(self._bikes.values(), key=lambda bike: bike.id))

    def __len__(self):
        return len(self._bikes)
