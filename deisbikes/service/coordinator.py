"""
Session Coordinator
-------------------

This module is what handles a rider's rental from start to finish.

Responsibilities
================

The coordinator is the only object that changes the fleet and the rental
together, so a bike is marked as taken exactly when a rental holds it.

- assigning (and re-assigning) a bike
- walking the rental through the unlock sequence
- starting and stopping the countdown
- ending or cancelling the rental and putting the bike back

Every operation checks everything it needs, including calls out to the
lock, before it changes anything. Failures are returned as part of the
:class:`OperationResult` instead of being raised, so a rider tapping the
same button twice never takes the engine down.
"""
import asyncio
from copy import deepcopy
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from functools import wraps
from typing import Optional, Union, Callable, Awaitable, Any

from deisbikes.events import EventHub, EventList
from deisbikes.models import Rental, RentalState, RentalType, Rider, SafetyChecklist
from deisbikes.service.clock import CountdownClock
from deisbikes.service.errors import RentalError, BikeNotFoundError, NoBikesAvailableError, \
    NoAlternateBikesError, NoActiveRentalError, NotReadyError, NotVerifiedError, LockControllerError, \
    UnknownRentalTypeError
from deisbikes.service.fleet import FleetRegistry
from deisbikes.service.lock_controller import LockController
from deisbikes.service.state_machine import RentalStateMachine, Trigger


class SessionEvent(EventList):

    @staticmethod
    def rental_started(bike_id: str, rental_type: RentalType):
        """A bike was assigned to a new rental."""

    @staticmethod
    def bike_reassigned(old_bike_id: str, new_bike_id: str, reason: str):
        """The rider turned down their bike and was given another."""

    @staticmethod
    def state_changed(state: RentalState):
        """The rental moved to a new state."""

    @staticmethod
    def ride_expired(bike_id: str):
        """The rental ran out of time while the bike was still out."""

    @staticmethod
    def admin_notification_requested(reason: str, bike_id: Optional[str]):
        """Something happened that an admin should look at."""

    @staticmethod
    def rental_completed(bike_id: str):
        """The bike was verified back in the shelter."""

    @staticmethod
    def rental_cancelled(bike_id: str):
        """The rental was cancelled before the ride started."""

    @staticmethod
    def snapshot_changed(snapshot: 'SessionSnapshot'):
        """Sent after every operation and every tick of the clock."""


class ResultStatus(str, Enum):
    SUCCESS = "success"
    FAIL = "fail"


@dataclass(frozen=True)
class SessionSnapshot:
    """A read-only view of the session, for whoever is presenting it."""

    rental_state: RentalState
    bike_id: Optional[str]
    remaining_seconds: Optional[int]
    available_bike_count: int
    rental_type: Optional[RentalType] = None
    due: Optional[datetime] = None


@dataclass(frozen=True)
class OperationResult:
    status: ResultStatus
    snapshot: SessionSnapshot
    error: Optional[RentalError] = None
    wheel_locked: Optional[bool] = None
    """Only set by :meth:`SessionCoordinator.toggle_wheel_lock`."""
    expired: bool = False
    """Only set by :meth:`SessionCoordinator.on_clock_tick`, on the tick that runs out the time."""

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.SUCCESS


def operation(func: Callable[..., Awaitable[Optional[dict]]]):
    """
    Runs a coordinator operation inside the session's critical section,
    turning any rental error it raises into a failed result. The wrapped
    function may return a dictionary of extra result fields.

    A missing bike means the fleet and the rental disagree, which is a
    bug rather than misuse, so it is let through.
    """

    @wraps(func)
    async def new_func(self: 'SessionCoordinator', *args, **kwargs) -> OperationResult:
        async with self._lock:
            try:
                extra = await func(self, *args, **kwargs)
            except BikeNotFoundError:
                raise
            except RentalError as error:
                result = OperationResult(ResultStatus.FAIL, self.snapshot(), error)
            else:
                result = OperationResult(ResultStatus.SUCCESS, self.snapshot(), **(extra or {}))

        self.hub.emit(SessionEvent.snapshot_changed, result.snapshot)
        return result

    return new_func


class SessionCoordinator:
    """
    Runs a single rider's rental session against a fleet.

    Publishes events on its hub so that the rest of the system can
    keep up with the session without reaching into it.
    """

    def __init__(
        self, fleet: FleetRegistry, lock_controller: LockController,
        rider: Rider = None, clock: CountdownClock = None
    ):
        self.fleet = fleet
        self.lock_controller = lock_controller
        self.rider = rider if rider is not None else Rider()
        self.clock = clock if clock is not None else CountdownClock()
        self.machine = RentalStateMachine()
        self.hub = EventHub(SessionEvent)

        self._rental: Optional[Rental] = None
        self._last_rental: Optional[Rental] = None
        self._lock = asyncio.Lock()

    @property
    def rental(self) -> Optional[Rental]:
        """A copy of the current rental, if there is one."""
        return deepcopy(self._rental)

    @property
    def last_rental(self) -> Optional[Rental]:
        """A copy of the most recent rental that was completed or cancelled."""
        return deepcopy(self._last_rental)

    def has_active_rental(self) -> bool:
        return self._rental is not None

    def snapshot(self) -> SessionSnapshot:
        rental = self._rental
        if rental is None:
            return SessionSnapshot(RentalState.NONE, None, None, self.fleet.available_count)

        return SessionSnapshot(
            rental_state=rental.state,
            bike_id=rental.bike_id,
            remaining_seconds=rental.remaining_seconds,
            available_bike_count=self.fleet.available_count,
            rental_type=rental.type,
            due=rental.due,
        )

    @operation
    async def begin_rental(self, rental_type: Union[RentalType, str]):
        """
        Starts a rental with the available bike that has the most battery.

        Fails with :class:`~deisbikes.service.errors.UnknownRentalTypeError`,
        :class:`~deisbikes.service.errors.RiderNotEligibleError`,
        :class:`~deisbikes.service.errors.AlreadyHasRentalError` or
        :class:`~deisbikes.service.errors.NoBikesAvailableError`.
        """
        try:
            rental_type = RentalType(rental_type)
        except ValueError:
            raise UnknownRentalTypeError(rental_type) from None
        self.machine.check_begin(self._rental, self.rider)

        bike = self.fleet.claim_best()
        self._rental = Rental.create(rental_type, bike.id)

        self.hub.emit(SessionEvent.rental_started, bike.id, rental_type)
        self.hub.emit(SessionEvent.state_changed, RentalState.ASSIGNED)

    @operation
    async def request_different_bike(self, reason: str = ""):
        """
        Swaps the assigned bike for the next best one. Only possible
        before the checklist is completed.

        Fails with :class:`~deisbikes.service.errors.NoAlternateBikesError`
        if there is no other bike to give.
        """
        rental = self._rental
        self.machine.check(rental, Trigger.REASSIGN)

        current = self.fleet.get(rental.bike_id)
        try:
            replacement = self.fleet.best_available(excluding=current.id)
        except NoBikesAvailableError:
            raise NoAlternateBikesError() from None

        self.fleet.set_availability(current.id, True)
        self.fleet.set_availability(replacement.id, False)
        rental.bike_id = replacement.id
        self.machine.fire(rental, Trigger.REASSIGN)

        self.hub.emit(SessionEvent.bike_reassigned, current.id, replacement.id, reason)
        self.hub.emit(
            SessionEvent.admin_notification_requested,
            f"Rider turned down {current.id}: {reason or 'no reason given'}", current.id
        )

    @operation
    async def complete_checklist(self, checklist: SafetyChecklist):
        """Fails with :class:`~deisbikes.service.errors.ChecklistIncompleteError` unless all four checks are done."""
        self._emit_state(self.machine.complete_checklist(self._rental, checklist))

    @operation
    async def unlock_chain(self):
        self.machine.check(self._rental, Trigger.UNLOCK_CHAIN)
        await self._call_lock(self.lock_controller.unlock_chain)
        self._emit_state(self.machine.fire(self._rental, Trigger.UNLOCK_CHAIN))

    @operation
    async def confirm_chain_secured(self, confirmed: bool):
        """The rider confirms the chain is stowed in the basket or their bag."""
        self._emit_state(self.machine.confirm_chain_secured(self._rental, confirmed))

    @operation
    async def unlock_wheel(self):
        """
        Unlocks the rear wheel, which starts the ride and the countdown.
        The rental passes through ``WHEEL_UNLOCKED`` without stopping.
        """
        rental = self._rental
        self.machine.check(rental, Trigger.UNLOCK_WHEEL)
        await self._call_lock(self.lock_controller.unlock_wheel)

        self.machine.fire(rental, Trigger.UNLOCK_WHEEL)
        self.machine.fire(rental, Trigger.START_RIDE)
        self.clock.start(self.on_clock_tick)
        self._emit_state(rental.state)

    @operation
    async def toggle_wheel_lock(self):
        """Locks or unlocks the rear wheel for a stop mid ride. The rental is unaffected."""
        rental = self._rental
        if rental is None:
            raise NoActiveRentalError()
        if rental.state is not RentalState.IN_RIDE:
            raise NotReadyError("You can only lock the wheel during a ride.")

        wheel_locked = await self._call_lock(self.lock_controller.toggle_wheel_lock)
        return {"wheel_locked": wheel_locked}

    @operation
    async def attempt_end_ride(self):
        self._emit_state(self.machine.attempt_end(self._rental))

    @operation
    async def finalize_end_ride(self):
        """
        Asks the lock whether the chain is secured in the shelter. If it is, the
        rental is completed and the bike goes back into the pool, otherwise the
        rider is put back into the ride with a
        :class:`~deisbikes.service.errors.NotVerifiedError`.
        """
        rental = self._rental
        self.machine.check(rental, Trigger.FINALIZE_END)
        bike = self.fleet.get(rental.bike_id)

        rental.chain_verified = await self._call_lock(self.lock_controller.verify_chain_secured_to_slot)
        try:
            self.machine.finalize_end(rental)
        except NotVerifiedError:
            self._emit_state(rental.state)
            raise

        self.clock.stop()
        self.fleet.set_availability(bike.id, True)
        self._rental, self._last_rental = None, rental

        self._emit_state(RentalState.COMPLETED)
        self.hub.emit(SessionEvent.rental_completed, bike.id)

    @operation
    async def cancel_rental(self):
        """
        Cancels the rental and returns the bike, as long as the ride hasn't started.

        Fails with :class:`~deisbikes.service.errors.CannotCancelWhileRidingError` once it has.
        """
        rental = self._rental
        self.machine.check_cancel(rental)
        bike = self.fleet.get(rental.bike_id)

        self.machine.fire(rental, Trigger.CANCEL)
        self.clock.stop()
        self.fleet.set_availability(bike.id, True)
        self._rental, self._last_rental = None, rental

        self.hub.emit(SessionEvent.rental_cancelled, bike.id)
        self._emit_state(RentalState.NONE)

    def on_clock_tick(self) -> OperationResult:
        """
        Called by the clock every interval. Takes a second off the ride,
        and raises the alarm on the tick that runs the time out.
        """
        rental = self._rental
        if rental is None:
            self.clock.stop()

        expired = self.clock.tick(rental)
        if expired:
            self.hub.emit(SessionEvent.ride_expired, rental.bike_id)
            self.hub.emit(
                SessionEvent.admin_notification_requested,
                f"Rental time expired on {rental.bike_id}", rental.bike_id
            )

        result = OperationResult(ResultStatus.SUCCESS, self.snapshot(), expired=expired)
        self.hub.emit(SessionEvent.snapshot_changed, result.snapshot)
        return result

    async def close(self):
        """Stops the countdown, for when the app is shutting down."""
        await self.clock.wait_stopped()

    def _emit_state(self, state: RentalState):
        self.hub.emit(SessionEvent.state_changed, state)

    @staticmethod
    async def _call_lock(func: Callable[[], Awaitable[Any]]) -> Any:
        """Calls the lock once, reporting any failure as a lock controller error."""
        try:
            return await func()
        except (ConnectionError, TimeoutError, asyncio.TimeoutError) as error:
            raise LockControllerError() from error
