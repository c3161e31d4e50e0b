"""
Rental State Machine
--------------------

Encodes the unlock sequence a rider has to follow, and the single way back
out of it once the bike is on the road::

    ASSIGNED -> CHECKLIST_COMPLETE -> CHAIN_UNLOCKED -> CHAIN_SECURED_CONFIRMED
             -> WHEEL_UNLOCKED -> IN_RIDE -> ENDING -> COMPLETED

A rental only ever moves forward, except when ending a ride fails to
verify the chain, in which case it drops back from ``ENDING`` to ``IN_RIDE``.
Until the ride starts, the rental can be cancelled outright.

The machine only touches the rental. Giving bikes out and taking them back
is up to the :class:`~deisbikes.service.coordinator.SessionCoordinator`.
"""
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from deisbikes.models import Rental, RentalState, RentalUpdate, Rider, SafetyChecklist
from deisbikes.service.errors import NoActiveRentalError, AlreadyHasRentalError, RiderNotEligibleError, \
    NotReadyError, ChecklistIncompleteError, ConfirmationRequiredError, CannotCancelWhileRidingError, \
    NotVerifiedError

PRE_RIDE_STATES = frozenset(
    state for state in RentalState
    if RentalState.NONE.position < state.position < RentalState.IN_RIDE.position
)
"""The states a rental can still be cancelled from."""


class Trigger(str, Enum):
    BEGIN = "begin"
    REASSIGN = "reassign"
    COMPLETE_CHECKLIST = "complete_checklist"
    UNLOCK_CHAIN = "unlock_chain"
    CONFIRM_CHAIN_SECURED = "confirm_chain_secured"
    UNLOCK_WHEEL = "unlock_wheel"
    START_RIDE = "start_ride"
    ATTEMPT_END = "attempt_end"
    FINALIZE_END = "finalize_end"
    ROLLBACK_END = "rollback_end"
    CANCEL = "cancel"


TRANSITIONS: Dict[Trigger, Tuple[FrozenSet[RentalState], RentalState]] = {
    Trigger.BEGIN: (frozenset({RentalState.NONE}), RentalState.ASSIGNED),
    Trigger.REASSIGN: (frozenset({RentalState.ASSIGNED}), RentalState.ASSIGNED),
    Trigger.COMPLETE_CHECKLIST: (frozenset({RentalState.ASSIGNED}), RentalState.CHECKLIST_COMPLETE),
    Trigger.UNLOCK_CHAIN: (frozenset({RentalState.CHECKLIST_COMPLETE}), RentalState.CHAIN_UNLOCKED),
    Trigger.CONFIRM_CHAIN_SECURED: (frozenset({RentalState.CHAIN_UNLOCKED}), RentalState.CHAIN_SECURED_CONFIRMED),
    Trigger.UNLOCK_WHEEL: (frozenset({RentalState.CHAIN_SECURED_CONFIRMED}), RentalState.WHEEL_UNLOCKED),
    Trigger.START_RIDE: (frozenset({RentalState.WHEEL_UNLOCKED}), RentalState.IN_RIDE),
    Trigger.ATTEMPT_END: (frozenset({RentalState.IN_RIDE}), RentalState.ENDING),
    Trigger.FINALIZE_END: (frozenset({RentalState.ENDING}), RentalState.COMPLETED),
    Trigger.ROLLBACK_END: (frozenset({RentalState.ENDING}), RentalState.IN_RIDE),
    Trigger.CANCEL: (PRE_RIDE_STATES, RentalState.NONE),
}
"""Maps each trigger to the states it may fire from and the state it leads to."""

NOT_READY_MESSAGES = {
    Trigger.REASSIGN: "You can only swap bikes before completing the checklist.",
    Trigger.COMPLETE_CHECKLIST: "The checklist has already been completed.",
    Trigger.UNLOCK_CHAIN: "Complete the checklist first.",
    Trigger.CONFIRM_CHAIN_SECURED: "Unlock the chain first.",
    Trigger.UNLOCK_WHEEL: "Confirm chain secured first.",
    Trigger.START_RIDE: "Unlock the rear wheel first.",
    Trigger.ATTEMPT_END: "You can only end a ride that is in progress.",
    Trigger.FINALIZE_END: "Lock the bike to end the ride first.",
    Trigger.ROLLBACK_END: "Lock the bike to end the ride first.",
}


class RentalStateMachine:
    """
    Checks and applies the transitions of a single rental.

    Every check happens before anything is changed, so a rejected trigger
    leaves the rental exactly as it was.
    """

    transitions = TRANSITIONS

    def check(self, rental: Optional[Rental], trigger: Trigger) -> RentalState:
        """
        Checks that the trigger may fire on the rental, returning the state it would lead to.

        :raises NoActiveRentalError: If there is no rental to act on.
        :raises NotReadyError: If the rental is not in a state the trigger fires from.
        """
        sources, target = self.transitions[trigger]
        state = rental.state if rental is not None else RentalState.NONE

        if state not in sources:
            if rental is None:
                raise NoActiveRentalError()
            if trigger is Trigger.CANCEL:
                raise CannotCancelWhileRidingError()
            if trigger is Trigger.BEGIN:
                raise AlreadyHasRentalError()
            raise NotReadyError(NOT_READY_MESSAGES[trigger])

        return target

    def fire(self, rental: Rental, trigger: Trigger) -> RentalState:
        """
        Moves the rental along, recording the update.

        :raises NotReadyError: If the rental is not in a state the trigger fires from.
        """
        target = self.check(rental, trigger)
        if not self.is_progression(rental.state, target):
            raise ValueError(f"{trigger.value} would move a rental backwards from {rental.state.value}.")

        rental.state = target
        rental.updates.append(RentalUpdate(target))
        return target

    @staticmethod
    def is_progression(source: RentalState, target: RentalState) -> bool:
        """A rental only moves forward, unless it is dropping back into the ride or being cancelled."""
        return (
            target.position >= source.position
            or (source, target) == (RentalState.ENDING, RentalState.IN_RIDE)
            or (source in PRE_RIDE_STATES and target is RentalState.NONE)
        )

    def check_begin(self, rental: Optional[Rental], rider: Rider):
        """
        :raises RiderNotEligibleError: If the rider hasn't been approved.
        :raises AlreadyHasRentalError: If a rental is already under way.
        """
        if not rider.is_eligible:
            raise RiderNotEligibleError()
        if rental is not None:
            raise AlreadyHasRentalError()

    def check_cancel(self, rental: Optional[Rental]):
        """
        :raises NoActiveRentalError: If there is nothing to cancel.
        :raises CannotCancelWhileRidingError: If the bike is already out on the road.
        """
        self.check(rental, Trigger.CANCEL)

    def complete_checklist(self, rental: Optional[Rental], checklist: SafetyChecklist) -> RentalState:
        """
        :raises ChecklistIncompleteError: If any of the safety checks are missing.
        """
        self.check(rental, Trigger.COMPLETE_CHECKLIST)
        if not checklist.complete:
            raise ChecklistIncompleteError(checklist.missing)
        return self.fire(rental, Trigger.COMPLETE_CHECKLIST)

    def confirm_chain_secured(self, rental: Optional[Rental], confirmed: bool) -> RentalState:
        """
        :raises ConfirmationRequiredError: If the rider didn't confirm the chain is stowed.
        """
        self.check(rental, Trigger.CONFIRM_CHAIN_SECURED)
        if not confirmed:
            raise ConfirmationRequiredError()
        return self.fire(rental, Trigger.CONFIRM_CHAIN_SECURED)

    def attempt_end(self, rental: Optional[Rental]) -> RentalState:
        """Starts ending the ride. Verification always starts from scratch."""
        self.check(rental, Trigger.ATTEMPT_END)
        rental.chain_verified = False
        return self.fire(rental, Trigger.ATTEMPT_END)

    def finalize_end(self, rental: Optional[Rental]) -> RentalState:
        """
        Completes the rental if the chain was verified, otherwise drops back into the ride.

        :raises NotVerifiedError: After rolling back, when the chain was not verified.
        """
        self.check(rental, Trigger.FINALIZE_END)
        if not rental.chain_verified:
            self.fire(rental, Trigger.ROLLBACK_END)
            raise NotVerifiedError()
        return self.fire(rental, Trigger.FINALIZE_END)
