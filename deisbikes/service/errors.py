"""
Errors
------

Everything that can go wrong with a rental. None of these are fatal:
a rider double tapping "end ride" is expected, so the
:class:`~deisbikes.service.coordinator.SessionCoordinator` hands them
back as part of a result instead of letting them escape.

The errors are grouped by what the caller can do about them:

- :class:`PreconditionError` the rental is in the wrong state for the request
- :class:`ExhaustionError` there is no bike to give out
- :class:`VerificationError` the chain was not seen in the right slot
- :class:`NotFoundError` a bike id that is not in the fleet
- :class:`ExternalError` the lock controller did not do what it was asked
"""
from deisbikes.models import RentalType


class RentalError(Exception):
    """The base class of all the rental errors."""

    code = "rental_error"
    default_message = "Something went wrong with the rental."

    def __init__(self, message: str = None):
        self.message = message if message is not None else self.default_message
        super().__init__(self.message)


class PreconditionError(RentalError):
    code = "precondition_failed"


class ExhaustionError(RentalError):
    code = "no_bikes"


class VerificationError(RentalError):
    code = "not_verified"


class NotFoundError(RentalError, KeyError):
    code = "not_found"

    def __str__(self):
        return self.message


class ExternalError(RentalError):
    code = "external_error"


class NoActiveRentalError(PreconditionError):
    code = "no_active_rental"
    default_message = "You have no current rental."


class AlreadyHasRentalError(PreconditionError):
    """Raised when a rider tries to start a second rental."""
    code = "already_has_rental"
    default_message = "You already have an active rental."


class RiderNotEligibleError(PreconditionError):
    code = "rider_not_eligible"
    default_message = "You must be an Active Rider to rent a bike."


class UnknownRentalTypeError(PreconditionError):
    code = "unknown_rental_type"

    def __init__(self, rental_type):
        self.rental_type = rental_type
        super().__init__(
            f"There is no {rental_type} rental, choose one of {', '.join(t.value for t in RentalType)}."
        )


class NotReadyError(PreconditionError):
    code = "not_ready"
    default_message = "The rental is not ready for that yet."


class ChecklistIncompleteError(PreconditionError):
    code = "checklist_incomplete"
    default_message = "Please confirm all safety checks to continue."

    def __init__(self, missing=None):
        self.missing = list(missing) if missing is not None else []
        super().__init__()


class ConfirmationRequiredError(PreconditionError):
    code = "confirmation_required"
    default_message = "Please confirm you secured the chain before continuing."


class CannotCancelWhileRidingError(PreconditionError):
    code = "cannot_cancel_while_riding"
    default_message = "You can only end the ride from Ride Mode."


class NoBikesAvailableError(ExhaustionError):
    """Raised when the fleet has no bike left to hand out."""
    code = "no_bikes_available"
    default_message = "No bikes available, please try again later."


class NoAlternateBikesError(ExhaustionError):
    code = "no_alternate_bikes"
    default_message = "No other bikes are currently available."


class NotVerifiedError(VerificationError):
    code = "not_verified"
    default_message = "Chain is not verified as secured to the correct bike slot."


class BikeNotFoundError(NotFoundError):
    code = "bike_not_found"

    def __init__(self, bike_id):
        self.bike_id = bike_id
        super().__init__(f"There is no bike {bike_id} in the fleet.")


class LockControllerError(ExternalError):
    code = "lock_controller_error"
    default_message = "The bike lock did not respond, please try again."
