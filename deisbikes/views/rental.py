"""
Rental Related Views
---------------------------

Drives the rider's rental. There is a single rental at a time:

- ``GET /rental`` the current state of the session
- ``POST /rental`` starts a rental with the best available bike
- ``DELETE /rental`` cancels the rental before the ride starts
- ``POST /rental/actions`` moves the rental through the unlock sequence and back
"""
from http import HTTPStatus

from aiohttp_apispec import docs
from marshmallow.fields import Boolean

from deisbikes.models import SafetyChecklist
from deisbikes.serializer import JSendSchema, JSendStatus
from deisbikes.serializer.decorators import expects, returns
from deisbikes.serializer.models import SnapshotSchema, BeginRentalSchema, RentalActionSchema, RentalAction
from deisbikes.views.base import BaseView, FAILURE_STATUS

failures = {name: (JSendSchema(), status) for name, status in FAILURE_STATUS.items()}


class RentalView(BaseView):
    """
    Gets, starts, or cancels the rental.
    """
    url = "/rental"
    name = "rental"

    @docs(summary="Get The Current Rental")
    @returns(JSendSchema.of(rental=SnapshotSchema()))
    async def get(self):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"rental": self.session_coordinator.snapshot()}
        }

    @docs(summary="Start A Rental")
    @expects(BeginRentalSchema())
    @returns(rental=(JSendSchema.of(rental=SnapshotSchema()), HTTPStatus.CREATED), **failures)
    async def post(self):
        result = await self.session_coordinator.begin_rental(self.request["data"]["type"])
        return self.respond(result)

    @docs(summary="Cancel The Rental")
    @returns(rental=JSendSchema.of(rental=SnapshotSchema()), **failures)
    async def delete(self):
        result = await self.session_coordinator.cancel_rental()
        return self.respond(result)


class RentalActionsView(BaseView):
    """
    Performs a step of the rental.
    """
    url = "/rental/actions"
    name = "rental_actions"

    @docs(summary="Perform A Rental Action")
    @expects(RentalActionSchema())
    @returns(
        rental=JSendSchema.of(rental=SnapshotSchema()),
        wheel=JSendSchema.of(rental=SnapshotSchema(), wheel_locked=Boolean()),
        **failures
    )
    async def post(self):
        data = self.request["data"]
        action = data["action"]
        coordinator = self.session_coordinator

        if action is RentalAction.REQUEST_DIFFERENT_BIKE:
            result = await coordinator.request_different_bike(data.get("reason", ""))
        elif action is RentalAction.COMPLETE_CHECKLIST:
            result = await coordinator.complete_checklist(SafetyChecklist(**data["checklist"]))
        elif action is RentalAction.UNLOCK_CHAIN:
            result = await coordinator.unlock_chain()
        elif action is RentalAction.CONFIRM_CHAIN_SECURED:
            result = await coordinator.confirm_chain_secured(data["confirmed"])
        elif action is RentalAction.UNLOCK_WHEEL:
            result = await coordinator.unlock_wheel()
        elif action is RentalAction.TOGGLE_WHEEL_LOCK:
            result = await coordinator.toggle_wheel_lock()
            if result.ok:
                return self.respond(result, "wheel", wheel_locked=result.wheel_locked)
        elif action is RentalAction.ATTEMPT_END_RIDE:
            result = await coordinator.attempt_end_ride()
        else:
            result = await coordinator.finalize_end_ride()

        return self.respond(result)
