"""
Model Serializers
-----------------

Defines serializers for the bikes, the session snapshot, and the
requests that drive a rental.
"""
from enum import Enum

from marshmallow import Schema, validates_schema, ValidationError
from marshmallow.fields import Integer, Boolean, String, Nested, DateTime

from deisbikes.models import RentalState, RentalType
from .fields import EnumField


class BikeSchema(Schema):
    """The schema corresponding to the :class:`~deisbikes.models.bike.Bike` model."""

    id = String(required=True)
    available = Boolean(required=True)
    battery_percent = Integer(required=True)
    condition_note = String()


class SnapshotSchema(Schema):
    """The schema corresponding to the :class:`~deisbikes.service.coordinator.SessionSnapshot`."""

    rental_state = EnumField(RentalState, required=True)
    bike_id = String(allow_none=True)
    remaining_seconds = Integer(allow_none=True)
    available_bike_count = Integer(required=True)
    rental_type = EnumField(RentalType, allow_none=True)
    due = DateTime(allow_none=True)


class NotificationSchema(Schema):
    kind = String(required=True)
    message = String(required=True)
    bike_id = String(allow_none=True)
    time = DateTime()


class ChecklistSchema(Schema):
    tires_ok = Boolean(load_default=False)
    seat_adjusted = Boolean(load_default=False)
    helmet = Boolean(load_default=False)
    lights_ok = Boolean(load_default=False)


class BeginRentalSchema(Schema):
    type = EnumField(RentalType, required=True)


class RentalAction(str, Enum):
    REQUEST_DIFFERENT_BIKE = "request_different_bike"
    COMPLETE_CHECKLIST = "complete_checklist"
    UNLOCK_CHAIN = "unlock_chain"
    CONFIRM_CHAIN_SECURED = "confirm_chain_secured"
    UNLOCK_WHEEL = "unlock_wheel"
    TOGGLE_WHEEL_LOCK = "toggle_wheel_lock"
    ATTEMPT_END_RIDE = "attempt_end_ride"
    FINALIZE_END_RIDE = "finalize_end_ride"


class RentalActionSchema(Schema):
    action = EnumField(RentalAction, required=True)
    reason = String()
    checklist = Nested(ChecklistSchema())
    confirmed = Boolean()

    @validates_schema
    def assert_action_arguments(self, data, **kwargs):
        """
        Asserts that the actions that need more information are given it.
        """
        if data.get("action") == RentalAction.COMPLETE_CHECKLIST and "checklist" not in data:
            raise ValidationError("Completing the checklist requires the checklist.", "checklist")
        if data.get("action") == RentalAction.CONFIRM_CHAIN_SECURED and "confirmed" not in data:
            raise ValidationError("Confirming the chain requires the confirmed flag.", "confirmed")
