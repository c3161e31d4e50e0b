import pytest
from marshmallow import ValidationError

from deisbikes.models import RentalType, RentalState
from deisbikes.serializer.models import BeginRentalSchema, RentalActionSchema, RentalAction, SnapshotSchema
from deisbikes.service import SessionSnapshot


class TestRentalActionSerializer:

    def test_checklist_defaults(self):
        """Assert that unticked checks are read as not done."""
        data = RentalActionSchema().load({"action": "complete_checklist", "checklist": {"helmet": True}})
        assert data["action"] is RentalAction.COMPLETE_CHECKLIST
        assert data["checklist"] == {"tires_ok": False, "seat_adjusted": False, "helmet": True, "lights_ok": False}

    def test_confirm_requires_flag(self):
        with pytest.raises(ValidationError) as error:
            RentalActionSchema().load({"action": "confirm_chain_secured"})
        assert "confirmed" in error.value.messages

    def test_simple_action(self):
        data = RentalActionSchema().load({"action": "unlock_chain"})
        assert data == {"action": RentalAction.UNLOCK_CHAIN}


class TestBeginRentalSerializer:

    def test_rental_type(self):
        assert BeginRentalSchema().load({"type": "commuter"})["type"] is RentalType.COMMUTER

    def test_missing_type(self):
        with pytest.raises(ValidationError):
            BeginRentalSchema().load({})


def test_snapshot_without_rental():
    """Assert that an empty session serializes with nulls."""
    data = SnapshotSchema().dump(SessionSnapshot(RentalState.NONE, None, None, 5))
    assert data == {
        "rental_state": "none",
        "bike_id": None,
        "remaining_seconds": None,
        "available_bike_count": 5,
        "rental_type": None,
        "due": None,
    }
