from aiohttp.test_utils import TestClient
from marshmallow.fields import Boolean

from deisbikes.models import RentalState
from deisbikes.serializer import JSendSchema, JSendStatus, Many
from deisbikes.serializer.models import SnapshotSchema, NotificationSchema

rental_schema = JSendSchema.of(rental=SnapshotSchema())


async def act(client: TestClient, action, **kwargs):
    return await client.post('/api/v1/rental/actions', json={"action": action, **kwargs})


async def start_ride(client: TestClient):
    await client.post('/api/v1/rental', json={"type": "regular"})
    await act(client, "complete_checklist", checklist={
        "tires_ok": True, "seat_adjusted": True, "helmet": True, "lights_ok": True
    })
    await act(client, "unlock_chain")
    await act(client, "confirm_chain_secured", confirmed=True)
    return await act(client, "unlock_wheel")


async def test_get_no_rental(client: TestClient):
    """Assert that the session can be read before any rental."""
    resp = await client.get('/api/v1/rental')
    data = rental_schema.load(await resp.json())

    assert data["status"] == JSendStatus.SUCCESS
    assert data["data"]["rental"]["rental_state"] == RentalState.NONE
    assert data["data"]["rental"]["bike_id"] is None
    assert data["data"]["rental"]["available_bike_count"] == 5


async def test_begin_rental(client: TestClient):
    """Assert that starting a rental assigns the best bike."""
    resp = await client.post('/api/v1/rental', json={"type": "commuter"})
    data = rental_schema.load(await resp.json())

    assert resp.status == 201
    assert data["data"]["rental"]["rental_state"] == RentalState.ASSIGNED
    assert data["data"]["rental"]["bike_id"] == "DeisBike #3"
    assert data["data"]["rental"]["remaining_seconds"] == 24 * 60 * 60
    assert data["data"]["rental"]["due"] is not None


async def test_begin_rental_bad_type(client: TestClient):
    """Assert that an unknown rental type is turned away."""
    resp = await client.post('/api/v1/rental', json={"type": "weekend"})
    data = await resp.json()

    assert resp.status == 400
    assert data["status"] == "fail"
    assert "type" in data["data"]["errors"]


async def test_begin_rental_not_json(client: TestClient):
    resp = await client.post('/api/v1/rental', data="regular")
    assert resp.status == 400
    assert "only accepts JSON" in (await resp.json())["data"]["message"]


async def test_begin_second_rental(client: TestClient):
    """Assert that a second rental is rejected with the state of the first."""
    await client.post('/api/v1/rental', json={"type": "regular"})
    resp = await client.post('/api/v1/rental', json={"type": "regular"})
    data = JSendSchema().load(await resp.json())

    assert resp.status == 409
    assert data["status"] == JSendStatus.FAIL
    assert data["data"]["code"] == "already_has_rental"
    assert data["data"]["rental"]["bike_id"] == "DeisBike #3"


async def test_begin_rental_no_bikes(client: TestClient, coordinator):
    """Assert that an empty fleet is reported as unavailable."""
    for bike in coordinator.fleet:
        coordinator.fleet.set_availability(bike.id, False)

    resp = await client.post('/api/v1/rental', json={"type": "regular"})
    data = await resp.json()

    assert resp.status == 503
    assert data["data"]["code"] == "no_bikes_available"


async def test_cancel_rental(client: TestClient):
    await client.post('/api/v1/rental', json={"type": "regular"})
    resp = await client.delete('/api/v1/rental')
    data = rental_schema.load(await resp.json())

    assert resp.status == 200
    assert data["data"]["rental"]["rental_state"] == RentalState.NONE
    assert data["data"]["rental"]["available_bike_count"] == 5


async def test_cancel_during_ride(client: TestClient):
    await start_ride(client)
    resp = await client.delete('/api/v1/rental')
    data = await resp.json()

    assert resp.status == 409
    assert data["data"]["code"] == "cannot_cancel_while_riding"
    assert data["data"]["rental"]["rental_state"] == "in_ride"


async def test_request_different_bike(client: TestClient):
    await client.post('/api/v1/rental', json={"type": "regular"})
    resp = await act(client, "request_different_bike", reason="Flat tire")
    data = rental_schema.load(await resp.json())

    assert data["data"]["rental"]["bike_id"] == "DeisBike #1"


async def test_incomplete_checklist(client: TestClient):
    """Assert that the missing checks are reported back."""
    await client.post('/api/v1/rental', json={"type": "regular"})
    resp = await act(client, "complete_checklist", checklist={"tires_ok": True, "helmet": True})
    data = await resp.json()

    assert resp.status == 409
    assert data["data"]["code"] == "checklist_incomplete"
    assert data["data"]["missing"] == ["seat_adjusted", "lights_ok"]


async def test_action_missing_arguments(client: TestClient):
    """Assert that completing the checklist needs the checklist."""
    await client.post('/api/v1/rental', json={"type": "regular"})
    resp = await act(client, "complete_checklist")
    data = await resp.json()

    assert resp.status == 400
    assert "checklist" in data["data"]["errors"]


async def test_unknown_action(client: TestClient):
    resp = await act(client, "jump")
    assert resp.status == 400


async def test_unlock_out_of_order(client: TestClient):
    await client.post('/api/v1/rental', json={"type": "regular"})
    resp = await act(client, "unlock_wheel")
    data = await resp.json()

    assert resp.status == 409
    assert data["data"]["code"] == "not_ready"
    assert data["data"]["message"] == "Confirm chain secured first."


async def test_full_ride(client: TestClient):
    """Assert that a rider can go from nothing to a completed ride."""
    resp = await start_ride(client)
    data = rental_schema.load(await resp.json())
    assert data["data"]["rental"]["rental_state"] == RentalState.IN_RIDE

    resp = await act(client, "toggle_wheel_lock")
    data = JSendSchema.of(rental=SnapshotSchema(), wheel_locked=Boolean()).load(await resp.json())
    assert data["data"]["wheel_locked"] is True

    resp = await act(client, "attempt_end_ride")
    assert rental_schema.load(await resp.json())["data"]["rental"]["rental_state"] == RentalState.ENDING

    resp = await act(client, "finalize_end_ride")
    data = rental_schema.load(await resp.json())
    assert data["data"]["rental"]["rental_state"] == RentalState.NONE
    assert data["data"]["rental"]["available_bike_count"] == 5


async def test_finalize_unverified(client: TestClient, lock_controller):
    lock_controller.chain_secured_to_slot = False
    await start_ride(client)
    await act(client, "attempt_end_ride")
    resp = await act(client, "finalize_end_ride")
    data = await resp.json()

    assert resp.status == 409
    assert data["data"]["code"] == "not_verified"
    assert data["data"]["rental"]["rental_state"] == "in_ride"


async def test_lock_failure(client: TestClient, lock_controller):
    """Assert that an unresponsive lock is reported as a bad gateway."""
    await client.post('/api/v1/rental', json={"type": "regular"})
    await act(client, "complete_checklist", checklist={
        "tires_ok": True, "seat_adjusted": True, "helmet": True, "lights_ok": True
    })
    lock_controller.fail = True
    resp = await act(client, "unlock_chain")
    data = await resp.json()

    assert resp.status == 502
    assert data["data"]["code"] == "lock_controller_error"
    assert data["data"]["rental"]["rental_state"] == "checklist_complete"


async def test_get_notifications(client: TestClient):
    await client.post('/api/v1/rental', json={"type": "regular"})
    resp = await client.get('/api/v1/notifications')
    data = JSendSchema.of(notifications=Many(NotificationSchema())).load(await resp.json())

    assert data["data"]["notifications"][0]["kind"] == "rental_started"
    assert data["data"]["notifications"][0]["bike_id"] == "DeisBike #3"
