from datetime import timedelta

import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient
from faker import Faker

from deisbikes.models import Bike, Rider, SafetyChecklist
from deisbikes.service import SessionCoordinator, FleetRegistry, DummyLockController
from deisbikes.service.clock import CountdownClock
from deisbikes.service.notifications import NotificationLogger
from deisbikes.signals import register_signals
from deisbikes.views import register_views

fake = Faker()

SEED_BATTERIES = {
    "DeisBike #1": 72,
    "DeisBike #2": 35,
    "DeisBike #3": 92,
    "DeisBike #4": 18,
    "DeisBike #5": 55,
}


@pytest.fixture
def random_bike_factory():
    def create_bike(battery=None, available=True):
        return Bike(
            id=f"DeisBike #{fake.unique.random_int(min=100, max=999)}",
            available=available,
            battery_percent=battery if battery is not None else fake.random_int(min=0, max=100),
            condition_note=fake.sentence(nb_words=3),
        )

    return create_bike


@pytest.fixture
def fleet() -> FleetRegistry:
    """The five bike campus fleet, all available."""
    return FleetRegistry(
        Bike(bike_id, True, battery, fake.sentence(nb_words=3))
        for bike_id, battery in SEED_BATTERIES.items()
    )


@pytest.fixture
def lock_controller() -> DummyLockController:
    return DummyLockController()


@pytest.fixture
def clock() -> CountdownClock:
    """A clock slow enough that it never ticks on its own during a test."""
    return CountdownClock(timedelta(hours=1))


@pytest.fixture
def rider() -> Rider:
    return Rider(email=fake.email())


@pytest.fixture
async def coordinator(fleet, lock_controller, rider, clock) -> SessionCoordinator:
    coordinator = SessionCoordinator(fleet, lock_controller, rider, clock)
    yield coordinator
    await coordinator.close()


@pytest.fixture
def notification_logger(coordinator) -> NotificationLogger:
    return NotificationLogger(coordinator)


@pytest.fixture
def full_checklist() -> SafetyChecklist:
    return SafetyChecklist(tires_ok=True, seat_adjusted=True, helmet=True, lights_ok=True)


@pytest.fixture
async def riding_coordinator(coordinator, full_checklist) -> SessionCoordinator:
    """A coordinator whose rider is out on a regular rental."""
    await coordinator.begin_rental("regular")
    await coordinator.complete_checklist(full_checklist)
    await coordinator.unlock_chain()
    await coordinator.confirm_chain_secured(True)
    await coordinator.unlock_wheel()
    return coordinator


@pytest.fixture
async def client(aiohttp_client, coordinator, notification_logger) -> TestClient:
    app = web.Application()

    app['session_coordinator'] = coordinator
    app['notification_logger'] = notification_logger

    register_signals(app)
    register_views(app, "/api/v1")

    return await aiohttp_client(app)
