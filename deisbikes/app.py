"""
App
-----
"""

import sentry_sdk
from aiohttp import web
from aiohttp_apispec import setup_aiohttp_apispec
from sentry_sdk.integrations.aiohttp import AioHttpIntegration

from deisbikes import server_mode, logger
from deisbikes.config import api_root, default_fleet, sentry_dsn
from deisbikes.models import Rider
from deisbikes.service import SessionCoordinator, FleetRegistry, DummyLockController, BreakerLockController
from deisbikes.service.lock_controller import LockController
from deisbikes.service.notifications import NotificationLogger
from deisbikes.signals import register_signals
from deisbikes.version import __version__, name
from deisbikes.views import register_views


def build_app(lock_controller: LockController = None, rider: Rider = None):
    """Sets up the app, with a single rider session over the seed fleet."""
    app = web.Application()

    if lock_controller is None:
        lock_controller = BreakerLockController(DummyLockController())

    coordinator = SessionCoordinator(FleetRegistry.from_seed(default_fleet), lock_controller, rider)
    app['session_coordinator'] = coordinator
    app['notification_logger'] = NotificationLogger(coordinator)

    register_signals(app)
    register_views(app, api_root)

    setup_aiohttp_apispec(
        app=app, title=name, version=__version__, url=f"{api_root}/docs",
        info={"description": "The DeisBikes rental session engine."},
    )

    # set up sentry exception tracking
    if server_mode != "development" and sentry_dsn is not None:
        logger.info("Starting Sentry Logging")
        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=server_mode,
            release=f"{name}@{__version__}",
            integrations=[AioHttpIntegration()],
        )

    return app
