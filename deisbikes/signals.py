"""
Signals
-------

Defines the signals that the aiohttp server uses to start and
stop the parts of the engine that outlive a single request.

Each signal must accept the ``app`` argument.
"""
from aiohttp.abc import Application

from deisbikes import logger


async def announce_fleet(app: Application):
    """Logs the fleet the server is starting with."""
    fleet = app["session_coordinator"].fleet
    logger.info("Starting with %d bikes, %d available", len(fleet), fleet.available_count)


async def stop_rental_clock(app: Application):
    """
    Stops the countdown of any ride still in progress.

    .. note: The clock suppresses CancelledError so that shutdown isn't interrupted by it.
    """
    coordinator = app["session_coordinator"]
    if coordinator.clock.running:
        logger.info("Stopping the rental clock")
    await coordinator.close()


def register_signals(app: Application):
    """Registers all the signals at the appropriate hooks."""
    app.on_startup.append(announce_fleet)
    app.on_cleanup.append(stop_rental_clock)
