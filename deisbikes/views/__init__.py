"""
.. autoclasstree:: deisbikes.views

This package contains the API for looking at the fleet and
driving a rental through its lifecycle.

API Conventions
---------------

* Accept and return JSON with snake_case key naming
* Respond with JSend_ formatted JSON to every request
* Report a rejected rental step as a ``fail`` along with the
  current state of the rental, so the client can catch up

.. _JSend: https://github.com/omniti-labs/jsend
"""

import aiohttp_cors
from aiohttp.abc import Application

from deisbikes import logger
from .bikes import BikesView, AvailableBikesView
from .notifications import NotificationsView
from .rental import RentalView, RentalActionsView

views = [
    BikesView, AvailableBikesView,
    RentalView, RentalActionsView,
    NotificationsView,
]


def register_views(app: Application, base: str):
    """
    Registers all the API views onto the given router at a specific root url.

    :param app: The app to register the views to.
    :param base: The base URL.
    """
    cors = aiohttp_cors.setup(app, defaults={
        "*": aiohttp_cors.ResourceOptions(
            allow_credentials=True,
            expose_headers="*",
            allow_headers="*",
            allow_methods="*",
        )
    })

    for view in views:
        logger.info("Registered %s at %s", view.__name__, base + view.url)
        view.register_route(app, base)
        view.enable_cors(cors)
