"""
Bike Related Views
-------------------------

Lets riders see what the fleet looks like. Bikes are handed out by the
rental views, never picked directly.
"""
from aiohttp_apispec import docs

from deisbikes.serializer import JSendSchema, JSendStatus, Many
from deisbikes.serializer.decorators import returns
from deisbikes.serializer.models import BikeSchema
from deisbikes.views.base import BaseView


class BikesView(BaseView):
    """
    Gets the whole fleet.
    """
    url = "/bikes"
    name = "bikes"

    @docs(summary="Get All Bikes")
    @returns(JSendSchema.of(bikes=Many(BikeSchema())))
    async def get(self):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"bikes": list(self.session_coordinator.fleet)}
        }


class AvailableBikesView(BaseView):
    """
    Gets the bikes that can be rented right now.
    """
    url = "/bikes/available"
    name = "available_bikes"

    @docs(summary="Get Available Bikes")
    @returns(JSendSchema.of(bikes=Many(BikeSchema())))
    async def get(self):
        return {
            "status": JSendStatus.SUCCESS,
            "data": {"bikes": self.session_coordinator.fleet.list_available()}
        }
