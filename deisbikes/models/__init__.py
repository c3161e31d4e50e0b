"""
The models package contains the entities the rental engine works with.

.. autoclasstree:: deisbikes.models
"""

from .bike import Bike
from .rental import Rental, RentalState, RentalType, RentalUpdate, SafetyChecklist
from .rider import Rider, RiderStatus
