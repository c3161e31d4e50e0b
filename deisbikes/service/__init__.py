"""
.. autoclasstree:: deisbikes.service

The service layer for the system. Acts as the internal API.
Each interface (the REST API, or anything embedding the engine)
should go through the :class:`SessionCoordinator` rather than
changing the fleet or the rental itself.
"""

from .coordinator import SessionCoordinator, SessionEvent, SessionSnapshot, OperationResult, ResultStatus
from .errors import RentalError
from .fleet import FleetRegistry
from .lock_controller import LockController, DummyLockController, BreakerLockController
