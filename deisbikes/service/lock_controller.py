"""
Lock Controller
---------------

The engine talks to the smart lock on the bike through a
:class:`LockController`. It asks the lock to release the chain and the rear
wheel, and asks it whether the chain ended up back in the right slot of the
shelter at the end of the ride.

Any of these calls can fail. They are attempted once, and a failure is
reported back to the rider as a :class:`~deisbikes.service.errors.LockControllerError`.
"""
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import List

from aiobreaker import CircuitBreaker, CircuitBreakerError

from deisbikes.config import lock_breaker_fail_max, lock_breaker_timeout
from deisbikes.service.errors import LockControllerError


class LockController(ABC):

    @abstractmethod
    async def unlock_chain(self):
        """
        Releases the security chain so the rider can stow it.

        :raises LockControllerError: When the lock could not be reached.
        """

    @abstractmethod
    async def unlock_wheel(self):
        """Releases the rear wheel lock."""

    @abstractmethod
    async def toggle_wheel_lock(self) -> bool:
        """
        Locks or unlocks the rear wheel mid ride.

        :return: Whether the wheel is now locked.
        """

    @abstractmethod
    async def verify_chain_secured_to_slot(self) -> bool:
        """Asks the lock whether the chain is secured to the correct slot in the shelter."""


class DummyLockController(LockController):
    """
    A lock that does what it is told, for development and testing.

    Set ``fail`` to make every call raise, and ``chain_secured_to_slot``
    to decide what the end of ride verification reports.
    """

    def __init__(self, chain_secured_to_slot=True, fail=False):
        self.chain_secured_to_slot = chain_secured_to_slot
        self.fail = fail
        self.chain_locked = True
        self.wheel_locked = True
        self.calls: List[str] = []

    def _call(self, name):
        self.calls.append(name)
        if self.fail:
            raise LockControllerError(f"The lock did not respond to {name}.")

    async def unlock_chain(self):
        self._call("unlock_chain")
        self.chain_locked = False

    async def unlock_wheel(self):
        self._call("unlock_wheel")
        self.wheel_locked = False

    async def toggle_wheel_lock(self) -> bool:
        self._call("toggle_wheel_lock")
        self.wheel_locked = not self.wheel_locked
        return self.wheel_locked

    async def verify_chain_secured_to_slot(self) -> bool:
        self._call("verify_chain_secured_to_slot")
        return self.chain_secured_to_slot


class BreakerLockController(LockController):
    """
    Wraps another controller in a circuit breaker. After ``fail_max``
    failures in a row the lock is not contacted again until ``timeout``
    has passed, and calls fail straight away instead.
    """

    def __init__(self, controller: LockController, fail_max: int = None, timeout: timedelta = None):
        self.controller = controller
        self.breaker = CircuitBreaker(
            fail_max=fail_max if fail_max is not None else lock_breaker_fail_max,
            timeout_duration=timeout if timeout is not None else lock_breaker_timeout,
        )

    async def _call(self, func):
        try:
            return await self.breaker.call_async(func)
        except CircuitBreakerError as error:
            raise LockControllerError("The bike lock is not responding, please try again later.") from error
        except LockControllerError:
            raise
        except (ConnectionError, TimeoutError) as error:
            raise LockControllerError() from error

    async def unlock_chain(self):
        await self._call(self.controller.unlock_chain)

    async def unlock_wheel(self):
        await self._call(self.controller.unlock_wheel)

    async def toggle_wheel_lock(self) -> bool:
        return await self._call(self.controller.toggle_wheel_lock)

    async def verify_chain_secured_to_slot(self) -> bool:
        return await self._call(self.controller.verify_chain_secured_to_slot)
