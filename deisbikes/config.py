import os
from datetime import timedelta

server_mode = os.getenv("SERVER_MODE", "development")
"""The operational mode of the server."""

api_root = "/api/v1"
"""The base url for the api."""

tick_interval = timedelta(seconds=float(os.getenv("TICK_INTERVAL", "1")))
"""How often the countdown clock of a ride ticks."""

lock_breaker_fail_max = int(os.getenv("LOCK_BREAKER_FAIL_MAX", "5"))
"""The number of consecutive lock controller failures before the breaker opens."""

lock_breaker_timeout = timedelta(seconds=float(os.getenv("LOCK_BREAKER_TIMEOUT", "60")))
"""How long the lock controller breaker stays open before letting a call through."""

sentry_dsn = os.getenv("SENTRY_DSN", None)
"""The sentry DSN, exceptions are only reported when it is set."""

default_fleet = [
    ("DeisBike #1", 72, "Good"),
    ("DeisBike #2", 35, "Rear reflector loose"),
    ("DeisBike #3", 92, "Excellent"),
    ("DeisBike #4", 18, "Low lock battery"),
    ("DeisBike #5", 55, "Seat squeaks"),
]
"""The seed fleet as (id, lock battery percent, condition note)."""
