"""
api/limiter.py -- Shared slowapi rate limiter instance.

api/main.py mounts it as middleware; the route modules under api/routes/v1/
decorate handlers with @limiter.limit(). One instance means one counter
store: per-module limiters would each count separately and never trip.

Counters are kept in process memory and keyed by client IP. They reset on
restart and are not shared between worker processes.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
