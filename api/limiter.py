"""
api/limiter.py -- The one slowapi Limiter shared by the whole app.

api/main.py mounts it as middleware and api/routes/v1/auth.py decorates the
login route with it. Both must see the same instance: a second Limiter would
keep its own counters and the login limit would never trigger.

Counters live in process memory, so each worker process limits on its own.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
