"""Rate limiting configuration using slowapi.

Provides a module-level Limiter instance wired into the FastAPI app in
main.py. The default limit comes from ``settings.RATE_LIMIT``.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from breakbook.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT],
    enabled=settings.RATE_LIMIT_ENABLED,
)
