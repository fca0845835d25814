"""
LPAR Inventory — Shared slowapi rate limiter instance.

Import in any router that needs @limiter.limit() decorators.
Key function: get_remote_address (IP-based limiting).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


def mutation_limit() -> str:
    """Limit string for bulk mutations, read at request time."""
    return settings.mutation_rate_limit
