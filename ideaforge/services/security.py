"""
HTTP hardening for the IdeaForge API: CORS settings and rate limiting.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

CORS_ALLOWED_METHODS = ["GET", "POST", "OPTIONS"]
CORS_ALLOWED_HEADERS = ["Authorization", "Content-Type"]


def create_limiter(enabled: bool = True) -> Limiter:
    """Per-application limiter keyed by client address."""
    return Limiter(key_func=get_remote_address, enabled=enabled)
