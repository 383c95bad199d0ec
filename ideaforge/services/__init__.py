"""
IdeaForge Services Module
Project persistence and HTTP hardening.
"""

from .firestore_store import FirestoreProjectStore, build_credentials
from .project_store import InMemoryProjectStore, ProjectStore
from .security import CORS_ALLOWED_HEADERS, CORS_ALLOWED_METHODS, create_limiter

__all__ = [
    "ProjectStore",
    "InMemoryProjectStore",
    "FirestoreProjectStore",
    "build_credentials",
    "create_limiter",
    "CORS_ALLOWED_METHODS",
    "CORS_ALLOWED_HEADERS",
]
