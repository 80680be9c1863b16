"""Business logic services layer.

Core services for ani-shelf:
- state_store: Persisted watch history and My List
- catalog_service: Jikan catalog API client
"""

from services import catalog_service, state_store

__all__ = [
    "catalog_service",
    "state_store",
]
