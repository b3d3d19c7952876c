"""API dependencies — Dependency injection for FastAPI endpoints."""

from __future__ import annotations

from solrfeed.core.service import FeedService

# Global service instance (set during application lifespan)
_service: FeedService | None = None


def set_service(service: FeedService | None) -> None:
    """Set the global feed service (called during app lifespan)."""
    global _service
    _service = service


def get_service() -> FeedService:
    """Get the global feed service instance.

    Raises:
        RuntimeError: If the service is not initialized.
    """
    if _service is None:
        raise RuntimeError("Feed service not initialized. Is the server running?")
    return _service
