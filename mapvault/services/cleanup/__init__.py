from .cleanup_service import CleanupService

__all__ = ["CleanupService"]
