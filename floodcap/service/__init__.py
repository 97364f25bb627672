from .flood_service import FloodService

__all__ = ["FloodService"]
