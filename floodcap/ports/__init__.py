"""
Port interfaces for floodcap hexagonal architecture.

This module defines the port interfaces (Protocols) that define
the contracts between the core domain and external adapters.
"""

from .database import DatabasePort, QueryText

__all__ = ["DatabasePort", "QueryText"]
