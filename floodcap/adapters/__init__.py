"""
Adapters for floodcap hexagonal architecture.

This module contains the concrete implementations of port interfaces
that handle external I/O and infrastructure concerns.
"""

from .postgres import PostgresDatabase

__all__ = ["PostgresDatabase"]
