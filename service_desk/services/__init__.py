"""
Service layer modules.

This module contains:
- JSON file backed collection storage
"""

from .store import COLLECTIONS, JsonStore

__all__ = ["COLLECTIONS", "JsonStore"]
