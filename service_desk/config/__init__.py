"""
Runtime configuration.

Settings are read once from the environment (and an optional .env file)
and passed explicitly to the store, the SMS adapter and the handlers.
"""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
