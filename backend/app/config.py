"""
Application configuration.

Re-exports the settings from the codiro core package so backend modules
can import them relative to the app.
"""

from codiro.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
