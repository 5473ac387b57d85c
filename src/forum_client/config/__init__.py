"""Configuration module for the forum client."""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
