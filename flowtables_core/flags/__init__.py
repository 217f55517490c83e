"""
Flags Module

Platform-wide key/value settings such as the public URL.
"""

from .service import FlagId, FlagService

__all__ = ["FlagId", "FlagService"]
