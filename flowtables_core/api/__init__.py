"""
API Module

FastAPI application exposing tables, fields and records.
"""

from .app import create_app

__all__ = ["create_app"]
