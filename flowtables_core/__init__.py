"""
Flow Tables
===========

Table and record storage for the workflow-automation platform.

This package provides:
- Tables, fields and records with per-cell storage
- Filtered record queries and cell upserts
- Record event fan-out to subscribed flows
- REST API endpoints
"""

__version__ = "1.0.0"
