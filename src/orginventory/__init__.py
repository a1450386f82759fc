"""Salesforce org inventory with capability probing and resilient queries."""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
