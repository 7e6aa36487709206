"""Nonprofit Events & Donations API package."""

__version__ = "1.0.0"
