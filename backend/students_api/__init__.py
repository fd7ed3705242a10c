"""CRUD web service for Student records."""

__version__ = "1.0.0"
