"""Notive - note taking backend and session client."""

__version__ = "1.0.0"
