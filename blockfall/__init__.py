"""Falling-block puzzle simulation with pygame and headless frontends."""

__version__ = "0.1.0"
