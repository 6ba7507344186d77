"""Fleetwatch - alert analysis for autonomous agent sessions."""

__version__ = "0.1.0"
