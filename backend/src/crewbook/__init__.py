"""Crewbook - multi-tenant HR and organisation management backend."""

__version__ = "0.1.0"
