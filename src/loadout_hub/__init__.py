"""Loadout Hub: community weapon build sharing service."""

__version__ = "0.1.0"
