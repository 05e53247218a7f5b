"""Recurring specialist schedules: slot generation, availability and edit/delete locks."""

__version__ = "0.1.0"
