"""
    This module contains the exceptions raised by the detector simulation.
"""


class ConfigurationError(ValueError):
    """Invalid simulation settings, raised before any event is processed."""


class PreconditionError(ValueError):
    """Per-event input that breaks the charge source or geometry contract."""
