"""
Exceptions raised by the reaction-diffusion engine.

Configuration and allocation problems surface synchronously when a
diagram is constructed. Nothing is retried; the caller rebuilds the
session.
"""


class TuringPatternsError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(TuringPatternsError, ValueError):
    """Invalid construction parameters, seed procedure or step parameters."""


class AllocationError(TuringPatternsError, RuntimeError):
    """A simulation buffer could not be allocated."""
