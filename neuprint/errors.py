"""
NeuPrint Errors

Scoring never raises on sparse or malformed counts; it degrades to
defaults instead. The only inputs that fail hard are role
configurations, where silently renormalizing weights would change
the ranking without anyone noticing.
"""


class NeuPrintError(Exception):
    """Base class for errors raised by the scoring pipeline."""


class RoleConfigError(NeuPrintError, ValueError):
    """Raised for invalid role weights, out-of-range axes or unknown job IDs."""
