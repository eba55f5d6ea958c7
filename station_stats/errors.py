"""
Exceptions raised by the statistics engine.

All derive from ``StatisticsError``, itself a ``ValueError``, so callers
that already guard numeric input with ``except ValueError`` keep working.
None of them is fatal: the caller decides whether to ask for corrected
input or fall back to a default.
"""


class StatisticsError(ValueError):
    """Base class for statistics engine failures."""


class EmptyDatasetError(StatisticsError):
    """Raised when a statistic is requested over zero readings."""


class InsufficientDataError(StatisticsError):
    """Raised when a variance needs at least two readings and fewer were given."""


class InvalidThresholdError(StatisticsError):
    """Raised for a non-finite threshold or an inconsistent comparison setup."""
