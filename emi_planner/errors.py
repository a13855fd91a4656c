"""Exceptions raised by the EMI planner engine.

Every error derives from ``ValueError`` so callers that already guard engine
calls with ``except ValueError`` (the CLI and the web API) keep working. Errors
are scoped to a single call; the engine never retries or recovers locally.
"""


class PlannerError(ValueError):
    """Base class for all engine errors."""


class InvalidInputError(PlannerError):
    """A principal, rate, tenure, date or payment value is out of range."""


class NumericOverflowError(PlannerError):
    """The amortization factor (1 + r)^n is not finite or not above one."""


class InconsistentScheduleError(PlannerError):
    """The simulation drove the outstanding balance below zero."""
