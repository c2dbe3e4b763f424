"""
Error taxonomy for the dispatch core.

Every error here is recoverable at a well-defined boundary:
agents recover collaborator failures, the planner
recovers planning failures, classifiers fall back to safe defaults
and the consolidator falls back to concatenation.
"""


class ConciergeError(Exception):
    """Base class for all dispatch-core errors."""

    pass


class CollaboratorError(ConciergeError):
    """Raised when a downstream lookup or write fails."""

    pass


class NoCapacityError(CollaboratorError):
    """Raised by the reservation collaborator when no table can seat the party."""

    pass


class PlanningError(ConciergeError):
    """Raised when the planner backend returns a malformed or empty plan."""

    pass


class ClassificationError(ConciergeError):
    """Raised when an interruption or resume classification cannot be parsed."""

    pass


class ConsolidationError(ConciergeError):
    """Raised when the narrator cannot produce a grounded reply."""

    pass
