"""Errors raised by the inference engine."""


class GradeSpyError(Exception):
    """Base class for every error the engine raises."""


class SourceUnavailable(GradeSpyError):
    """The aggregate source failed to answer a query."""


class InvariantViolation(GradeSpyError):
    """The possibility graph lost its single root."""


class MalformedAggregate(GradeSpyError, ValueError):
    """A reported average is not a valid 2-decimal grade average."""
