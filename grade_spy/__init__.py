"""grade-spy - reconstruct individual grades from published class averages.

Builds every assignment of scored items to group members that is
indistinguishable from the truth, given only sorted average lists.
"""

from .distinguish import DistinguishConfig, DistinguishResult, distinguish, iter_distinguish
from .errors import GradeSpyError, InvariantViolation, MalformedAggregate, SourceUnavailable
from .source import CachingSource, Category, InMemorySource, Source

__version__ = "0.3.0"
__all__ = [
    "distinguish",
    "iter_distinguish",
    "DistinguishConfig",
    "DistinguishResult",
    "Source",
    "Category",
    "InMemorySource",
    "CachingSource",
    "GradeSpyError",
    "SourceUnavailable",
    "InvariantViolation",
    "MalformedAggregate",
]
