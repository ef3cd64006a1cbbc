"""
============================
Assignment System Exceptions
============================

Errors related to improper use of an assignment context.

"""
from sortition.exceptions import SortitionError


class AssignmentError(SortitionError):
    """Generic error class for the assignment system."""

    pass


class UndefinedSlotError(AssignmentError, KeyError):
    """Raised when reading a parameter slot that was never assigned."""

    def __str__(self) -> str:
        # KeyError quotes its message; we want it printed as is.
        return str(self.args[0]) if self.args else ""
