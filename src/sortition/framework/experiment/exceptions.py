"""
=====================
Experiment Exceptions
=====================

Exception classes for the experiment lifecycle.

"""
from sortition.exceptions import SortitionError


class StateError(SortitionError):
    """Error raised when experiment lifecycle ordering contracts are violated."""

    pass


class ExposureLoggingError(SortitionError):
    """Reported when an exposure logger fails to record an exposure.

    Never raised by the experiment lifecycle; handed to the ``on_error``
    callback instead.
    """

    pass
