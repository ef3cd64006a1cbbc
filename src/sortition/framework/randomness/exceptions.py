"""
============================
Randomness System Exceptions
============================

Errors related to improper use of the randomness system.

"""
from sortition.exceptions import SortitionError


class RandomnessError(SortitionError):
    """Generic error class for the randomness system."""

    pass


class EncodingError(RandomnessError):
    """Raised when a salt token cannot be converted to canonical text."""

    pass


class InvalidParameterError(RandomnessError):
    """Raised when random operator parameters violate their constraints."""

    pass
