"""
=========================
Core Randomness Functions
=========================

This module turns salts into uniformly distributed numbers.

A salt is an ordered sequence of primitive tokens (the experiment salt, the
parameter salt, the unit values and possibly a draw index). Every token is
converted to canonical text, the tokens are joined with
:data:`SALT_DELIMITER` and the result is hashed with SHA-1. The first
:data:`HASH_HEX_DIGITS` hexadecimal digits of the digest are read as an
unsigned integer, which is then scaled by :data:`LONG_SCALE` into the unit
interval.

This pipeline is a compatibility contract. Any change to canonicalization,
the delimiter, the hash or the reduction re-randomizes every live experiment.

Attributes
----------
SALT_DELIMITER : str
    Separator placed between canonical salt tokens.
HASH_HEX_DIGITS : int
    Number of leading hexadecimal digest digits used for the hash.
LONG_SCALE : int
    The largest value :func:`get_hash` can produce.

"""
from __future__ import annotations

import hashlib
import math
import numbers
from typing import Any

from sortition.framework.randomness.exceptions import EncodingError, InvalidParameterError
from sortition.types import Salt

SALT_DELIMITER = "."
HASH_HEX_DIGITS = 15
LONG_SCALE = 0xFFFFFFFFFFFFFFF  # 16**15 - 1


def canonicalize(token: Any) -> str:
    """Converts a single salt token to its canonical text form.

    Parameters
    ----------
    token
        A string, bytes, boolean, integer or float.

    Returns
    -------
        The canonical text of the token.

    Raises
    ------
    EncodingError
        If the token has an unsupported type, is a non-finite float, or is
        text that cannot be represented as UTF-8.
    """
    if isinstance(token, str):
        try:
            token.encode("utf8")
        except UnicodeEncodeError as e:
            raise EncodingError(f"Salt token {token!r} is not valid unicode text.") from e
        return token
    if isinstance(token, bytes):
        try:
            return token.decode("utf8")
        except UnicodeDecodeError as e:
            raise EncodingError(f"Salt token {token!r} is not UTF-8 encoded.") from e
    if isinstance(token, bool):
        return "true" if token else "false"
    if isinstance(token, numbers.Integral):
        return str(int(token))
    if isinstance(token, numbers.Real):
        value = float(token)
        if not math.isfinite(value):
            raise EncodingError(f"Salt token {token!r} is not a finite number.")
        if value.is_integer():
            return str(int(value))
        return repr(value)
    raise EncodingError(
        f"Salt token {token!r} of type {type(token).__name__} has no canonical text form."
    )


def build_key(salt: Salt) -> str:
    """Joins the canonical text of every token in a salt."""
    if isinstance(salt, (str, bytes)):
        # A bare string is one token, not a sequence of characters.
        salt = [salt]
    return SALT_DELIMITER.join(canonicalize(token) for token in salt)


def get_hash(salt: Salt) -> int:
    """Gets a hash of the provided salt.

    Parameters
    ----------
    salt
        An ordered sequence of salt tokens.

    Returns
    -------
        An integer in ``[0, LONG_SCALE]``.
    """
    digest = hashlib.sha1(build_key(salt).encode("utf8")).hexdigest()
    return int(digest[:HASH_HEX_DIGITS], 16)


def deviate(salt: Salt) -> float:
    """Gets a uniformly distributed number from the unit interval.

    The upper endpoint is only reachable when the leading digest digits are
    all ``f``.
    """
    return get_hash(salt) / LONG_SCALE


def uniform(salt: Salt, min_value: float = 0.0, max_value: float = 1.0) -> float:
    """Scales a deviate onto ``[min_value, max_value]``."""
    draw = deviate(salt)
    span = max_value - min_value
    if math.isfinite(span):
        value = min_value + draw * span
    else:
        # The width of the range overflows.
        value = min_value * (1 - draw) + max_value * draw
    return min(max(value, min_value), max_value)


def uniform_int(salt: Salt, low: int, high: int) -> int:
    """Gets a uniformly distributed integer from ``[low, high]``.

    Parameters
    ----------
    salt
        An ordered sequence of salt tokens.
    low
        The smallest value that can be returned.
    high
        The largest value that can be returned.

    Returns
    -------
        An integer in ``[low, high]``.

    Raises
    ------
    InvalidParameterError
        If ``low`` is greater than ``high``.
    """
    if low > high:
        raise InvalidParameterError(
            f"Lower bound {low} is greater than upper bound {high}."
        )
    return low + get_hash(salt) % (high - low + 1)
