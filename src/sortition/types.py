from collections.abc import Mapping, Sequence
from typing import Any, Union

# A single token of a salt. Canonicalized to text before hashing.
SaltToken = Union[str, bytes, int, float]
Salt = Sequence[Any]

# The raw subject description handed to an operator as its ``unit``.
UnitInput = Union[SaltToken, Sequence[Any], Mapping[str, Any]]

Inputs = Mapping[str, Any]
ParameterSet = dict[str, Any]
