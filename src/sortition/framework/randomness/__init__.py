"""
==============================
Random Numbers in ``sortition``
==============================

This module contains the functions and operators that make deterministic
random draws for experiment subjects.

Online experiments need every request for the same subject to see the same
variant, on any server, without storing the assignment anywhere. So instead of
a stateful random number generator, every draw is a pure function of a salt:
the experiment salt, the parameter salt, the subject's unit values and, for
operators that draw several times, the draw number. The salt is hashed and the
hash is mapped onto the unit interval or onto a range of integers.

"""
from sortition.framework.randomness.core import (
    LONG_SCALE,
    build_key,
    canonicalize,
    deviate,
    get_hash,
    uniform,
    uniform_int,
)
from sortition.framework.randomness.exceptions import (
    EncodingError,
    InvalidParameterError,
    RandomnessError,
)
from sortition.framework.randomness.operators import (
    BernoulliTrial,
    RandomFloat,
    RandomInteger,
    RandomOperator,
    Sample,
    UniformChoice,
    WeightedChoice,
)
