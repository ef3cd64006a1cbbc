"""
================
Random Operators
================

Random operators turn a salt prefix and a set of declared parameters into an
experiment parameter value. Each operator appends its unit values (and, for
multi-draw operators, a draw index) to the prefix and consumes deviates from
:mod:`sortition.framework.randomness.core`.

Operators are immutable and validate their parameters on construction::

    params["button_color"] = UniformChoice(choices=["red", "blue"], unit=user_id)

They are evaluated lazily by an
:class:`Assignment <sortition.framework.assignment.Assignment>`, which
supplies the salt prefix.

"""
from __future__ import annotations

import math
import numbers
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np

from sortition.framework.randomness import core
from sortition.framework.randomness.exceptions import InvalidParameterError
from sortition.types import UnitInput


class RandomOperator(ABC):
    """Base class for the operators that draw experiment parameter values.

    Parameters
    ----------
    unit
        The subject being randomized. A scalar, a sequence of scalars, or a
        mapping whose values are used in insertion order.
    salt
        Replaces the assignment slot name in the salt.
    full_salt
        Replaces both the experiment salt and the parameter salt.
    """

    def __init__(
        self,
        unit: UnitInput,
        salt: str | None = None,
        full_salt: str | None = None,
    ):
        self._unit = _normalize_unit(unit)
        self._salt = salt
        self._full_salt = full_salt

    ##############
    # Properties #
    ##############

    @property
    def unit(self) -> tuple[Any, ...]:
        """The unit values appended to every salt this operator hashes."""
        return self._unit

    @property
    def salt(self) -> str | None:
        """The parameter-level salt override, if any."""
        return self._salt

    @property
    def full_salt(self) -> str | None:
        """The salt override replacing both experiment and parameter salts, if any."""
        return self._full_salt

    @property
    def parameters(self) -> dict[str, Any]:
        """The declared parameters of this operator."""
        return {}

    ##################
    # Public methods #
    ##################

    def salt_prefix(self, experiment_salt: Any, name: str) -> tuple[Any, ...]:
        """Builds the salt prefix for this operator assigned to slot ``name``."""
        if self._full_salt is not None:
            return (self._full_salt,)
        return (experiment_salt, self._salt if self._salt is not None else name)

    def evaluate(self, experiment_salt: Any, name: str) -> Any:
        """Draws this operator's value for slot ``name`` of an experiment."""
        return self.draw(self.salt_prefix(experiment_salt, name))

    @abstractmethod
    def draw(self, prefix: Sequence[Any]) -> Any:
        """Draws this operator's value from a salt prefix.

        Parameters
        ----------
        prefix
            The experiment and parameter salts, or a full salt.

        Returns
        -------
            The drawn value.
        """
        pass

    ##################
    # Helper methods #
    ##################

    def _key(self, prefix: Sequence[Any], *appended: Any) -> tuple[Any, ...]:
        return (*prefix, *self._unit, *appended)

    def __repr__(self) -> str:
        args = [f"{name}={value!r}" for name, value in self.parameters.items()]
        args.append(f"unit={self._unit!r}")
        if self._salt is not None:
            args.append(f"salt={self._salt!r}")
        if self._full_salt is not None:
            args.append(f"full_salt={self._full_salt!r}")
        return f"{type(self).__name__}({', '.join(args)})"


class BernoulliTrial(RandomOperator):
    """Returns 1 with probability ``p`` and 0 otherwise."""

    def __init__(self, p: float, unit: UnitInput, **kwargs: Any):
        super().__init__(unit, **kwargs)
        if not _is_number(p) or not 0 <= p <= 1:
            raise InvalidParameterError(
                f"Bernoulli probability must be in [0, 1]. You provided {p!r}."
            )
        self._p = float(p)

    @property
    def parameters(self) -> dict[str, Any]:
        return {"p": self._p}

    def draw(self, prefix: Sequence[Any]) -> int:
        return 1 if core.deviate(self._key(prefix)) < self._p else 0


class UniformChoice(RandomOperator):
    """Chooses one of ``choices`` with equal probability per entry.

    Repeated entries receive proportionally more probability mass.
    """

    def __init__(self, choices: Sequence[Any], unit: UnitInput, **kwargs: Any):
        super().__init__(unit, **kwargs)
        self._choices = _as_choices(choices)
        if not self._choices:
            raise InvalidParameterError("UniformChoice requires at least one choice.")

    @property
    def parameters(self) -> dict[str, Any]:
        return {"choices": list(self._choices)}

    def draw(self, prefix: Sequence[Any]) -> Any:
        index = core.uniform_int(self._key(prefix), 0, len(self._choices) - 1)
        return self._choices[index]


class WeightedChoice(RandomOperator):
    """Chooses one of ``choices`` with probability proportional to ``weights``.

    ``weights`` may instead be a mapping from choice to weight, in which case
    ``choices`` is omitted.
    """

    def __init__(
        self,
        choices: Sequence[Any] | None = None,
        weights: Sequence[float] | Mapping[Any, float] | None = None,
        unit: UnitInput = None,
        **kwargs: Any,
    ):
        super().__init__(unit, **kwargs)
        if isinstance(weights, Mapping):
            if choices is not None:
                raise InvalidParameterError(
                    "Choices cannot be provided alongside a mapping of weights."
                )
            choices, weights = list(weights.keys()), list(weights.values())
        if choices is None or weights is None:
            raise InvalidParameterError("WeightedChoice requires choices and weights.")

        self._choices = _as_choices(choices)
        weights = list(weights)
        if len(weights) != len(self._choices):
            raise InvalidParameterError(
                f"Got {len(weights)} weights for {len(self._choices)} choices."
            )
        if not all(_is_number(w) for w in weights):
            raise InvalidParameterError(f"Weights must be finite numbers. Weights: {weights}.")
        self._weights = np.array(weights, dtype=np.float64)
        if np.any(self._weights < 0):
            raise InvalidParameterError(f"Weights must be non-negative. Weights: {weights}.")
        if not np.any(self._weights > 0):
            raise InvalidParameterError(
                f"At least one weight must be positive. Weights: {weights}."
            )
        with np.errstate(over="ignore"):
            self._cumulative_weights = np.cumsum(self._weights)
        if not np.isfinite(self._cumulative_weights[-1]):
            raise InvalidParameterError(
                f"The total of the weights must be finite. Weights: {weights}."
            )

    @property
    def parameters(self) -> dict[str, Any]:
        return {"choices": list(self._choices), "weights": self._weights.tolist()}

    def draw(self, prefix: Sequence[Any]) -> Any:
        stop_value = core.deviate(self._key(prefix)) * self._cumulative_weights[-1]
        # First bin whose cumulative weight strictly exceeds the draw.
        index = int(np.searchsorted(self._cumulative_weights, stop_value, side="right"))
        if index == len(self._choices):
            # The draw hit the total weight exactly.
            index = int(np.flatnonzero(self._weights)[-1])
        return self._choices[index]


class RandomInteger(RandomOperator):
    """Draws an integer uniformly from ``[min_value, max_value]``."""

    def __init__(self, min_value: int, max_value: int, unit: UnitInput, **kwargs: Any):
        super().__init__(unit, **kwargs)
        if not isinstance(min_value, numbers.Integral) or not isinstance(
            max_value, numbers.Integral
        ):
            raise InvalidParameterError(
                f"RandomInteger bounds must be integers. You provided {min_value!r} "
                f"and {max_value!r}."
            )
        if min_value > max_value:
            raise InvalidParameterError(
                f"Minimum {min_value} is greater than maximum {max_value}."
            )
        self._min_value = int(min_value)
        self._max_value = int(max_value)

    @property
    def parameters(self) -> dict[str, Any]:
        return {"min_value": self._min_value, "max_value": self._max_value}

    def draw(self, prefix: Sequence[Any]) -> int:
        return core.uniform_int(self._key(prefix), self._min_value, self._max_value)


class RandomFloat(RandomOperator):
    """Draws a float uniformly from ``[min_value, max_value]``."""

    def __init__(
        self, min_value: float, max_value: float, unit: UnitInput, **kwargs: Any
    ):
        super().__init__(unit, **kwargs)
        if not _is_number(min_value) or not _is_number(max_value):
            raise InvalidParameterError(
                f"RandomFloat bounds must be finite numbers. You provided {min_value!r} "
                f"and {max_value!r}."
            )
        if min_value > max_value:
            raise InvalidParameterError(
                f"Minimum {min_value} is greater than maximum {max_value}."
            )
        self._min_value = float(min_value)
        self._max_value = float(max_value)

    @property
    def parameters(self) -> dict[str, Any]:
        return {"min_value": self._min_value, "max_value": self._max_value}

    def draw(self, prefix: Sequence[Any]) -> float:
        return core.uniform(self._key(prefix), self._min_value, self._max_value)


class Sample(RandomOperator):
    """Draws ``draws`` entries of ``choices`` without replacement.

    Positions, not values, are drawn without replacement, so repeated values
    may appear more than once in the result. The result is in draw order.
    ``draws`` defaults to ``len(choices)``, which yields a shuffle.
    """

    def __init__(
        self,
        choices: Sequence[Any],
        unit: UnitInput,
        draws: int | None = None,
        **kwargs: Any,
    ):
        super().__init__(unit, **kwargs)
        self._choices = _as_choices(choices)
        if draws is None:
            draws = len(self._choices)
        if not isinstance(draws, numbers.Integral) or not 0 <= draws <= len(self._choices):
            raise InvalidParameterError(
                f"Sample draws must be an integer in [0, {len(self._choices)}]. "
                f"You provided {draws!r}."
            )
        self._draws = int(draws)

    @property
    def parameters(self) -> dict[str, Any]:
        return {"choices": list(self._choices), "draws": self._draws}

    def draw(self, prefix: Sequence[Any]) -> list[Any]:
        pool = list(range(len(self._choices)))
        sample = []
        for i in range(self._draws):
            j = core.uniform_int(self._key(prefix, i), 0, len(pool) - 1)
            sample.append(self._choices[pool[j]])
            pool[j] = pool[-1]
            pool.pop()
        return sample


def _normalize_unit(unit: UnitInput) -> tuple[Any, ...]:
    if unit is None:
        raise InvalidParameterError("Random operators require a unit.")
    if isinstance(unit, Mapping):
        values = tuple(unit.values())
    elif isinstance(unit, (str, bytes)) or not isinstance(unit, Sequence):
        values = (unit,)
    else:
        values = tuple(unit)
    if not values:
        raise InvalidParameterError("Random operators require a non-empty unit.")
    return values


def _as_choices(choices: Sequence[Any]) -> tuple[Any, ...]:
    if isinstance(choices, np.ndarray):
        choices = choices.tolist()
    if isinstance(choices, (str, bytes)) or not isinstance(choices, Sequence):
        raise InvalidParameterError(f"Choices must be a sequence. You provided {choices!r}.")
    return tuple(choices)


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )
