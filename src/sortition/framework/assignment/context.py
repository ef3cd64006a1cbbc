"""
===================
Assignment Contexts
===================

An :class:`Assignment` holds the parameter values of one subject in one
experiment. Random operators written into it are not evaluated until the slot
is first read, and each one is evaluated at most once. The slot name doubles
as the parameter salt unless the operator declares its own.

"""
from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from typing import Any

from loguru import logger

from sortition.framework.assignment.exceptions import UndefinedSlotError
from sortition.framework.randomness.operators import RandomOperator
from sortition.types import ParameterSet


class Assignment(MutableMapping[str, Any]):
    """A lazily evaluated mapping of parameter names to values.

    Parameters
    ----------
    experiment_salt
        The experiment-level salt prepended to every draw.
    overrides
        Values that replace whatever is assigned to the same names.

    Notes
    -----
    Should not be shared between subjects. Experiments build a fresh
    assignment for every subject they evaluate.
    """

    def __init__(self, experiment_salt: Any, overrides: Mapping[str, Any] | None = None):
        self._experiment_salt = experiment_salt
        self._overrides = dict(overrides) if overrides else {}
        self._data: dict[str, Any] = {}
        self._pending: set[str] = set()

    @property
    def experiment_salt(self) -> Any:
        """The experiment-level salt of every draw made by this assignment."""
        return self._experiment_salt

    @property
    def overrides(self) -> dict[str, Any]:
        """A copy of the override values."""
        return dict(self._overrides)

    def __setitem__(self, name: str, value: Any) -> None:
        if not isinstance(name, str):
            raise TypeError(f"Parameter names must be strings. You provided {name!r}.")
        if name in self._overrides:
            # Overridden slots are never drawn.
            self._data[name] = self._overrides[name]
            self._pending.discard(name)
            return
        self._data[name] = value
        if isinstance(value, RandomOperator):
            self._pending.add(name)
        else:
            self._pending.discard(name)

    def __getitem__(self, name: str) -> Any:
        if name in self._overrides:
            return self._overrides[name]
        if name not in self._data:
            raise UndefinedSlotError(f"Parameter '{name}' has not been assigned.")
        if name in self._pending:
            operator = self._data[name]
            self._data[name] = operator.evaluate(self._experiment_salt, name)
            self._pending.discard(name)
            logger.debug("Evaluated {} for parameter '{}'.", operator, name)
        return self._data[name]

    def __delitem__(self, name: str) -> None:
        if name not in self._data:
            raise UndefinedSlotError(f"Parameter '{name}' has not been assigned.")
        del self._data[name]
        self._pending.discard(name)

    def __iter__(self) -> Iterator[str]:
        yield from self._data
        yield from (name for name in self._overrides if name not in self._data)

    def __len__(self) -> int:
        return len(self._data) + sum(1 for name in self._overrides if name not in self._data)

    def __contains__(self, name: object) -> bool:
        return name in self._data or name in self._overrides

    def is_evaluated(self, name: str) -> bool:
        """Whether the slot ``name`` holds a final value."""
        if name not in self:
            raise UndefinedSlotError(f"Parameter '{name}' has not been assigned.")
        return name not in self._pending

    def to_dict(self) -> ParameterSet:
        """Evaluates every slot and exports the parameter set.

        Returns
        -------
            Assigned names in assignment order, followed by names that only
            appear in the overrides.
        """
        return {name: self[name] for name in self}

    def __repr__(self) -> str:
        return "Assignment(experiment_salt={!r}, slots={!r})".format(
            self._experiment_salt, list(self)
        )
