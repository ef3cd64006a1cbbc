"""
===========
Experiments
===========

An :class:`Experiment` computes the parameters of one subject. Subclasses
describe the experiment in two methods::

    class ButtonExperiment(Experiment):
        def setup(self):
            self.name = "button_experiment"

        def assign(self, params, inputs):
            params["color"] = UniformChoice(choices=["red", "blue"], unit=inputs["userid"])
            params["text"] = WeightedChoice(
                weights={"Join": 0.8, "Sign up": 0.2}, unit=inputs["userid"]
            )

    params = ButtonExperiment(userid=42).get_params()

An experiment instance moves through the states in
:mod:`sortition.framework.experiment.lifecycle_states` exactly once. It is
meant to be thrown away after the parameters of its subject are read.

"""
from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any

import loguru
from layered_config_tree import LayeredConfigTree
from loguru import logger

from sortition.framework.assignment import Assignment
from sortition.framework.configuration import build_experiment_configuration
from sortition.framework.experiment import lifecycle_states
from sortition.framework.experiment.exceptions import ExposureLoggingError, StateError
from sortition.framework.logging.exposure import ExposureLogger
from sortition.framework.logging.utilities import normalize_log_level
from sortition.types import Inputs, ParameterSet


class Experiment(ABC):
    """An experiment that assigns parameters to a single subject.

    Parameters
    ----------
    inputs
        The subject's inputs, for example ``{"userid": 42}``.
    configuration
        Values layered on top of the experiment's configuration defaults.
    **kwargs
        Additional inputs.
    """

    CONFIGURATION_DEFAULTS: dict[str, Any] = {}
    """A dictionary containing the defaults for any configurations managed by this
    experiment. Stored in the ``experiment_defaults`` layer of the configuration.
    """

    def __init__(
        self,
        inputs: Inputs | None = None,
        configuration: dict[str, Any] | LayeredConfigTree | None = None,
        **kwargs: Any,
    ):
        self._inputs = {**(inputs or {}), **kwargs}
        self._state = lifecycle_states.CREATED
        self._name = type(self).__name__
        self._salt: Any = None

        self.configuration = build_experiment_configuration(
            self.configuration_defaults, configuration
        )
        self._log_level = normalize_log_level(self.configuration.experiment.log_level)
        self._auto_exposure_log = bool(self.configuration.experiment.auto_exposure_log)
        self.in_experiment = True
        """Whether the subject takes part in the experiment. Exposures are not
        logged for subjects outside the experiment."""

        self._overrides: dict[str, Any] = {}
        self._exposure_logger: ExposureLogger | None = None
        self._on_log_error: Callable[[Exception], None] | None = None
        self._exposure_logged = False
        self._assignment: Assignment | None = None
        self._params: ParameterSet | None = None

        self.setup()
        self._transition(lifecycle_states.SETUP)

    ##############
    # Properties #
    ##############

    @property
    def configuration_defaults(self) -> dict[str, Any]:
        return self.CONFIGURATION_DEFAULTS

    @property
    def name(self) -> str:
        """The name of the experiment. Defaults to the class name."""
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._require_open("name")
        self._name = str(value)

    @property
    def salt(self) -> Any:
        """The experiment-level salt. Defaults to the experiment name."""
        return self._salt if self._salt is not None else self._name

    @salt.setter
    def salt(self, value: Any) -> None:
        self._require_open("salt")
        self._salt = value

    @property
    def log_level(self) -> str:
        """The loguru level exposures are logged at."""
        return self._log_level

    @log_level.setter
    def log_level(self, value: str) -> None:
        self._log_level = normalize_log_level(value)

    @property
    def state(self) -> str:
        """The current lifecycle state."""
        return self._state

    @property
    def inputs(self) -> dict[str, Any]:
        """A copy of the subject's inputs."""
        return dict(self._inputs)

    @property
    def logger(self) -> loguru.Logger:
        return logger.bind(experiment=self._name)

    #####################
    # Lifecycle methods #
    #####################

    def setup(self) -> None:
        """Fixes the experiment name, salt and log level.

        Runs once, from the constructor. By default, it does nothing.
        """
        pass

    @abstractmethod
    def assign(self, params: Assignment, inputs: Inputs) -> None:
        """Writes the experiment's parameters for one subject.

        Parameters
        ----------
        params
            The assignment to write parameter values and random operators to.
        inputs
            The subject's inputs.
        """
        pass

    ##################
    # Public methods #
    ##################

    def set_overrides(self, overrides: Mapping[str, Any]) -> None:
        """Sets values that replace the assigned values of the same names.

        Raises
        ------
        StateError
            If the parameters have already been computed.
        """
        if self._params is not None:
            raise StateError(
                f"Overrides for experiment {self._name} must be set before its "
                "parameters are computed."
            )
        self._overrides = copy.deepcopy(dict(overrides))

    def set_logger(
        self,
        exposure_logger: ExposureLogger,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        """Sets the exposure logger.

        Parameters
        ----------
        exposure_logger
            Records the exposure of the subject to its parameters.
        on_error
            Called with the error whenever the exposure logger fails.
        """
        self._exposure_logger = exposure_logger
        self._on_log_error = on_error

    def set_auto_exposure_logging(self, value: bool) -> None:
        """Sets whether reading the parameters logs an exposure."""
        self._auto_exposure_log = bool(value)

    def get_params(self) -> ParameterSet:
        """Gets the parameters of the subject.

        The first call runs the assignment and, unless disabled, logs the
        exposure. Later calls return the same parameters without logging again.

        Returns
        -------
            The parameter set, with overrides applied.
        """
        params = self._get_params()
        if self._auto_exposure_log:
            self.log_exposure()
        return copy.deepcopy(params)

    def get(self, name: str, default: Any = None) -> Any:
        """Gets a single parameter of the subject."""
        return self.get_params().get(name, default)

    def log_exposure(self) -> bool:
        """Logs the exposure of the subject to its parameters.

        An exposure is logged at most once per parameter set. Failures of the
        exposure logger are reported but never raised.

        Returns
        -------
            Whether an exposure was recorded by this call.
        """
        params = self._get_params()
        if (
            not self.in_experiment
            or self._exposure_logger is None
            or self._exposure_logged
        ):
            return False
        self._exposure_logged = True

        try:
            recorded = self._exposure_logger.log_exposure(
                self._name,
                copy.deepcopy(self._inputs),
                copy.deepcopy(params),
                self._log_level,
            )
        except Exception as e:
            self.logger.opt(exception=e).warning("Exposure logging failed.")
            self._report_log_error(e)
            return False

        if not recorded:
            error = ExposureLoggingError(
                f"{self._exposure_logger!r} did not record the exposure to {self._name}."
            )
            self.logger.warning(str(error))
            self._report_log_error(error)
            return False
        return True

    ##################
    # Helper methods #
    ##################

    def _get_params(self) -> ParameterSet:
        if self._params is None:
            assignment = Assignment(self.salt, self._overrides)
            self.assign(assignment, dict(self._inputs))
            self._transition(lifecycle_states.ASSIGNED)

            params = assignment.to_dict()
            params.update(self._overrides)
            self._assignment = assignment
            self._params = params
            self._transition(lifecycle_states.PARAMS_READY)
        return self._params

    def _transition(self, state: str) -> None:
        current = lifecycle_states.ORDER.index(self._state)
        if lifecycle_states.ORDER.index(state) != current + 1:
            raise StateError(
                f"Invalid transition of experiment {self._name} from {self._state} to {state}."
            )
        self._state = state
        self.logger.debug("Entered state {}.", state)

    def _require_open(self, attribute: str) -> None:
        if self._params is not None:
            raise StateError(
                f"Cannot change the {attribute} of experiment {self._name} after its "
                "parameters are computed."
            )

    def _report_log_error(self, error: Exception) -> None:
        if self._on_log_error is None:
            return
        try:
            self._on_log_error(error)
        except Exception:
            self.logger.exception("Exposure logging error callback failed.")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, inputs={self._inputs!r})"
