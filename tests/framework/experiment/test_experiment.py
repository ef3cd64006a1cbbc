from __future__ import annotations

import pytest

from sortition.framework.assignment import Assignment
from sortition.framework.experiment import Experiment, ExposureLoggingError, StateError
from sortition.framework.experiment import lifecycle_states
from sortition.framework.randomness import (
    InvalidParameterError,
    RandomInteger,
    Sample,
    UniformChoice,
)
from sortition.testing_utilities import CollectingExposureLogger


class VanillaExperiment(Experiment):
    def setup(self) -> None:
        self.name = "test_name"
        self.log_level = "debug"

    def assign(self, params: Assignment, inputs) -> None:
        params["foo"] = UniformChoice(choices=["a", "b"], unit=inputs)


class DefaultNameExperiment(Experiment):
    def assign(self, params: Assignment, inputs) -> None:
        params["x"] = RandomInteger(min_value=0, max_value=10**6, unit=inputs["userid"])


class SaltedExperiment(DefaultNameExperiment):
    def setup(self) -> None:
        self.name = "salted"
        self.salt = "custom_salt"


class OrderExperiment(Experiment):
    def assign(self, params: Assignment, inputs) -> None:
        params["order"] = Sample(choices=["a", "b", "c"], unit=inputs["userid"])


class OptOutExperiment(VanillaExperiment):
    def assign(self, params: Assignment, inputs) -> None:
        params["foo"] = UniformChoice(choices=["a", "b"], unit=inputs["userid"])
        if inputs.get("opted_out"):
            self.in_experiment = False


def test_vanilla_experiment(exposure_logger):
    experiment = VanillaExperiment({"userid": 42})
    experiment.set_overrides({"bar": 42})
    experiment.set_logger(exposure_logger)
    params = experiment.get_params()

    assert params == {"foo": "b", "bar": 42}
    assert len(exposure_logger.log) == 1
    assert exposure_logger.log[0] == {
        "name": "test_name",
        "inputs": {"userid": 42},
        "params": {"foo": "b", "bar": 42},
        "level": "DEBUG",
    }

    experiment = VanillaExperiment({"userid": 42, "username": "a_name"})
    experiment.set_logger(exposure_logger)
    params = experiment.get_params()

    assert params["foo"] == "a"
    assert len(exposure_logger.log) == 2


def test_keyword_inputs():
    assert VanillaExperiment(userid=42).get_params() == {"foo": "b"}
    assert VanillaExperiment({"userid": 42}, username="a_name").get_params() == {"foo": "a"}


def test_get_params_logs_exactly_once(exposure_logger):
    experiment = VanillaExperiment(userid=42)
    experiment.set_logger(exposure_logger)
    first = experiment.get_params()
    second = experiment.get_params()
    assert experiment.get("foo") == "b"
    assert experiment.log_exposure() is False

    assert first == second
    assert len(exposure_logger.log) == 1


def test_assignment_runs_once(mocker):
    experiment = VanillaExperiment(userid=42)
    spy = mocker.spy(experiment, "assign")
    experiment.get_params()
    experiment.get_params()
    spy.assert_called_once()


def test_returned_params_are_copies():
    experiment = VanillaExperiment(userid=42)
    experiment.get_params()["foo"] = "mutated"
    assert experiment.get_params()["foo"] == "b"


def test_mutating_returned_lists_does_not_relog(exposure_logger):
    experiment = OrderExperiment(userid=1)
    experiment.set_logger(exposure_logger)

    first = experiment.get_params()
    expected = list(first["order"])
    first["order"].append("z")

    assert experiment.get_params() == {"order": expected}
    assert len(exposure_logger.log) == 1
    assert exposure_logger.log[0]["params"] == {"order": expected}


def test_logged_params_are_isolated_from_the_experiment(mocker):
    def clear_order(name, inputs, params, level):
        params["order"].clear()
        return True

    exposure_logger = mocker.Mock()
    exposure_logger.log_exposure.side_effect = clear_order
    experiment = OrderExperiment(userid=1)
    experiment.set_logger(exposure_logger)

    assert len(experiment.get_params()["order"]) == 3
    assert len(experiment.get_params()["order"]) == 3
    exposure_logger.log_exposure.assert_called_once()


@pytest.mark.parametrize(
    "inputs",
    [{"userid": 42, 7: "extra"}, {"userid": 42, ("a", 1): "extra"}, {"userid": 42, None: 1}],
)
def test_inputs_with_mixed_key_types(inputs, exposure_logger):
    experiment = DefaultNameExperiment(inputs)
    experiment.set_logger(exposure_logger)

    params = experiment.get_params()

    assert params == DefaultNameExperiment(userid=42).get_params()
    assert experiment.get_params() == params
    assert len(exposure_logger.log) == 1
    assert exposure_logger.log[0]["inputs"] == inputs


@pytest.mark.parametrize("userid", range(20))
def test_overrides_win(userid):
    experiment = VanillaExperiment(userid=userid)
    experiment.set_overrides({"foo": "override"})
    assert experiment.get_params() == {"foo": "override"}


def test_overrides_skip_operator_evaluation(mocker):
    evaluate = mocker.patch.object(UniformChoice, "evaluate")
    experiment = VanillaExperiment(userid=42)
    experiment.set_overrides({"foo": "override"})
    assert experiment.get("foo") == "override"
    evaluate.assert_not_called()


def test_set_overrides_after_params_fails():
    experiment = VanillaExperiment(userid=42)
    experiment.get_params()
    with pytest.raises(StateError):
        experiment.set_overrides({"foo": "late"})
    assert experiment.get_params() == {"foo": "b"}


def test_lifecycle_states():
    experiment = VanillaExperiment(userid=42)
    assert experiment.state == lifecycle_states.SETUP
    experiment.get_params()
    assert experiment.state == lifecycle_states.PARAMS_READY
    with pytest.raises(StateError):
        experiment._transition(lifecycle_states.ASSIGNED)


def test_name_and_salt_defaults():
    experiment = DefaultNameExperiment(userid=1)
    assert experiment.name == "DefaultNameExperiment"
    assert experiment.salt == "DefaultNameExperiment"
    assert experiment.get("x") == RandomInteger(min_value=0, max_value=10**6, unit=1).evaluate(
        "DefaultNameExperiment", "x"
    )


def test_custom_salt():
    experiment = SaltedExperiment(userid=1)
    assert experiment.name == "salted"
    assert experiment.salt == "custom_salt"
    assert experiment.get("x") == RandomInteger(min_value=0, max_value=10**6, unit=1).evaluate(
        "custom_salt", "x"
    )


def test_name_and_salt_frozen_after_params():
    experiment = SaltedExperiment(userid=1)
    experiment.get_params()
    with pytest.raises(StateError):
        experiment.name = "renamed"
    with pytest.raises(StateError):
        experiment.salt = "resalted"


def test_log_level():
    experiment = VanillaExperiment(userid=1)
    assert experiment.log_level == "DEBUG"
    experiment.log_level = "warning"
    assert experiment.log_level == "WARNING"
    with pytest.raises(ValueError):
        experiment.log_level = "loud"


def test_configuration_defaults_and_overrides(exposure_logger):
    class QuietExperiment(DefaultNameExperiment):
        CONFIGURATION_DEFAULTS = {"experiment": {"log_level": "WARNING"}}

    experiment = QuietExperiment(userid=1)
    assert experiment.log_level == "WARNING"

    experiment = QuietExperiment(
        userid=1, configuration={"experiment": {"auto_exposure_log": False}}
    )
    experiment.set_logger(exposure_logger)
    experiment.get_params()
    assert exposure_logger.log == []
    assert experiment.log_exposure() is True
    assert len(exposure_logger.log) == 1


def test_auto_exposure_logging_toggle(exposure_logger):
    experiment = VanillaExperiment(userid=42)
    experiment.set_logger(exposure_logger)
    experiment.set_auto_exposure_logging(False)
    experiment.get_params()
    assert exposure_logger.log == []

    experiment.set_auto_exposure_logging(True)
    experiment.get_params()
    experiment.get_params()
    assert len(exposure_logger.log) == 1


def test_not_in_experiment_is_not_logged(exposure_logger):
    experiment = OptOutExperiment(userid=42, opted_out=True)
    experiment.set_logger(exposure_logger)
    assert experiment.get_params() == {"foo": "b"}
    assert exposure_logger.log == []

    experiment = OptOutExperiment(userid=42, opted_out=False)
    experiment.set_logger(exposure_logger)
    experiment.get_params()
    assert len(exposure_logger.log) == 1


def test_no_logger():
    experiment = VanillaExperiment(userid=42)
    assert experiment.get_params() == {"foo": "b"}
    assert experiment.log_exposure() is False


def test_logger_failures_are_swallowed(caplog):
    errors = []
    failure = RuntimeError("backend unavailable")
    experiment = VanillaExperiment(userid=42)
    experiment.set_logger(CollectingExposureLogger(fail_with=failure), on_error=errors.append)

    assert experiment.get_params() == {"foo": "b"}
    assert errors == [failure]
    assert "Exposure logging failed." in caplog.text

    # The failed attempt still counts as the one exposure of this parameter set.
    experiment.get_params()
    assert errors == [failure]


def test_logger_returning_false_is_reported(mocker):
    errors = []
    exposure_logger = mocker.Mock()
    exposure_logger.log_exposure.return_value = False
    experiment = VanillaExperiment(userid=42)
    experiment.set_logger(exposure_logger, on_error=errors.append)

    assert experiment.get_params() == {"foo": "b"}
    exposure_logger.log_exposure.assert_called_once_with(
        "test_name", {"userid": 42}, {"foo": "b"}, "DEBUG"
    )
    assert len(errors) == 1
    assert isinstance(errors[0], ExposureLoggingError)


def test_failing_error_callback_is_contained(caplog):
    def on_error(error: Exception) -> None:
        raise ValueError("callback broke")

    experiment = VanillaExperiment(userid=42)
    experiment.set_logger(CollectingExposureLogger(fail_with=RuntimeError("down")), on_error)
    assert experiment.get_params() == {"foo": "b"}
    assert "Exposure logging error callback failed." in caplog.text


def test_assign_errors_propagate():
    class BrokenExperiment(Experiment):
        def assign(self, params, inputs):
            params["x"] = UniformChoice(choices=[], unit=inputs["userid"])

    experiment = BrokenExperiment(userid=1)
    with pytest.raises(InvalidParameterError):
        experiment.get_params()
    assert experiment.state == lifecycle_states.SETUP


def test_experiments_do_not_share_state(exposure_logger):
    first = VanillaExperiment(userid=42)
    first.set_overrides({"foo": "override"})
    second = VanillaExperiment(userid=42)
    assert second.get_params() == {"foo": "b"}
    assert first.get_params() == {"foo": "override"}


def test_repr():
    assert repr(VanillaExperiment(userid=42)) == "VanillaExperiment(name='test_name', inputs={'userid': 42})"
