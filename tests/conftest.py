from __future__ import annotations

from collections.abc import Generator
from typing import Any

import pytest
from _pytest.logging import LogCaptureFixture
from loguru import logger
from scipy import stats

from sortition.testing_utilities import CollectingExposureLogger, proportion_bounds

# z_(alpha/2) for alpha = .001, i.e. a 99.9% confidence interval.
Z = stats.norm.ppf(1 - 0.001 / 2)


@pytest.fixture
def caplog(caplog: LogCaptureFixture) -> Generator[LogCaptureFixture, None, None]:
    handler_id = logger.add(caplog.handler, format="{message}", level="DEBUG")
    yield caplog
    logger.remove(handler_id)


@pytest.fixture
def exposure_logger() -> CollectingExposureLogger:
    return CollectingExposureLogger()


@pytest.fixture(scope="session")
def assert_proportion():
    """Test of proportions: normal approximation of the binomial CI.

    Fine for large N and expected proportions not too close to 0 or 1.
    """

    def _assert(observed: float, expected: float, n: int) -> None:
        low, high = proportion_bounds(expected, n, Z)
        assert low - 1e-12 <= observed <= high + 1e-12, (observed, expected)

    return _assert


@pytest.fixture(scope="session")
def assert_distribution(assert_proportion):
    """Checks that the observed values have roughly the expected density."""

    def _assert(values: list[Any], value_mass: dict[Any, float]) -> None:
        total = float(sum(value_mass.values()))
        counts: dict[Any, int] = {}
        for value in values:
            counts[value] = counts.get(value, 0) + 1
        for value, count in counts.items():
            assert value in value_mass, f"Unexpected value {value!r}"
            assert_proportion(count / len(values), value_mass[value] / total, len(values))

    return _assert
