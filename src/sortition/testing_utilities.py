"""
===========================
Sortition Testing Utilities
===========================

Utility classes to make testing experiments easier.

"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class CollectingExposureLogger:
    """An exposure logger that keeps every exposure in memory.

    Parameters
    ----------
    fail_with
        If provided, every call raises this exception instead of recording.
    """

    def __init__(self, fail_with: Exception | None = None):
        self.log: list[dict[str, Any]] = []
        self.fail_with = fail_with

    def log_exposure(
        self,
        experiment_name: str,
        inputs: Mapping[str, Any],
        params: Mapping[str, Any],
        level: str,
    ) -> bool:
        if self.fail_with is not None:
            raise self.fail_with
        self.log.append(
            {
                "name": experiment_name,
                "inputs": dict(inputs),
                "params": dict(params),
                "level": level,
            }
        )
        return True


def proportion_bounds(expected: float, n: int, z: float) -> tuple[float, float]:
    """Normal approximation confidence band for an observed proportion."""
    se = z * (expected * (1 - expected) / n) ** 0.5
    return expected - se, expected + se
