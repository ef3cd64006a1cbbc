"""
=====================
Population Assignment
=====================

Helpers to assign the parameters of every subject in a population. Each row
of the population gets its own experiment instance, so nothing computed for
one subject can leak into another.

"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import pandas as pd

from sortition.framework.experiment import Experiment
from sortition.framework.logging.exposure import ExposureLogger


def assign_population(
    experiment_type: type[Experiment],
    population: pd.DataFrame,
    overrides: Mapping[str, Any] | None = None,
    exposure_logger: ExposureLogger | None = None,
    columns: Sequence[str] | None = None,
) -> pd.DataFrame:
    """Computes the parameters of every subject in a population.

    Parameters
    ----------
    experiment_type
        The experiment to evaluate.
    population
        One row per subject. The row values are the subject's inputs.
    overrides
        Overrides applied to every subject.
    exposure_logger
        Records the exposure of every subject.
    columns
        The columns used as inputs. Defaults to all columns.

    Returns
    -------
        One row of parameters per subject, indexed like ``population``.
    """
    if columns is not None:
        population = population.loc[:, list(columns)]

    records = []
    for inputs in population.to_dict(orient="records"):
        experiment = experiment_type(inputs)
        if overrides:
            experiment.set_overrides(overrides)
        if exposure_logger is not None:
            experiment.set_logger(exposure_logger)
        records.append(experiment.get_params())

    return pd.DataFrame(records, index=population.index)
