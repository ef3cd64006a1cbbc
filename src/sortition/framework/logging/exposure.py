"""
=================
Exposure Logging
=================

Exposure logging records that a subject was shown a particular set of
parameters. The experiment lifecycle only needs something that can record an
exposure, described by :class:`ExposureLogger`. :class:`LoguruExposureLogger`
writes exposures to ``loguru`` with the experiment, inputs and parameters
bound as extras, so any loguru sink (for instance one added by
:func:`configure_logging_to_file
<sortition.framework.logging.configure_logging_to_file>`) receives them.

"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

import loguru
from loguru import logger


@runtime_checkable
class ExposureLogger(Protocol):
    """Anything that can record the exposure of a subject to a parameter set."""

    def log_exposure(
        self,
        experiment_name: str,
        inputs: Mapping[str, Any],
        params: Mapping[str, Any],
        level: str,
    ) -> bool:
        """Records one exposure.

        Parameters
        ----------
        experiment_name
            The name of the experiment the subject was exposed to.
        inputs
            The subject's inputs.
        params
            The final parameter set shown to the subject.
        level
            The loguru level name the experiment logs at.

        Returns
        -------
            Whether the exposure was recorded.
        """
        ...


class LoguruExposureLogger:
    """Records exposures as ``loguru`` messages."""

    def __init__(self, sink_logger: loguru.Logger | None = None):
        self._logger = sink_logger if sink_logger is not None else logger

    def log_exposure(
        self,
        experiment_name: str,
        inputs: Mapping[str, Any],
        params: Mapping[str, Any],
        level: str,
    ) -> bool:
        self._logger.bind(
            experiment=experiment_name,
            event="exposure",
            inputs=dict(inputs),
            params=dict(params),
        ).log(level, "Exposure: inputs={} params={}", dict(inputs), dict(params))
        return True

    def __repr__(self) -> str:
        return "LoguruExposureLogger()"
