"""
=======================
Configuration Utilities
=======================

Experiments read their ambient settings (log level, automatic exposure
logging) from a layered configuration. The ``base`` layer holds the
``sortition`` defaults, the ``experiment_defaults`` layer holds the
``CONFIGURATION_DEFAULTS`` of an experiment class, and the ``override`` layer
holds whatever the caller passes in.

"""
from __future__ import annotations

from typing import Any

from layered_config_tree import LayeredConfigTree

CONFIGURATION_LAYERS = ["base", "experiment_defaults", "override"]

DEFAULT_CONFIGURATION = {
    "experiment": {
        "log_level": "INFO",
        "auto_exposure_log": True,
    },
}


def build_experiment_configuration(
    experiment_defaults: dict[str, Any] | None = None,
    configuration: dict[str, Any] | LayeredConfigTree | None = None,
) -> LayeredConfigTree:
    """Builds the configuration of a single experiment.

    Parameters
    ----------
    experiment_defaults
        Defaults declared by the experiment class.
    configuration
        Caller supplied values, applied on top of everything else.

    Returns
    -------
        The layered configuration.
    """
    config = LayeredConfigTree(layers=CONFIGURATION_LAYERS)
    config.update(DEFAULT_CONFIGURATION, layer="base", source="sortition_defaults")
    if experiment_defaults:
        config.update(
            experiment_defaults, layer="experiment_defaults", source="experiment_defaults"
        )
    if configuration:
        if isinstance(configuration, LayeredConfigTree):
            configuration = configuration.to_dict()
        config.update(configuration, layer="override", source="user_supplied_args")
    return config
