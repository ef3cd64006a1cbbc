"""
=================
Lifecycle States
=================

This module defines constants representing the states an experiment passes
through while it computes the parameters of one subject.

"""

CREATED = "created"
"""The experiment has been instantiated with its subject inputs."""

SETUP = "setup"
"""The setup step has fixed the experiment name, salt and log level."""

ASSIGNED = "assigned"
"""The assignment procedure has written its slots."""

PARAMS_READY = "params_ready"
"""Every slot is evaluated, overrides are merged and the parameters are final."""

ORDER = (CREATED, SETUP, ASSIGNED, PARAMS_READY)
"""The states in the order an experiment moves through them."""
