"""
==========================
The Experiment Lifecycle
==========================

"""
from sortition.framework.experiment import lifecycle_states
from sortition.framework.experiment.exceptions import ExposureLoggingError, StateError
from sortition.framework.experiment.experiment import Experiment
