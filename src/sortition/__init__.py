from sortition.__about__ import (
    __author__,
    __copyright__,
    __email__,
    __license__,
    __summary__,
    __title__,
    __uri__,
    __version__,
)
from sortition.exceptions import SortitionError
from sortition.framework.assignment import Assignment, UndefinedSlotError
from sortition.framework.experiment import Experiment, StateError
from sortition.framework.logging import ExposureLogger, LoguruExposureLogger
from sortition.framework.population import assign_population
from sortition.framework.randomness import (
    BernoulliTrial,
    EncodingError,
    InvalidParameterError,
    RandomFloat,
    RandomInteger,
    Sample,
    UniformChoice,
    WeightedChoice,
)
