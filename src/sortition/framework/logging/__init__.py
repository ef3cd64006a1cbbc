"""
=======
Logging
=======

"""
from sortition.framework.logging.exposure import ExposureLogger, LoguruExposureLogger
from sortition.framework.logging.utilities import (
    configure_logging_to_file,
    configure_logging_to_terminal,
    normalize_log_level,
    verbosity_to_level,
)
