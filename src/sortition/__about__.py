__all__ = [
    "__title__",
    "__summary__",
    "__uri__",
    "__version__",
    "__author__",
    "__email__",
    "__license__",
    "__copyright__",
]

__title__ = "sortition"
__summary__ = "sortition is a deterministic, hash-based assignment engine for online experiments."
__uri__ = "https://github.com/sortition/sortition"

__version__ = "0.1.0"

__author__ = "The sortition developers"
__email__ = "sortition.dev@gmail.com"

__license__ = "BSD-3-Clause"
__copyright__ = f"Copyright 2026 {__author__}"
