__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'simpleargs'
__author__ = 'simpleargs contributors'
__license__ = 'MIT'
__version__ = "0.1.0"

from .faults import *
from .stream import *
from .tokens import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

version_info = VersionInfo(0, 1, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the tokens
__all__ += tokens.__all__  # type: ignore[attr-defined]
# Load the exposed API of the stream
__all__ += stream.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
