__title__ = 'cliopatra'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.1.0a0"

__import__("logging").getLogger(__name__).addHandler(__import__("logging").NullHandler())

from .commands import *
from .faults import *
from .matching import *
from .parameters import *
from .root import *
from .utils import truthy

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 1, 0, "alpha", 0, "")

__all__ = (
    "__title__",
    "__license__",
    "__version__",
    "version_info",
    "truthy",
)

# Load the exposed API of the parameters
__all__ += parameters.__all__  # type: ignore[attr-defined]
# Load the exposed API of the command sets
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the matching engine
__all__ += matching.__all__  # type: ignore[attr-defined]
# Load the exposed API of the root adapter
__all__ += root.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
