__title__ = 'spt'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

import logging as _logging

_logging.getLogger(__name__).addHandler(_logging.NullHandler())

from .actions import *
from .commands import *
from .faults import *
from .router import *
from .schema import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__title__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the actions
__all__ += actions.__all__  # type: ignore[attr-defined]
# Load the exposed API of the command tables
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the router
__all__ += router.__all__  # type: ignore[attr-defined]
# Load the exposed API of the schema
__all__ += schema.__all__  # type: ignore[attr-defined]
