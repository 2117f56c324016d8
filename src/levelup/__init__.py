"""Level Up: chapter cache and prompt-context selection for the learning app."""

from __future__ import annotations

import warnings
from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION = "levelup-context"
UNKNOWN_VERSION = "0.0.0+unknown"

try:
    __version__ = version(DISTRIBUTION)
except PackageNotFoundError:
    # Running from a source checkout; the User-Agent and log context still need a value
    warnings.warn(
        f"Package metadata for {DISTRIBUTION!r} not found; reporting version {UNKNOWN_VERSION!r}.",
        RuntimeWarning,
        stacklevel=2,
    )
    __version__ = UNKNOWN_VERSION
