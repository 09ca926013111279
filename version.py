"""Plugin version and dev-build detection."""
from __future__ import annotations

import os
import re
from typing import Optional

__all__ = ["__version__", "is_dev_build", "DEV_MODE_ENV_VAR"]

__version__ = "1.2.0"
DEV_MODE_ENV_VAR = "GROUND_ITEM_ORGANIZER_DEV_MODE"

# "dev" as its own segment: 1.2.0-dev, 1.3.0.dev2, dev-1.2
_DEV_SEGMENT = re.compile(r"(?:^|[.+-])dev\d*(?:$|[.+-])")
_ENV_TRUE = frozenset({"1", "true", "yes", "on"})
_ENV_FALSE = frozenset({"0", "false", "no", "off"})


def is_dev_build(version: Optional[str] = None) -> bool:
    """Dev builds log at DEBUG whatever the host level; the env var forces either way."""

    override = os.getenv(DEV_MODE_ENV_VAR, "").strip().lower()
    if override in _ENV_TRUE:
        return True
    if override in _ENV_FALSE:
        return False
    identifier = (version or __version__ or "").strip().lower()
    return bool(_DEV_SEGMENT.search(identifier))
