"""HTTP API over the merge engine and the local store."""

from __future__ import annotations

from .errors import DatabaseUnavailableError
from .main import create_app

__all__ = ["DatabaseUnavailableError", "create_app"]
