from __future__ import annotations

from importlib import metadata

try:
    __version__ = metadata.version("ldapmerge")
except metadata.PackageNotFoundError:
    __version__ = "dev"
