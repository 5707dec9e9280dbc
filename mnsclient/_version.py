"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
mnsclient, a product of Garudex Labs

Package version.

Installed distributions report the version recorded in their metadata. A
source checkout that was never installed falls back to the VERSION file
next to setup.py.
"""

from importlib import metadata
from pathlib import Path

DISTRIBUTION = "mnsclient"


def get_version() -> str:
    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        pass
    version_file = Path(__file__).parent.parent / "VERSION"
    if version_file.exists():
        return version_file.read_text().strip()
    return "unknown"


__version__ = get_version()
