"""
Version information for the Commerce Back-Office Ledger.

Single source of truth: pyproject.toml
Runtime access via importlib.metadata with fallback.
"""

from __future__ import annotations

import os
import sys
from datetime import UTC, datetime
from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version
from typing import Any

DISTRIBUTION_NAME = "commerce-ledger-backoffice"

# Fallback version if package metadata unavailable (dev mode)
_FALLBACK_VERSION = "0.1.0"


def get_version() -> str:
    """Get the package version from metadata or fallback."""
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return _FALLBACK_VERSION


VERSION = get_version()


@lru_cache(maxsize=1)
def get_build_info() -> dict[str, str | None]:
    """
    Get build metadata from environment.

    Returns:
        dict with git commit, build_date and build_number
    """
    commit = os.environ.get("GIT_COMMIT")
    return {
        "git_commit": commit[:8] if commit else None,
        "build_date": os.environ.get("BUILD_DATE"),
        "build_number": os.environ.get("BUILD_NUMBER"),
    }


def version_info() -> dict[str, Any]:
    """
    Get comprehensive version information.

    Returns:
        dict with version, python_version and build info
    """
    build = get_build_info()

    return {
        "version": VERSION,
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        "git_commit": build.get("git_commit"),
        "build_date": build.get("build_date") or datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "build_number": build.get("build_number"),
        "environment": os.environ.get("ENVIRONMENT", "development"),
    }


def version_string() -> str:
    """
    Get formatted version string for display.

    Returns:
        Formatted version string like "v0.1.0 (abc1234)"
    """
    info = version_info()
    parts = [f"v{info['version']}"]
    if info.get("git_commit"):
        parts.append(f"({info['git_commit']})")
    return " ".join(parts)
