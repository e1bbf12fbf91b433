# SPDX-FileCopyrightText: 2026 Jiri Vyskocil
# SPDX-License-Identifier: Apache-2.0

"""Version and branch information for storctl.

Single source of truth for the ``version`` command.
"""

import json
from importlib import metadata
from typing import Any


def get_version_info() -> tuple[str, str | None]:
    """Get version and branch information.

    The version comes from the installed distribution.  The branch is taken,
    in order, from PEP 610 metadata (VCS installs) or from the
    ``_branch_info`` module written by ``build_script.py`` at install time.

    Returns:
        tuple: (version_string, branch_name) where branch_name is None for releases
               or when branch info is not available
    """
    try:
        from storctl import __version__

        version = __version__
    except (ImportError, AttributeError):
        version = "unknown"

    pep610_revision = _get_pep610_revision()
    if pep610_revision:
        return version, pep610_revision

    try:
        from storctl._branch_info import BRANCH_NAME  # type: ignore[import-not-found]
    except ImportError:
        return version, None
    return version, BRANCH_NAME or None


def _get_pep610_revision(dist_name: str = "storctl") -> str | None:
    """Return VCS revision from PEP 610 metadata, if available."""
    try:
        dist = metadata.distribution(dist_name)
        direct_url = dist.read_text("direct_url.json")
    except (metadata.PackageNotFoundError, OSError, UnicodeDecodeError):
        return None

    if not direct_url:
        return None

    try:
        data = json.loads(direct_url)
    except json.JSONDecodeError:
        return None

    vcs_info = data.get("vcs_info")
    if not isinstance(vcs_info, dict):
        return None

    def validate_and_strip(value: Any) -> str | None:
        if isinstance(value, str):
            stripped = value.strip()
            if stripped:
                return stripped
        return None

    if result := validate_and_strip(vcs_info.get("requested_revision")):
        return result
    return validate_and_strip(vcs_info.get("commit_id"))


def format_version_string(version: str, branch: str | None) -> str:
    """Format version and branch into a display string.

    Returns:
        Formatted string like "0.3.1" or "0.3.1 [feature-branch]"
    """
    if branch:
        return f"{version} [{branch}]"
    return version


def get_docs_url(dist_name: str = "storctl") -> str | None:
    """Return the documentation URL declared in the package metadata.

    A ``Documentation`` project URL wins over ``Home-page``; None when the
    distribution is not installed or declares neither.
    """
    try:
        meta = metadata.metadata(dist_name)
    except metadata.PackageNotFoundError:
        return None
    urls: dict[str, str] = {}
    for entry in meta.get_all("Project-URL") or []:
        label, _, url = entry.partition(",")
        if url.strip():
            urls[label.strip().lower()] = url.strip()
    for label in ("documentation", "homepage"):
        if label in urls:
            return urls[label]
    home = meta.get("Home-page")
    return home.strip() if home and home.strip() != "UNKNOWN" else None
