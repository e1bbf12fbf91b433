#!/usr/bin/env python3
"""
Build script to preserve git branch information during installation.

Called by setup.py before packaging.  Installs from a git checkout record the
current branch in ``src/storctl/_branch_info.py`` so ``storctl version`` can
show it; tagged releases and non-git builds leave the placeholder alone.
"""

import re
import subprocess
from pathlib import Path

BRANCH_INFO_PATH = Path("src/storctl/_branch_info.py")

_VERSION_TAG_RE = re.compile(r"^v?\d")


def _run_git(*args: str) -> subprocess.CompletedProcess | None:
    try:
        return subprocess.run(["git", *args], capture_output=True, text=True, timeout=1)
    except (OSError, subprocess.SubprocessError):
        return None


def _is_tagged_release() -> bool:
    """Return True when HEAD sits exactly on a version tag (``v1.2.3`` or ``1.2.3``)."""
    result = _run_git("describe", "--tags", "--exact-match")
    if result is None or result.returncode != 0:
        return False
    return bool(_VERSION_TAG_RE.match(result.stdout.strip()))


def _get_git_branch() -> str | None:
    """Get the current git branch name if we're in a git repository."""
    result = _run_git("rev-parse", "--is-inside-work-tree")
    if result is None or result.returncode != 0 or result.stdout.strip() != "true":
        return None
    branch = _run_git("branch", "--show-current")
    if branch is None or branch.returncode != 0:
        return None
    # empty in detached HEAD state
    return branch.stdout.strip() or None


def _write_branch_info(branch_name: str) -> None:
    """Write branch information to a file that will be included in the package."""
    content = (
        "# This file is generated during build to preserve git branch information\n"
        "# when installing from a git directory using pip/pipx\n"
        f"BRANCH_NAME = {branch_name!r}\n"
    )
    try:
        BRANCH_INFO_PATH.write_text(content)
        print(f"Preserved branch information: {branch_name}")
    except OSError as e:
        print(f"Warning: Could not write branch info: {e}")


def main() -> None:
    """Main build script entry point."""
    print("Running build script to preserve git branch information...")

    if _is_tagged_release():
        print("Building a tagged release; branch information not recorded")
        return

    branch_name = _get_git_branch()
    if branch_name:
        print(f"Detected git branch: {branch_name}")
        _write_branch_info(branch_name)
    else:
        print("Not in a git repository or could not detect branch")


if __name__ == "__main__":
    main()
