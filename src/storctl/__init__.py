"""storctl package.

Modules:
- storctl.cli: CLI entry point package (storctl), command tree and lifecycle
- storctl.lib.core: Configuration store, config file, paths, version
- storctl.lib.storage: Storage service client and async error stream
- storctl.lib.util: Internal helpers (ansi, logging, templates)
"""

__all__ = [
    "cli",
    "lib",
]

# Version information - single source of truth using importlib.metadata
try:
    from importlib.metadata import version

    __version__ = version("storctl")
except Exception:
    # Fallback for development mode when package is not installed
    try:
        import tomllib
        from pathlib import Path

        pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
        if pyproject_path.exists():
            with open(pyproject_path, "rb") as f:
                pyproject_data = tomllib.load(f)
                __version__ = pyproject_data["tool"]["poetry"]["version"]
        else:
            __version__ = "unknown"
    except Exception:
        __version__ = "unknown"
