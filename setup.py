#!/usr/bin/env python3
"""
Setup script for storctl that preserves git branch information during installation.
"""

import subprocess
import sys

from setuptools import find_packages, setup

# Run our build script first to preserve git branch information
try:
    result = subprocess.run([sys.executable, "build_script.py"], capture_output=True, text=True)
    if result.returncode != 0:
        print(f"Warning: Build script failed: {result.stderr}")
except Exception as e:
    print(f"Warning: Could not run build script: {e}")


def _requirements(deps: dict) -> list[str]:
    reqs = []
    for dep, version_spec in deps.items():
        if dep == "python":
            continue
        if isinstance(version_spec, str):
            reqs.append(f"{dep}{version_spec}")
        else:
            reqs.append(dep)
    return reqs


# Read the pyproject.toml to get the package metadata
try:
    import tomllib

    with open("pyproject.toml", "rb") as f:
        pyproject_data = tomllib.load(f)

    poetry = pyproject_data["tool"]["poetry"]
    name = poetry["name"]
    version = poetry["version"]
    description = poetry["description"]
    authors = poetry["authors"]
    license_text = poetry["license"]

    install_requires = _requirements(poetry["dependencies"])
    extras_require = {
        group: _requirements(spec.get("dependencies", {}))
        for group, spec in poetry.get("group", {}).items()
    }
    console_scripts = [f"{cmd}={target}" for cmd, target in poetry.get("scripts", {}).items()]
    project_urls = {
        label.title(): poetry[label]
        for label in ("homepage", "repository", "documentation")
        if label in poetry
    }
    project_urls.update(poetry.get("urls", {}))

    # Get packages
    packages = find_packages(where="src")
    package_dir = {"": "src"}

    setup(
        name=name,
        version=version,
        description=description,
        author=authors[0] if isinstance(authors, list) else authors,
        license=license_text,
        url=poetry.get("homepage"),
        project_urls=project_urls,
        packages=packages,
        package_dir=package_dir,
        install_requires=install_requires,
        extras_require=extras_require,
        entry_points={"console_scripts": console_scripts},
        python_requires=">=3.11,<4.0",
        include_package_data=True,
        zip_safe=False,
    )

except Exception as e:
    print(f"Error reading pyproject.toml: {e}")
    sys.exit(1)
