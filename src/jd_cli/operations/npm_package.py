"""Placeholder package used to bootstrap npm trusted publishing."""

import json
import re
import shutil
from pathlib import Path

from jd_cli.errors import PreconditionError

PLACEHOLDER_VERSION = "0.0.0-placeholder"
PLACEHOLDER_README = """\
# {name}

**THIS IS A PLACEHOLDER PACKAGE - DO NOT USE**

This package exists **ONLY** for OIDC trusted publishing configuration.

The package is **NOT** functional and should not be installed or used.

A real version will be published via OIDC-enabled CI/CD shortly.
"""

_OWNER_REPO = re.compile(r"[:/]([^/:]+)/([^/]+?)(?:\.git)?/?$")


def read_package_info(path: Path) -> tuple[str, str]:
    """``(name, description)`` from a package.json."""
    if not path.is_file():
        raise PreconditionError(
            "No package.json found in current directory",
            hints=["Please run this command from your package root directory"],
        )
    data = json.loads(path.read_text())
    name = data.get("name")
    if not name:
        raise PreconditionError("Could not read package name from package.json")
    return name, data.get("description") or ""


def parse_owner_repo(url: str | None) -> tuple[str, str] | None:
    """Owner and repository name from an HTTPS or SSH git remote URL."""
    if not url:
        return None
    match = _OWNER_REPO.search(url)
    if not match:
        return None
    return match.group(1), match.group(2)


def placeholder_manifest(name: str, repository_url: str = "") -> dict:
    return {
        "name": name,
        "version": PLACEHOLDER_VERSION,
        "description": "Placeholder package for OIDC setup - DO NOT USE",
        "private": False,
        "repository": {"type": "git", "url": repository_url},
    }


def write_placeholder(
    directory: Path, name: str, repository_url: str = "", npmrc: Path | None = None
) -> None:
    """Lay out the placeholder package, copying the user's ``.npmrc`` when present."""
    (directory / "package.json").write_text(
        json.dumps(placeholder_manifest(name, repository_url), indent=2) + "\n"
    )
    (directory / "README.md").write_text(PLACEHOLDER_README.format(name=name))
    npmrc = npmrc or Path.home() / ".npmrc"
    if npmrc.is_file():
        shutil.copyfile(npmrc, directory / ".npmrc")


def access_url(name: str) -> str:
    return f"https://www.npmjs.com/package/{name}/access"
