"""Version bumping for calendar-style ``major.minor.patch`` releases."""

import json
import re
from pathlib import Path

from jd_cli.errors import PreconditionError

APP_CONFIG_VERSION = re.compile(r'version: "[^"]*"')


def increment_minor_version(version: str) -> str:
    """Bump the minor component and reset patch, e.g. ``2025.7.0`` to ``2025.8.0``."""
    parts = version.split(".")
    try:
        major = parts[0]
        minor = int(parts[1]) if len(parts) > 1 and parts[1] else 0
    except ValueError:
        raise PreconditionError(f"Unsupported version format: {version}")
    return f"{major}.{minor + 1}.0"


def release_tag(version: str) -> str:
    """Release tag for a version: ``v<major>.<minor>``."""
    major, minor, *_ = version.split(".") + ["0"]
    return f"v{major}.{minor}"


def read_package_version(path: Path) -> str:
    if not path.is_file():
        raise PreconditionError(f"{path} not found")
    version = json.loads(path.read_text()).get("version")
    if not version:
        raise PreconditionError(f"Could not read version from {path}")
    return version


def update_json_version(path: Path, version: str) -> None:
    data = json.loads(path.read_text())
    data["version"] = version
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n")


def update_app_config_version(path: Path, version: str) -> None:
    text = path.read_text()
    path.write_text(APP_CONFIG_VERSION.sub(f'version: "{version}"', text))


def find_app_version_files(root: Path) -> list[Path]:
    """``app.config.ts`` and ``package.json`` files of each app under ``apps/``."""
    apps = root / "apps"
    if not apps.is_dir():
        return []
    found = []
    for app_dir in sorted(p for p in apps.iterdir() if p.is_dir()):
        for name in ("app.config.ts", "package.json"):
            candidate = app_dir / name
            if candidate.is_file():
                found.append(candidate)
    return found


def update_version_file(path: Path, version: str) -> None:
    if path.suffix == ".json":
        update_json_version(path, version)
    else:
        update_app_config_version(path, version)
