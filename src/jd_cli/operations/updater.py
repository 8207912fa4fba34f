"""Self-update support for jd."""

import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from jd_cli.operations.executor import CommandExecutor

DISTRIBUTION = "jd-cli"
CHANNELS = ("stable", "beta", "dev")
SOURCE_ROOT = Path(__file__).resolve().parents[3]


def installed_version() -> str:
    try:
        return version(DISTRIBUTION)
    except PackageNotFoundError:
        return "unknown"


def detect_install_method(pipx: CommandExecutor | None = None, source_root: Path = SOURCE_ROOT) -> str:
    """How jd was installed: ``pipx``, ``source`` (a git checkout) or ``pip``."""
    pipx = pipx or CommandExecutor(program="pipx")
    if pipx.available() and DISTRIBUTION in pipx.output(["list", "--short"]).split():
        return "pipx"
    if (source_root / ".git").exists() and (source_root / "pyproject.toml").is_file():
        return "source"
    return "pip"


def upgrade_command(method: str, channel: str = "stable") -> list[str]:
    """Command that upgrades jd for an install method other than ``source``."""
    pre = [] if channel == "stable" else ["--pip-args=--pre"]
    if method == "pipx":
        return ["pipx", "upgrade", DISTRIBUTION, *pre]
    args = [sys.executable, "-m", "pip", "install", "--upgrade", DISTRIBUTION]
    if channel != "stable":
        args.append("--pre")
    return args
