"""Host and repository environment detection."""

import os
import shutil
import sys
from pathlib import Path

from jd_cli.operations.executor import GitExecutor
from jd_cli.operations.github import GitHubClient


def command_exists(name: str) -> bool:
    return shutil.which(name) is not None


def get_os() -> str:
    """Classify the host OS as macos, linux, windows or unknown."""
    if sys.platform == "darwin":
        return "macos"
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform in ("win32", "cygwin", "msys"):
        return "windows"
    return "unknown"


def detect_shell() -> str | None:
    """Name of the user's login shell when it is bash or zsh."""
    shell = Path(os.environ.get("SHELL", "")).name
    return shell if shell in ("bash", "zsh") else None


def rc_file_for(shell: str, home: Path | None = None) -> Path:
    home = home or Path.home()
    if shell == "zsh":
        return home / ".zshrc"
    bashrc = home / ".bashrc"
    if bashrc.exists() or not (home / ".bash_profile").exists():
        return bashrc
    return home / ".bash_profile"


def get_default_branch(git: GitExecutor, gh: GitHubClient | None = None) -> str:
    """Resolve the repository's default branch.

    Order: GitHub's view of the repository, ``init.defaultBranch``, a local
    ``main`` or ``master`` branch, ``origin/HEAD``, then ``main``.
    """
    if gh is not None and gh.available():
        branch = gh.default_branch()
        if branch:
            return branch

    branch = git.get_config("init.defaultBranch")
    if branch:
        return branch

    for candidate in ("main", "master"):
        if git.branch_exists(candidate):
            return candidate

    return git.origin_head() or "main"


def repository_name(git: GitExecutor, cwd: Path | None = None) -> str:
    """Repository name from the origin URL, else the directory name."""
    cwd = cwd or Path.cwd()
    if git.is_inside_work_tree():
        url = git.remote_url()
        if url:
            return Path(url.rstrip("/")).name.removesuffix(".git")
    return cwd.name
