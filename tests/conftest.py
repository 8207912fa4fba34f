import base64
import os
import subprocess
from pathlib import Path
from typing import Generator

import pytest
from click.testing import CliRunner

from jd_cli.console import Console
from jd_cli.operations.dependencies import DependencyChecker
from jd_cli.operations.github import GitHubClient
from jd_cli.operations.kubectl import KubectlClient


def git(cwd: Path, *args: str) -> str:
    return subprocess.run(
        ["git", *args], cwd=cwd, check=True, capture_output=True, text=True
    ).stdout.strip()


@pytest.fixture(autouse=True)
def isolated_git_config(monkeypatch):
    """Keep the user's global git config (jd.*, init.defaultBranch) out of tests."""
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    for name in list(os.environ):
        if name.startswith("JD_"):
            monkeypatch.delenv(name)


@pytest.fixture
def temp_git_repo(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary git repository with a main branch."""
    repo = tmp_path / "repo"
    repo.mkdir()
    subprocess.run(["git", "init"], cwd=repo, check=True)
    subprocess.run(["git", "config", "user.name", "Test User"], cwd=repo, check=True)
    subprocess.run(["git", "config", "user.email", "test@example.com"], cwd=repo, check=True)

    (repo / "README.md").write_text("# Test Repo")
    subprocess.run(["git", "add", "."], cwd=repo, check=True)
    subprocess.run(["git", "commit", "-m", "Initial commit"], cwd=repo, check=True)

    cur = git(repo, "symbolic-ref", "--short", "HEAD")
    if cur != "main":
        subprocess.run(["git", "branch", "-m", cur, "main"], cwd=repo, check=True)

    yield repo


@pytest.fixture
def repo_with_origin(temp_git_repo: Path, tmp_path: Path) -> Path:
    """Repository whose main branch is pushed to a bare origin."""
    origin = tmp_path / "origin.git"
    subprocess.run(["git", "init", "--bare", str(origin)], check=True)
    subprocess.run(["git", "remote", "add", "origin", str(origin)], cwd=temp_git_repo, check=True)
    subprocess.run(["git", "push", "-u", "origin", "main"], cwd=temp_git_repo, check=True)
    return temp_git_repo


@pytest.fixture
def feature_with_worktree(repo_with_origin: Path, tmp_path: Path) -> dict[str, Path]:
    """Primary worktree on ``feature`` while ``main`` is checked out in a second worktree."""
    repo = repo_with_origin
    subprocess.run(["git", "checkout", "-b", "feature"], cwd=repo, check=True)
    (repo / "feature.txt").write_text("feature work")
    subprocess.run(["git", "add", "."], cwd=repo, check=True)
    subprocess.run(["git", "commit", "-m", "Add feature"], cwd=repo, check=True)

    other = tmp_path / "main-worktree"
    subprocess.run(["git", "worktree", "add", str(other), "main"], cwd=repo, check=True)
    return {"repo": repo, "worktree": other}


@pytest.fixture
def runner():
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def console() -> Console:
    return Console(verbose=True)


class InstalledDependencies(DependencyChecker):
    """Dependency checker that reports every tool as present."""

    def check_command(self, command: str) -> bool:
        return True


@pytest.fixture
def deps_ok(console: Console) -> InstalledDependencies:
    return InstalledDependencies(console)


class OfflineGitHub(GitHubClient):
    """gh client that never reports itself installed, so repository queries fall back to git."""

    def available(self) -> bool:
        return False


@pytest.fixture
def offline_gh() -> OfflineGitHub:
    return OfflineGitHub()


class FakeKubectl(KubectlClient):
    """In-memory cluster that answers the kubectl calls jd makes."""

    def __init__(self, context: str = "kind-test", populate_token: bool = True):
        super().__init__()
        self.context = context
        self.populate_token = populate_token
        self.objects: set[tuple[str, str | None, str]] = set()
        self.forwarded: list[tuple[str, str, str]] = []

    def current_context(self) -> str:
        return self.context

    def server(self) -> str:
        return "https://127.0.0.1:6443"

    def exists(self, kind, name, namespace=None):
        return (kind, namespace, name) in self.objects

    def names(self, kind, namespace=None):
        kind = kind.rstrip("s")
        return sorted(n for k, ns, n in self.objects if k == kind and ns == namespace)

    def create_namespace(self, namespace):
        self.objects.add(("namespace", None, namespace))

    def apply(self, manifest):
        metadata = manifest["metadata"]
        self.objects.add((manifest["kind"].lower(), metadata.get("namespace"), metadata["name"]))

    def jsonpath(self, kind, name, path, namespace=None):
        if kind == "secret" and self.populate_token and self.exists(kind, name, namespace):
            token = "deployer-token" if "token" in path else "CA DATA"
            return base64.b64encode(token.encode()).decode()
        return ""

    def port_forward(self, namespace, target, ports):
        self.forwarded.append((namespace, target, ports))
        return 0


@pytest.fixture
def fake_kubectl() -> FakeKubectl:
    return FakeKubectl()
