"""Run external tools for jd."""

import shutil
import subprocess
from pathlib import Path

from jd_cli.errors import (
    CommandFailedError,
    MissingDependencyError,
    NotAGitRepositoryError,
)


def combined_output(result: subprocess.CompletedProcess[str]) -> str:
    """Join captured stdout and stderr of a finished command."""
    parts = [result.stdout or "", result.stderr or ""]
    return "\n".join(p.strip("\n") for p in parts if p.strip())


def run_shell(command: str, cwd: Path | None = None) -> int:
    """Run a shell pipeline in the foreground and return its exit code."""
    result = subprocess.run(command, shell=True, cwd=cwd, text=True)
    return result.returncode


class CommandExecutor:
    """Execute an external tool with proper error handling."""

    program: str = ""

    def __init__(self, cwd: Path | None = None, program: str | None = None):
        self.cwd = cwd
        if program:
            self.program = program

    def available(self) -> bool:
        return shutil.which(self.program) is not None

    def run(
        self,
        args: list[str],
        check: bool = True,
        capture: bool = False,
        input: str | None = None,
    ) -> subprocess.CompletedProcess[str]:
        """Run the tool and always return a CompletedProcess.

        With ``check`` a non-zero exit raises CommandFailedError carrying the
        captured output.
        """
        cmd = [self.program] + args
        try:
            result = subprocess.run(
                cmd,
                cwd=self.cwd,
                capture_output=capture,
                text=True,
                input=input,
            )
        except FileNotFoundError:
            raise MissingDependencyError(f"{self.program} is not installed")

        if check and result.returncode != 0:
            raise CommandFailedError(
                f"Command failed: {self.program} {' '.join(args)}",
                output=combined_output(result) if capture else "",
            )
        return result

    def succeeds(self, args: list[str]) -> bool:
        """Run quietly and report whether the tool exited zero."""
        return self.run(args, check=False, capture=True).returncode == 0

    def output(self, args: list[str], input: str | None = None) -> str:
        """Stripped stdout of a successful run, empty on failure."""
        result = self.run(args, check=False, capture=True, input=input)
        if result.returncode != 0:
            return ""
        return (result.stdout or "").strip()

    def lines(self, args: list[str]) -> list[str]:
        return [line for line in self.output(args).splitlines() if line.strip()]


class GitExecutor(CommandExecutor):
    """Execute git commands with proper error handling."""

    program = "git"

    def is_inside_work_tree(self) -> bool:
        return self.succeeds(["rev-parse", "--is-inside-work-tree"])

    def ensure_repository(self) -> None:
        if not self.is_inside_work_tree():
            raise NotAGitRepositoryError()

    def get_current_branch(self) -> str:
        """Get current branch name."""
        return self.output(["rev-parse", "--abbrev-ref", "HEAD"])

    def has_uncommitted_changes(self) -> bool:
        return not self.succeeds(["diff-index", "--quiet", "HEAD", "--"])

    def has_staged_changes(self) -> bool:
        return not self.succeeds(["diff", "--cached", "--quiet"])

    def branch_exists(self, branch: str) -> bool:
        """Check if a local branch exists."""
        return self.succeeds(["show-ref", "--verify", "--quiet", f"refs/heads/{branch}"])

    def list_local_branches(self) -> list[str]:
        return self.lines(["for-each-ref", "--format=%(refname:short)", "refs/heads/"])

    def create_branch(self, branch: str, start_point: str, track: bool = True) -> None:
        """Create a new branch."""
        args = ["branch"]
        if not track:
            args.append("--no-track")
        self.run(args + [branch, start_point], capture=True)

    def checkout(self, branch: str, check: bool = True) -> bool:
        """Checkout a branch, returning False on failure when not checking."""
        result = self.run(["checkout", branch], check=check, capture=True)
        return result.returncode == 0

    def delete_branch(self, branch: str, force: bool = False) -> bool:
        """Delete a branch."""
        args = ["branch", "-D" if force else "-d", branch]
        return self.succeeds(args)

    def fetch(self, *refspecs: str) -> subprocess.CompletedProcess[str]:
        return self.run(["fetch", "origin", *refspecs], check=False, capture=True)

    def worktree_entries(self) -> list[str]:
        return self.lines(["worktree", "list", "--porcelain"])

    def worktree_count(self) -> int:
        return sum(1 for line in self.worktree_entries() if line.startswith("worktree "))

    def worktree_branches(self) -> list[str]:
        """Branches checked out in any worktree, as short names."""
        branches = []
        for line in self.worktree_entries():
            if line.startswith("branch "):
                ref = line[len("branch ") :]
                branches.append(ref.removeprefix("refs/heads/"))
        return branches

    def get_config(self, key: str) -> str | None:
        """Get a git config value."""
        return self.output(["config", "--get", key]) or None

    def remote_url(self) -> str | None:
        return self.get_config("remote.origin.url")

    def origin_head(self) -> str | None:
        ref = self.output(["symbolic-ref", "refs/remotes/origin/HEAD"])
        return ref.removeprefix("refs/remotes/origin/") or None

    def log_oneline(self, base: str, head: str) -> str:
        return self.output(["log", "--oneline", f"{base}..{head}"])

    def last_commit_subject(self) -> str:
        return self.output(["log", "-1", "--pretty=format:%s"])

    def diff_stat(self, base: str, head: str) -> str:
        return self.output(["diff", f"{base}...{head}", "--stat"])

    def diff(self, base: str, head: str, max_lines: int = 500) -> str:
        lines = self.output(["diff", f"{base}...{head}"]).splitlines()
        return "\n".join(lines[:max_lines])

    def remote_branch_exists(self, branch: str) -> bool:
        return self.succeeds(["ls-remote", "--exit-code", "origin", branch])

    def commits_ahead(self, branch: str) -> int:
        count = self.output(["rev-list", "--count", f"origin/{branch}..{branch}"])
        return int(count) if count.isdigit() else 0

    def push(self, branch: str, set_upstream: bool = False) -> None:
        args = ["push"]
        if set_upstream:
            args.append("-u")
        self.run(args + ["origin", branch])

    def merge(self, branch: str, message: str) -> subprocess.CompletedProcess[str]:
        return self.run(
            ["merge", branch, "--no-ff", "-m", message], check=False, capture=True
        )

    def abort_merge(self) -> None:
        self.run(["merge", "--abort"], check=False, capture=True)

    def add(self, paths: list[str]) -> None:
        if paths:
            self.run(["add", *paths])

    def commit(self, message: str) -> None:
        self.run(["commit", "-m", message], capture=True)

    def stash(self) -> None:
        self.run(["stash"])

    def pull(self, branch: str) -> bool:
        return self.run(["pull", "origin", branch], check=False).returncode == 0

    def init(self) -> None:
        self.run(["init"])
