"""Return the working tree to the default branch after a merge."""

import re

from jd_cli.console import Console
from jd_cli.errors import CommandFailedError
from jd_cli.operations.executor import GitExecutor


def temp_branch_pattern(default_branch: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(default_branch)}-temp-[0-9]+$")


class WorktreeReconciler:
    """Switch to an up-to-date default branch without touching other worktrees."""

    def __init__(self, executor: GitExecutor, console: Console):
        self.executor = executor
        self.console = console

    def next_temp_branch(self, default_branch: str) -> str:
        """Smallest ``<default>-temp-<n>`` not already taken."""
        counter = 1
        while self.executor.branch_exists(f"{default_branch}-temp-{counter}"):
            counter += 1
        return f"{default_branch}-temp-{counter}"

    def is_checked_out_elsewhere(self, branch: str) -> bool:
        """Check if ``branch`` is checked out in a worktree other than this one."""
        if self.executor.get_current_branch() == branch:
            return False
        if self.executor.worktree_count() <= 1:
            return False
        return branch in self.executor.worktree_branches()

    def unused_temp_branches(self, default_branch: str) -> list[str]:
        """Temp branches of ``default_branch`` not checked out in any worktree."""
        pattern = temp_branch_pattern(default_branch)
        candidates = [b for b in self.executor.list_local_branches() if pattern.match(b)]
        if not candidates:
            return []
        checked_out = set(self.executor.worktree_branches())
        return [b for b in candidates if b not in checked_out]

    def cleanup_temp_branches(self, default_branch: str, exclude: str | None = None) -> int:
        """Delete unused temp branches, returning how many were removed."""
        self.console.info("Cleaning up unused temp branches...")

        unused = [b for b in self.unused_temp_branches(default_branch) if b != exclude]
        if not unused:
            self.console.log("No unused temp branches to clean up")
            return 0

        count = 0
        for branch in unused:
            self.console.info(f"Deleting branch: {branch}")
            if self.executor.delete_branch(branch, force=True):
                count += 1
            else:
                self.console.warning(f"Failed to delete branch: {branch}")

        self.console.log(f"Cleaned up {count} temp branch(es)")
        return count

    def fetch_default_branch(self, default_branch: str) -> bool:
        """Update the local default branch from origin, falling back to a plain fetch."""
        result = self.executor.fetch(f"{default_branch}:{default_branch}")
        if result.returncode == 0:
            self.console.debug(f"Updated local {default_branch} to match origin/{default_branch}")
            return True

        self.console.debug(f"Fast-forward update of {default_branch} failed")
        if self.executor.fetch().returncode == 0:
            self.console.debug("Fetched from origin (local branch may have diverged)")
            return True

        self.console.warning("Could not fetch latest changes from origin")
        self.console.info("You may need to manually run: git fetch origin")
        return False

    def switch_to_temp_branch(self, default_branch: str) -> str:
        """Create the next temp branch from ``origin/<default>`` and check it out."""
        temp_branch = self.next_temp_branch(default_branch)
        self.console.info(f"Creating temporary branch: {temp_branch}")

        try:
            self.executor.create_branch(temp_branch, f"origin/{default_branch}", track=False)
        except CommandFailedError as e:
            raise CommandFailedError("Failed to create temporary branch", output=e.output)

        if not self.executor.checkout(temp_branch, check=False):
            self.executor.delete_branch(temp_branch, force=True)
            raise CommandFailedError("Failed to checkout temporary branch")

        self.console.log(f"Switched to temporary branch: {temp_branch}")
        self.console.info(f"Based on latest origin/{default_branch}")
        return temp_branch

    def reconcile(self, default_branch: str) -> str | None:
        """Fetch and switch to the default branch or a fresh temp branch.

        Returns the branch now checked out, or None when the fetch failed and
        the working tree was left alone.
        """
        self.console.info("Updating local repository...")
        if not self.fetch_default_branch(default_branch):
            return None

        if self.is_checked_out_elsewhere(default_branch):
            self.console.warning(
                f"Default branch '{default_branch}' is checked out in another worktree"
            )
            temp_branch = self.switch_to_temp_branch(default_branch)
            self.cleanup_temp_branches(default_branch, exclude=temp_branch)
            return temp_branch

        if self.executor.checkout(default_branch, check=False):
            self.console.log(f"Switched to {default_branch} (updated to latest)")
            self.cleanup_temp_branches(default_branch)
            return default_branch

        self.console.warning(
            f"Failed to switch to {default_branch} (may have uncommitted changes)"
        )
        temp_branch = self.switch_to_temp_branch(default_branch)
        self.cleanup_temp_branches(default_branch, exclude=temp_branch)
        return temp_branch
