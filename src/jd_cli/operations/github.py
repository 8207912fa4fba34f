"""GitHub CLI client."""

import json
import subprocess

from jd_cli.errors import CommandFailedError
from jd_cli.operations.executor import CommandExecutor, combined_output


class GitHubClient(CommandExecutor):
    """Query and mutate GitHub through the gh CLI."""

    program = "gh"

    def is_authenticated(self) -> bool:
        return self.succeeds(["auth", "status"])

    def login(self) -> bool:
        return self.run(["auth", "login"], check=False).returncode == 0

    def default_branch(self) -> str | None:
        return (
            self.output(
                ["repo", "view", "--json", "defaultBranchRef", "--jq", ".defaultBranchRef.name"]
            )
            or None
        )

    def find_pr_number(self, branch: str) -> str | None:
        return (
            self.output(["pr", "list", "--head", branch, "--json", "number", "--jq", ".[0].number"])
            or None
        )

    def pr_title(self, number: str) -> str:
        return self.output(["pr", "view", number, "--json", "title", "--jq", ".title"])

    def pr_url(self) -> str:
        return self.output(["pr", "view", "--json", "url", "-q", ".url"])

    def merge_pr(self, number: str, merge_type: str) -> None:
        result = self.run(
            ["pr", "merge", number, f"--{merge_type}", "--delete-branch"],
            check=False,
            capture=True,
        )
        if result.returncode != 0:
            raise CommandFailedError(
                f"Failed to merge PR #{number}",
                output=combined_output(result),
                hints=[
                    "Common issues:",
                    "  - PR has merge conflicts that need to be resolved",
                    "  - PR checks/CI are still running or have failed",
                    "  - You don't have permission to merge",
                    "  - Uncommitted changes in your working directory",
                ],
            )

    def create_pr(
        self,
        title: str,
        body: str,
        base: str,
        head: str,
        draft: bool = False,
        reviewers: str = "",
        assignees: str = "",
        labels: str = "",
        milestone: str = "",
        no_maintainer: bool = False,
        web: bool = False,
    ) -> None:
        args = ["pr", "create", "--title", title, "--body", body, "--base", base, "--head", head]
        if draft:
            args.append("--draft")
        if reviewers:
            args += ["--reviewer", reviewers]
        if assignees:
            args += ["--assignee", assignees]
        if labels:
            args += ["--label", labels]
        if milestone:
            args += ["--milestone", milestone]
        if no_maintainer:
            args.append("--no-maintainer-edit")
        if web:
            args.append("--web")

        result = self.run(args, check=False, capture=True)
        if result.returncode != 0:
            raise CommandFailedError(
                "Failed to create pull request",
                output=combined_output(result),
                hints=[
                    "Common issues:",
                    "  - GitHub authentication needed (run: gh auth login)",
                    "  - PR already exists for this branch",
                    "  - Invalid branch or base branch",
                ],
            )

    def repo_exists(self) -> bool:
        return self.succeeds(["repo", "view"])

    def repo_name_with_owner(self) -> str:
        return self.output(["repo", "view", "--json", "nameWithOwner", "-q", ".nameWithOwner"])

    def repo_url(self) -> str:
        return self.output(["repo", "view", "--json", "url", "-q", ".url"])

    def create_repo(self, name: str, visibility: str, description: str = "") -> None:
        args = ["repo", "create", name, "--source=.", f"--{visibility}"]
        if description:
            args += ["--description", description]
        self.run(args, capture=True)

    def list_repos(self, limit: int = 1000) -> list[str]:
        return self.lines(
            ["repo", "list", "--limit", str(limit), "--json", "nameWithOwner", "--jq", ".[].nameWithOwner"]
        )

    def list_secrets(self, repo: str | None = None) -> list[str]:
        args = ["secret", "list"]
        if repo:
            args += ["--repo", repo]
        return [line.split()[0] for line in self.lines(args)]

    def set_secret(
        self, name: str, value: str, repo: str | None = None
    ) -> subprocess.CompletedProcess[str]:
        args = ["secret", "set", name]
        if repo:
            args += ["--repo", repo]
        return self.run(args, check=False, capture=True, input=value)

    def create_release(self, tag: str, target: str) -> None:
        self.run(
            ["release", "create", tag, "--target", target, "--title", tag, "--generate-notes"],
            capture=True,
        )

    def release_url(self, tag: str) -> str:
        return self.output(["release", "view", tag, "--json", "url", "-q", ".url"])

    def latest_release(self, repo: str) -> str | None:
        tag = self.output(
            ["release", "list", "--repo", repo, "--limit", "1", "--json", "tagName", "--jq", ".[0].tagName"]
        )
        return tag.removeprefix("v") or None

    def ruleset_names(self, repo: str) -> list[str]:
        return self.lines(["api", f"repos/{repo}/rulesets", "--jq", ".[].name"])

    def create_ruleset(self, repo: str, ruleset: dict) -> None:
        self.run(
            ["api", f"repos/{repo}/rulesets", "--method", "POST", "--input", "-"],
            capture=True,
            input=json.dumps(ruleset),
        )

    def enable_pages(self, repo: str, branch: str, path: str = "/docs") -> bool:
        payload = {"source": {"branch": branch, "path": path}}
        return (
            self.run(
                ["api", f"repos/{repo}/pages", "--method", "POST", "--input", "-"],
                check=False,
                capture=True,
                input=json.dumps(payload),
            ).returncode
            == 0
        )
