"""Detect and install the external tools jd commands rely on."""

from dataclasses import dataclass

import click

from jd_cli.console import Console
from jd_cli.operations.environment import command_exists, get_os
from jd_cli.operations.executor import CommandExecutor, run_shell
from jd_cli.operations.github import GitHubClient

GH_APT_INSTALL = (
    "curl -fsSL https://cli.github.com/packages/githubcli-archive-keyring.gpg"
    " | sudo gpg --dearmor -o /usr/share/keyrings/githubcli-archive-keyring.gpg"
    " && echo 'deb [arch=$(dpkg --print-architecture)"
    " signed-by=/usr/share/keyrings/githubcli-archive-keyring.gpg]"
    " https://cli.github.com/packages stable main'"
    " | sudo tee /etc/apt/sources.list.d/github-cli.list > /dev/null"
    " && sudo apt update && sudo apt install gh"
)


@dataclass(frozen=True, slots=True)
class Tool:
    """An external tool a command needs."""

    command: str
    name: str
    docs: str


TOOLS = {
    "gh": Tool("gh", "GitHub CLI", "https://github.com/cli/cli#installation"),
    "op": Tool("op", "1Password CLI", "https://developer.1password.com/docs/cli/get-started/"),
    "kubectl": Tool("kubectl", "kubectl", "https://kubernetes.io/docs/tasks/tools/"),
    "claude": Tool("claude", "Claude Code CLI", "https://docs.anthropic.com/en/docs/claude-code"),
    "npm": Tool("npm", "npm", "https://nodejs.org/"),
    "devcontainer": Tool(
        "devcontainer", "devcontainer CLI", "https://github.com/devcontainers/cli"
    ),
}

COMMAND_DEPENDENCIES: dict[str, tuple[str, ...]] = {
    "pr": ("gh",),
    "merge": ("gh",),
    "release": ("gh",),
    "repo": ("gh", "op"),
    "claude-github": ("gh", "op", "claude"),
    "dev": ("devcontainer",),
    "npm": ("npm",),
    "pg": ("kubectl",),
    "kubeconfig": ("kubectl",),
}


def install_command(tool: str, os_name: str | None = None) -> str | None:
    """Shell command that installs ``tool`` on this platform, if one is known."""
    os_name = os_name or get_os()
    if tool == "gh":
        if os_name == "macos":
            return "brew install gh"
        if os_name == "linux":
            if command_exists("apt-get"):
                return GH_APT_INSTALL
            if command_exists("yum"):
                return "sudo yum install gh"
        if os_name == "windows":
            return "winget install --id GitHub.cli"
        return None
    if tool in ("devcontainer", "claude"):
        package = "@devcontainers/cli" if tool == "devcontainer" else "@anthropic-ai/claude-code"
        return f"npm install -g {package}"
    if os_name == "macos":
        return {
            "op": "brew install --cask 1password-cli",
            "kubectl": "brew install kubectl",
            "npm": "brew install node",
        }.get(tool)
    return None


class DependencyChecker:
    """Check for required tools and offer to install missing ones."""

    def __init__(self, console: Console):
        self.console = console

    def check_dependency(
        self,
        command: str,
        name: str | None = None,
        install_cmd: str | None = None,
        optional: bool = False,
        docs: str | None = None,
        force: bool = False,
    ) -> bool:
        name = name or command
        if command_exists(command) and not force:
            self.console.debug(f"{name} is installed")
            return True

        if optional:
            self.console.warning(f"{name} is not installed (optional)")
            if install_cmd:
                self.console.info(f"To install: {install_cmd}")
            return True

        if not force:
            self.console.error(f"{name} is not installed")

        if not install_cmd:
            if docs:
                self.console.info(f"Install it from: {docs}")
            return False

        self.console.echo()
        self.console.warning(f"{name} is required but not installed")
        if not click.confirm(f"Would you like to install {name} automatically?", default=True):
            self.console.echo("To install manually, run:")
            self.console.echo(f"  {install_cmd}")
            return False

        self.console.info(f"Installing {name}...")
        if run_shell(install_cmd) == 0:
            self.console.log(f"{name} installed successfully")
            return True

        self.console.error(f"Failed to install {name}")
        self.console.echo(f"Please install manually: {install_cmd}")
        return False

    def check_tool(self, tool: str, force: bool = False) -> bool:
        spec = TOOLS[tool]
        return self.check_dependency(
            spec.command,
            spec.name,
            install_command(tool),
            docs=spec.docs,
            force=force,
        )

    def check_gh_cli(self, force: bool = False) -> bool:
        """Make sure gh is installed and authenticated."""
        if not self.check_tool("gh", force=force):
            return False

        gh = GitHubClient()
        if gh.is_authenticated():
            return True

        self.console.warning("GitHub CLI is not authenticated")
        if not click.confirm("Would you like to authenticate with GitHub now?", default=True):
            self.console.echo("To authenticate manually, run:")
            self.console.echo("  gh auth login")
            return False

        self.console.info("Starting GitHub authentication...")
        self.console.echo("You'll be guided through the GitHub login process.")
        if gh.login():
            self.console.log("Successfully authenticated with GitHub")
            return True

        self.console.error("GitHub authentication failed")
        self.console.echo("Please run manually: gh auth login")
        return False

    def check_nodejs(self) -> bool:
        if not command_exists("node"):
            self.console.error("Node.js is not installed")
            self.console.info("Visit https://nodejs.org/ to install Node.js")
            return False
        if not command_exists("npm"):
            self.console.error("npm is not installed")
            self.console.info("npm usually comes with Node.js")
            return False

        node_version = CommandExecutor(program="node").output(["--version"])
        npm_version = CommandExecutor(program="npm").output(["--version"])
        self.console.debug(f"Node.js version: {node_version.removeprefix('v')}")
        self.console.debug(f"npm version: {npm_version}")
        return True

    def check_command(self, command: str) -> bool:
        """Check every tool registered for a jd command."""
        for tool in COMMAND_DEPENDENCIES.get(command, ()):
            ok = self.check_gh_cli() if tool == "gh" else self.check_tool(tool)
            if not ok:
                return False
        return True

    def install_all(self, force: bool = False) -> bool:
        self.console.info("Checking and installing all dependencies...")
        failed = False

        if not self.check_nodejs():
            self.console.error("Node.js is required for npm-based tools: https://nodejs.org/")
            failed = True

        self.console.echo()
        self.console.info("Checking devcontainer CLI...")
        if not self.check_tool("devcontainer", force=force):
            self.console.warning("Could not install devcontainer CLI")
            failed = True

        self.console.echo()
        self.console.info("Checking GitHub CLI...")
        if not self.check_gh_cli(force=force):
            self.console.warning("Could not install/configure GitHub CLI")
            failed = True

        self.console.echo()
        if failed:
            self.console.warning("Some dependencies could not be installed automatically")
            self.console.echo("Please install them manually as shown above")
            return False

        self.console.log("All dependencies installed successfully!")
        return True
