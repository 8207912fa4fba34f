import tempfile
from pathlib import Path
from textwrap import dedent

import click

from ..errors import CommandFailedError
from ..operations import CommandExecutor
from ..operations.executor import combined_output
from ..operations.npm_package import (
    PLACEHOLDER_VERSION,
    access_url,
    parse_owner_repo,
    read_package_info,
    write_placeholder,
)
from ._shared import get_console, get_git, report_errors, require_dependencies


@click.command()
@click.pass_context
@report_errors
def npm(ctx: click.Context) -> None:
    """Set up an npm package for OIDC trusted publishing.

    Publishes a 0.0.0-placeholder version so the package exists, then
    opens the npm access page to add GitHub Actions as trusted publisher.
    """
    console = get_console(ctx)
    git = get_git(ctx)
    root = Path(git.cwd or Path.cwd())

    name, description = read_package_info(root / "package.json")
    require_dependencies(ctx, "npm")

    console.log("Setting up npm package with OIDC trusted publishing")
    console.info(f"Package name: {name}")
    if description:
        console.info(f"Description: {description}")

    remote = git.remote_url() or ""
    with tempfile.TemporaryDirectory() as tmp:
        console.log("Creating placeholder package in temporary directory...")
        write_placeholder(Path(tmp), name, remote)

        console.log("Publishing placeholder package to npm...")
        result = CommandExecutor(cwd=Path(tmp), program="npm").run(
            ["publish", "--tag", "placeholder", "--access", "public"],
            check=False,
            capture=True,
        )
        if result.returncode != 0:
            raise CommandFailedError(
                "Failed to publish placeholder package",
                output=combined_output(result),
            )
    console.success(f"Placeholder package created: {name}@{PLACEHOLDER_VERSION}")

    owner, repo = parse_owner_repo(remote) or ("YOUR_ORG", "YOUR_REPO")
    console.echo()
    console.echo(click.style("Next Step: Configure OIDC Trusted Publishing", fg="blue", bold=True))
    console.echo(
        dedent(
            f"""
            1. On the npm access page, scroll to "Publishing access"
            2. Click "Add trusted publisher"
            3. Select "GitHub Actions" as the provider
            4. Fill in the following details:

               Repository Owner/Organization: {owner}
               Repository Name: {repo}
               Workflow Filename: release.yaml (or your workflow file name)
               Environment: (leave empty unless using GitHub Environments)

            5. Click "Add" to save the trusted publisher
            """
        )
    )

    url = access_url(name)
    console.info(f"Opening {url}")
    if click.launch(url) != 0:
        console.info("Open this URL in your browser:")
        console.echo(f"  {url}")

    console.success("Setup complete! Configure OIDC on the npm website and you're ready to go.")
