import click

from ..errors import CommandFailedError
from ..operations import CommandExecutor, GitExecutor
from ..operations.updater import (
    CHANNELS,
    DISTRIBUTION,
    SOURCE_ROOT,
    detect_install_method,
    installed_version,
    upgrade_command,
)
from ._shared import get_config, get_console, get_github, report_errors


def update_from_source(ctx: click.Context) -> None:
    console = get_console(ctx)
    git = GitExecutor(cwd=SOURCE_ROOT)
    if git.has_uncommitted_changes():
        console.warning("You have local changes")
        if click.confirm("Stash local changes?", default=True):
            git.stash()
    if not git.pull("main"):
        raise CommandFailedError("Failed to update from source")
    CommandExecutor(cwd=SOURCE_ROOT, program="pip").run(["install", "-e", "."])
    console.log("Successfully updated from source")


@click.command()
@click.option("--check", "check_only", is_flag=True, help="Check for updates without installing")
@click.option("--force", is_flag=True, help="Update even if already on latest")
@click.option(
    "--channel", type=click.Choice(CHANNELS), default="stable", show_default=True, help="Update channel"
)
@click.pass_context
@report_errors
def update(ctx: click.Context, check_only: bool, force: bool, channel: str) -> None:
    """Update jd to the latest release."""
    console = get_console(ctx)
    gh = get_github(ctx)

    current = installed_version()
    console.info("Checking for updates...")
    console.info(f"Current version: {current}")

    latest = gh.latest_release(get_config(ctx).release_repo) if gh.available() else None
    if latest is None:
        console.warning("Could not determine latest version")
    else:
        console.info(f"Latest version: {latest}")
        if latest == current:
            console.log("You are on the latest version")
        else:
            console.log(f"Update available: {current} -> {latest}")

    if check_only:
        return
    if latest == current and not force:
        console.info("No update needed")
        return

    method = detect_install_method()
    console.info(f"Installation method: {method}")

    if method == "source":
        if click.confirm("Update from source?", default=True):
            update_from_source(ctx)
    elif click.confirm(f"Update {DISTRIBUTION} via {method}?", default=True):
        args = upgrade_command(method, channel)
        console.info(f"Updating via {method}...")
        try:
            CommandExecutor(program=args[0]).run(args[1:])
        except CommandFailedError:
            raise CommandFailedError(
                f"Failed to update via {method}",
                hints=[f"Please update manually: {' '.join(args)}"],
            )
        console.log("Successfully updated jd")
    else:
        return

    console.log("Update complete!")
