import shutil
from pathlib import Path

import click

from ..errors import CommandFailedError, PreconditionError
from ..operations import CommandExecutor
from ..operations.cleanup import directory_size, display_path, find_node_modules, format_bytes
from ..operations.environment import command_exists, get_os
from ._shared import get_config, get_console, report_errors


def run_mac_cleanup(ctx: click.Context) -> None:
    console = get_console(ctx)
    console.echo()
    console.info("Running mac-cleanup...")
    if not command_exists("mac-cleanup"):
        console.warning("mac-cleanup is not installed")
        if not click.confirm("Would you like to install mac-cleanup?", default=True):
            console.info("Skipping mac-cleanup")
            return
        console.info("Installing mac-cleanup...")
        try:
            CommandExecutor(program="brew").run(["install", "mac-cleanup-py"])
        except CommandFailedError:
            raise CommandFailedError("Failed to install mac-cleanup")

    if CommandExecutor(program="mac-cleanup").run(["-fn"], check=False).returncode == 0:
        console.info("mac-cleanup completed successfully")
    else:
        console.warning("mac-cleanup completed with errors")


@click.command()
@click.option("-p", "--path", "start", type=click.Path(), help="Path to start cleanup from")
@click.option("-i", "--include-hidden", is_flag=True, help="Include hidden directories")
@click.option("-n", "--dry-run", is_flag=True, help="Show what would be deleted")
@click.option("-s", "--skip-mac-cleanup", is_flag=True, help="Skip running mac-cleanup")
@click.pass_context
@report_errors
def cleanup(
    ctx: click.Context,
    start: str | None,
    include_hidden: bool,
    dry_run: bool,
    skip_mac_cleanup: bool,
) -> None:
    """Remove node_modules directories and free disk space."""
    console = get_console(ctx)
    root = Path(start).expanduser() if start else get_config(ctx).projects_dir
    if not root.is_dir():
        raise PreconditionError(f"Path does not exist: {root}")

    console.info(f"Starting cleanup from: {root}")
    if dry_run:
        console.warning("DRY RUN MODE - No files will be deleted")

    console.info("Searching for node_modules directories...")
    directories = find_node_modules(root, include_hidden)
    if not directories:
        console.info("No node_modules directories found")
    else:
        total = 0
        removed = 0
        for directory in directories:
            size = directory_size(directory)
            total += size
            label = f"{display_path(directory, root)} ({format_bytes(size)})"
            if dry_run:
                console.echo(f"  Would remove: {label}")
                continue
            console.echo(f"  Removing: {label}")
            try:
                shutil.rmtree(directory)
            except OSError as e:
                console.warning(f"  Failed to remove: {display_path(directory, root)} ({e})")
            else:
                removed += 1

        console.echo()
        if dry_run:
            console.info(f"Found {len(directories)} node_modules directories")
            console.info(f"Total space that would be freed: {format_bytes(total)}")
        else:
            console.info(f"Removed {removed} of {len(directories)} node_modules directories")
            console.info(f"Total space freed: {format_bytes(total)}")

    if not skip_mac_cleanup and not dry_run and get_os() == "macos":
        run_mac_cleanup(ctx)

    if dry_run:
        console.info("Dry run completed - no changes were made")
    else:
        console.success("Cleanup completed!")
