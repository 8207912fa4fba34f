import shutil
from pathlib import Path

import click

from ..errors import CommandFailedError, PreconditionError
from ..operations import CommandExecutor
from ..operations.devcontainer import (
    DEFAULT_TEMPLATE,
    TEMPLATE_SHORTCUTS,
    replace_name_placeholders,
    resolve_template,
)
from ..operations.environment import command_exists, repository_name
from ._shared import get_config, get_console, get_git, report_errors, require_dependencies


def list_templates(ctx: click.Context) -> None:
    console = get_console(ctx)
    registry = get_config(ctx).template_registry
    console.info("Available template shortcuts:")
    console.echo()
    for name, template_id in sorted(TEMPLATE_SHORTCUTS.items()):
        console.echo(f"  {name:<20} {template_id}")
    console.echo()
    console.info(f"Default registry: {registry}/")
    console.info("Any template name without '/' will use the default registry")
    console.info(f"Example: 'jd dev nodejs' -> {registry}/nodejs")
    console.echo()
    console.info("You can also use any full template ID from other registries")
    console.info("Find more at: https://containers.dev/templates")


@click.command()
@click.argument("template", default=DEFAULT_TEMPLATE)
@click.option("--force", is_flag=True, help="Overwrite existing .devcontainer")
@click.option("--list", "list_only", is_flag=True, help="List available templates")
@click.pass_context
@report_errors
def dev(ctx: click.Context, template: str, force: bool, list_only: bool) -> None:
    """Apply a devcontainer template to the current project.

    TEMPLATE: a shortcut, a name from the default registry, or a full
    template ID (default: nodejs-postgres)
    """
    if list_only:
        list_templates(ctx)
        return

    require_dependencies(ctx, "dev")
    console = get_console(ctx)
    git = get_git(ctx)
    root = Path(git.cwd or Path.cwd())
    devcontainer_dir = root / ".devcontainer"

    if devcontainer_dir.is_dir() and not force:
        raise PreconditionError(
            ".devcontainer directory already exists", hints=["Use --force to overwrite"]
        )

    template_id, kind = resolve_template(template, get_config(ctx).template_registry)
    if kind == "shortcut":
        console.log(f"Using template: {template} ({template_id})")
    elif kind == "registry":
        console.info(f"Using template from default registry: {template_id}")
    else:
        console.log(f"Using custom template: {template_id}")

    if force and devcontainer_dir.is_dir():
        console.warning("Removing existing .devcontainer directory")
        shutil.rmtree(devcontainer_dir)

    console.info("Applying devcontainer template...")
    devcontainer = CommandExecutor(cwd=git.cwd, program="devcontainer")
    try:
        devcontainer.run(
            ["templates", "apply", "--template-id", template_id, "--workspace-folder", "."]
        )
    except CommandFailedError:
        raise CommandFailedError("Failed to apply devcontainer template")
    console.log("Successfully applied devcontainer template")

    name = repository_name(git, root)
    console.debug(f"Detected repository name: {name}")
    for path in replace_name_placeholders(devcontainer_dir, name):
        console.info(f"Updated {path.name} with repository name: {name}")

    if command_exists("code") and click.confirm(
        "Open in VS Code with Dev Container?", default=True
    ):
        CommandExecutor(cwd=git.cwd, program="code").run(
            [".", "--command", "remote-containers.openFolder"], check=False
        )
