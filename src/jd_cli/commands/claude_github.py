import click

from ..errors import CommandFailedError, PreconditionError
from ..operations import CommandExecutor, OnePasswordClient
from ..operations.secrets import SECRET_GROUPS
from ._shared import get_config, get_console, get_github, report_errors, require_dependencies

TOKEN_SECRET, TOKEN_ITEM, _ = SECRET_GROUPS["claude"][0]


@click.command("claude-github")
@click.pass_context
@report_errors
def claude_github(ctx: click.Context) -> None:
    """Rotate CLAUDE_CODE_OAUTH_TOKEN in 1Password and every GitHub repo.

    Repositories that do not already have the secret are skipped.
    """
    require_dependencies(ctx, "claude-github")
    console = get_console(ctx)
    gh = get_github(ctx)
    vault = get_config(ctx).vault

    console.log("Starting Claude Code OAuth token update process...")
    console.info("Step 1: Generating new OAuth token with 'claude setup-token'")
    console.info("Please follow the instructions in your browser to authenticate.")
    try:
        CommandExecutor(program="claude").run(["setup-token"])
    except CommandFailedError:
        raise CommandFailedError("Failed to run 'claude setup-token'")

    console.echo()
    console.info("Step 2: Please paste the OAuth token from Claude Code below:")
    token = click.prompt("Token", default="", show_default=False, hide_input=True).strip()
    if not token:
        raise PreconditionError("No token provided. Aborting.")
    console.log(f"Token received (length: {len(token)} characters)")

    console.info("Step 3: Updating token in 1Password...")
    op = ctx.obj.get("op") or OnePasswordClient()
    if op.edit_field(TOKEN_ITEM, TOKEN_SECRET, token, vault):
        console.log(
            f"Successfully updated 1Password secret: op://{vault}/{TOKEN_ITEM}/{TOKEN_SECRET}"
        )
    else:
        console.warning("Failed to update 1Password secret. Continuing with GitHub updates...")

    console.info("Step 4: Fetching all GitHub repositories...")
    repos = gh.list_repos()
    if not repos:
        console.warning("No repositories found.")
        return
    console.log(f"Found {len(repos)} repositories")

    console.info(f"Step 5: Updating {TOKEN_SECRET} secret in repositories...")
    updated = skipped = failed = 0
    for repo in repos:
        if TOKEN_SECRET not in gh.list_secrets(repo):
            console.debug(f"Skipping {repo} (secret does not exist)")
            skipped += 1
            continue
        if gh.set_secret(TOKEN_SECRET, token, repo).returncode == 0:
            console.log(f"✓ Updated: {repo}")
            updated += 1
        else:
            console.warning(f"✗ Failed: {repo}")
            failed += 1

    console.echo()
    console.log("Update complete!")
    console.log(f"  Updated: {updated} repositories")
    console.log(f"  Skipped: {skipped} repositories (secret does not exist)")
    if failed:
        console.warning(f"  Failed: {failed} repositories")
