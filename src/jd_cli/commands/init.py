from textwrap import dedent

import click

from ..operations.completion import install_completion
from ..operations.environment import detect_shell, rc_file_for
from ._shared import confirm_or_stop, get_console, get_dependencies, report_errors


def setup_completion(ctx: click.Context) -> None:
    console = get_console(ctx)
    shell = detect_shell()
    if shell is None:
        console.warning("Could not detect bash or zsh; skipping shell completion")
        console.info('Add eval "$(jd completion <shell>)" to your shell rc file manually')
        return

    rc_file = rc_file_for(shell)
    backup = install_completion(shell, rc_file)
    if backup is None:
        console.info(f"Shell completion already configured in {rc_file}")
        return
    console.log(f"Added {shell} completion to {rc_file}")
    console.info(f"Backup saved to {backup}")
    console.info(f"Restart your shell or run: source {rc_file}")


@click.command()
@click.option("--skip-deps", is_flag=True, help="Skip dependency installation")
@click.option("--force", is_flag=True, help="Force reinstall all dependencies")
@click.option("--no-completion", is_flag=True, help="Do not install shell completion")
@click.pass_context
@report_errors
def init(ctx: click.Context, skip_deps: bool, force: bool, no_completion: bool) -> None:
    """Set up jd: install dependencies and shell completion."""
    console = get_console(ctx)
    dependencies = get_dependencies(ctx)

    console.log("Initializing jd CLI...")
    if not skip_deps:
        console.info("jd CLI can work with several optional tools:")
        console.echo("  • GitHub CLI (gh) - Required for 'jd pr' command")
        console.echo("  • DevContainer CLI - Required for 'jd dev' command")
        console.echo()
        if click.confirm("Would you like to install/configure all dependencies now?", default=True):
            if not dependencies.install_all(force=force):
                console.warning("Some dependencies could not be installed")
                console.echo("You can still use jd CLI, but some commands may not work")
                confirm_or_stop(ctx, "Continue anyway?", "Run 'jd init' again later", default=True)
        else:
            console.info("Skipping dependency installation")
            console.echo("You can install them later when needed")

    if not no_completion:
        setup_completion(ctx)

    console.echo()
    console.log("jd CLI initialization complete!")
    console.echo(
        dedent(
            """
            Available commands:
              jd dev [template]    - Apply devcontainer template
              jd pr [options]      - Create GitHub pull request
              jd update            - Update jd CLI to latest version
              jd --help            - Show all commands
            """
        )
    )
    console.info("Get started with: jd --help")
