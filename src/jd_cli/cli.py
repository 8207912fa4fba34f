"""CLI entry point for jd."""

import click

from .console import Console


@click.group(
    context_settings={"help_option_names": ["-h", "--help"]},
    invoke_without_command=True,
)
@click.version_option(package_name="jd-cli", prog_name="jd")
@click.option("-v", "--verbose", is_flag=True, envvar="JD_VERBOSE", help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """jd: personal developer workflow toolkit.

    Pull requests and merges, repository bootstrap with secrets,
    devcontainers, releases, npm trusted publishing, Python virtualenvs
    and Kubernetes deployer access.
    """
    obj = ctx.ensure_object(dict)
    console = obj.setdefault("console", Console(verbose))
    console.verbose = console.verbose or verbose

    if ctx.invoked_subcommand is None:
        console.banner()
        click.echo(ctx.get_help())


# Import and register commands
from .commands.pr import pr
from .commands.merge import merge
from .commands.repo import repo
from .commands.dev import dev
from .commands.release import release
from .commands.npm import npm
from .commands.venv import venv, requirements
from .commands.cleanup import cleanup
from .commands.claude_github import claude_github
from .commands.pg import pg
from .commands.kubeconfig import kubeconfig
from .commands.completion import completion
from .commands.init import init
from .commands.update import update

cli.add_command(pr)
cli.add_command(merge)
cli.add_command(repo)
cli.add_command(dev)
cli.add_command(release)
cli.add_command(npm)
cli.add_command(venv)
cli.add_command(requirements)
cli.add_command(cleanup)
cli.add_command(claude_github)
cli.add_command(pg)
cli.add_command(kubeconfig)
cli.add_command(completion)
cli.add_command(init)
cli.add_command(update)


if __name__ == "__main__":
    cli()
