import click

from ..operations.completion import SHELLS, render


@click.command()
@click.argument("shell", type=click.Choice(SHELLS), required=False)
@click.pass_context
def completion(ctx: click.Context, shell: str | None) -> None:
    """Print the shell completion script for SHELL.

    \b
    Add to ~/.bashrc or ~/.zshrc:
        eval "$(jd completion bash)"
        eval "$(jd completion zsh)"

    Run 'jd init' to set this up automatically.
    """
    if shell is None:
        click.echo(ctx.get_help())
        return
    click.echo(render(ctx.find_root().command, shell), nl=False)
