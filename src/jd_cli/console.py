"""Terminal output for jd."""

import sys

import click

BANNER_LINES = (
    ((23, 187, 221), "     ██╗██████╗ "),
    ((23, 187, 221), "     ██║██╔══██╗"),
    ((40, 198, 209), "     ██║██║  ██║"),
    ((69, 204, 180), "██   ██║██║  ██║"),
    ((114, 207, 154), "╚█████╔╝██████╔╝"),
    ((152, 210, 128), " ╚════╝ ╚═════╝ "),
)


class Console:
    """Format and print jd messages."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def log(self, message: str) -> None:
        click.echo(f"{click.style('[jd]', fg='green')} {message}")

    def info(self, message: str) -> None:
        click.echo(f"{click.style('[jd info]', fg='blue')} {message}")

    def warning(self, message: str) -> None:
        click.echo(f"{click.style('[jd warning]', fg='yellow', bold=True)} {message}")

    def error(self, message: str) -> None:
        click.echo(f"{click.style('[jd error]', fg='red')} {message}", err=True)

    def success(self, message: str) -> None:
        click.echo(f"{click.style('✓', fg='green')} {message}")

    def debug(self, message: str) -> None:
        if self.verbose:
            click.echo(f"{click.style('[jd debug]', fg='blue')} {message}")

    def echo(self, message: str = "") -> None:
        click.echo(message)

    def command_output(self, output: str) -> None:
        """Show the captured output of a failed command."""
        if not output.strip():
            return
        click.echo(click.style("Command output:", dim=True), err=True)
        click.echo(output.rstrip("\n"), err=True)

    def banner(self) -> None:
        """Print the jd banner when attached to a terminal."""
        if not sys.stdout.isatty():
            return
        for rgb, line in BANNER_LINES:
            click.echo(click.style(line, fg=rgb))
        click.echo(click.style("   Personal Dev Toolkit", dim=True))
        click.echo()
