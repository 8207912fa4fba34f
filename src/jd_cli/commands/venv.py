from pathlib import Path

import click

from ..errors import CommandFailedError, MissingDependencyError, PreconditionError
from ..operations import CommandExecutor
from ..operations.environment import command_exists
from ._shared import get_console, report_errors

VENV_DIR = "venv"
ACTIVATE_LINE = f"source {VENV_DIR}/bin/activate"


def find_python() -> str:
    for candidate in ("python3", "python"):
        if command_exists(candidate):
            return candidate
    raise MissingDependencyError("python or python3 is not installed")


@click.command()
@click.pass_context
@report_errors
def venv(ctx: click.Context) -> None:
    """Create a Python virtual environment in ./venv if it does not exist."""
    console = get_console(ctx)
    python = find_python()

    if Path(VENV_DIR).is_dir():
        console.info("Virtual environment already exists, activating...")
        console.echo(ACTIVATE_LINE)
        return

    console.info(f"Creating new virtual environment with {python}...")
    try:
        CommandExecutor(program=python).run(["-m", "venv", VENV_DIR], capture=True)
    except CommandFailedError as e:
        raise CommandFailedError("Failed to create virtual environment", output=e.output)
    console.log("Virtual environment created successfully")
    console.echo(ACTIVATE_LINE)


@click.command()
@click.pass_context
@report_errors
def requirements(ctx: click.Context) -> None:
    """Write requirements.txt from the ./venv environment with pip freeze."""
    console = get_console(ctx)
    pip = Path(VENV_DIR) / "bin" / "pip"
    if not Path(VENV_DIR).is_dir():
        raise PreconditionError("Virtual environment not found. Run 'jd venv' first.")

    console.info("Generating requirements.txt...")
    result = CommandExecutor(program=str(pip)).run(["freeze"], check=False, capture=True)
    if result.returncode != 0:
        raise CommandFailedError(
            "Failed to generate requirements.txt", output=result.stderr or ""
        )
    Path("requirements.txt").write_text(result.stdout or "")
    console.log("requirements.txt generated successfully")
