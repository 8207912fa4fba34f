"""Shared utilities for commands."""

import functools
from collections.abc import Callable
from typing import Any

import click

from ..console import Console
from ..errors import JdError, MissingDependencyError
from ..operations import (
    DependencyChecker,
    GitExecutor,
    GitHubClient,
    JdConfig,
    JdConfigManager,
)


class JdClickException(click.ClickException):
    """ClickException that prints captured command output and hints."""

    def __init__(self, error: JdError, console: Console):
        super().__init__(str(error))
        self.exit_code = error.exit_code
        self.console = console
        self.output = getattr(error, "output", "")
        self.hints = error.hints

    def show(self, file=None) -> None:
        self.console.error(self.format_message())
        self.console.command_output(self.output)
        for hint in self.hints:
            self.console.info(hint)


def _obj(ctx: click.Context) -> dict:
    return ctx.ensure_object(dict)


def get_console(ctx: click.Context) -> Console:
    return _obj(ctx).setdefault("console", Console())


def get_git(ctx: click.Context) -> GitExecutor:
    return _obj(ctx).setdefault("git", GitExecutor())


def get_github(ctx: click.Context) -> GitHubClient:
    return _obj(ctx).setdefault("github", GitHubClient())


def get_config(ctx: click.Context) -> JdConfig:
    obj = _obj(ctx)
    if "config" not in obj:
        obj["config"] = JdConfigManager(get_git(ctx)).load()
    return obj["config"]


def get_dependencies(ctx: click.Context) -> DependencyChecker:
    return _obj(ctx).setdefault("dependencies", DependencyChecker(get_console(ctx)))


def require_git_repo(ctx: click.Context) -> GitExecutor:
    git = get_git(ctx)
    git.ensure_repository()
    return git


def require_dependencies(ctx: click.Context, command: str) -> None:
    """Make sure every tool ``command`` needs is installed."""
    if not get_dependencies(ctx).check_command(command):
        raise MissingDependencyError(f"Missing dependencies for 'jd {command}'")


def confirm_or_stop(ctx: click.Context, prompt: str, advice: str, default: bool = False) -> None:
    """Ask before continuing; print ``advice`` and exit 1 on refusal."""
    if not click.confirm(prompt, default=default):
        get_console(ctx).info(advice)
        ctx.exit(1)


def report_errors(f: Callable[..., Any]) -> Callable[..., Any]:
    """Turn JdError raised by a command into a ClickException (exit 1)."""

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except JdError as e:
            raise JdClickException(e, get_console(click.get_current_context()))

    return wrapper
