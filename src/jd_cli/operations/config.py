"""Configuration management for jd."""

import os
from dataclasses import dataclass, fields
from pathlib import Path

from jd_cli.operations.executor import GitExecutor


@dataclass(frozen=True, slots=True)
class JdConfig:
    """Immutable user defaults for jd commands."""

    vault: str = "dev"
    model: str = "sonnet"
    template_registry: str = "ghcr.io/starburst997/devcontainer/templates"
    projects_path: str = "~/Projects"
    workflows_dir: str | None = None
    release_repo: str = "starburst997/jd"

    @property
    def projects_dir(self) -> Path:
        return Path(self.projects_path).expanduser()


class JdConfigManager:
    """Read jd settings from git config and the environment."""

    CONFIG_PREFIX = "jd."
    ENV_PREFIX = "JD_"

    def __init__(self, executor: GitExecutor):
        self.executor = executor

    @staticmethod
    def _git_key(field_name: str) -> str:
        """Map a field name to its camelCase git config key."""
        head, *rest = field_name.split("_")
        return head + "".join(part.capitalize() for part in rest)

    def _get_config_key(self, field_name: str) -> str:
        return f"{self.CONFIG_PREFIX}{self._git_key(field_name)}"

    def _get_env_key(self, field_name: str) -> str:
        return f"{self.ENV_PREFIX}{field_name.upper()}"

    def load(self, environ: dict[str, str] | None = None) -> JdConfig:
        """Build the effective configuration.

        Environment variables win over git config, which wins over defaults.
        """
        environ = os.environ if environ is None else environ
        values = {}
        for field in fields(JdConfig):
            value = environ.get(self._get_env_key(field.name))
            if not value:
                value = self.executor.get_config(self._get_config_key(field.name))
            if value:
                values[field.name] = value
        return JdConfig(**values)
