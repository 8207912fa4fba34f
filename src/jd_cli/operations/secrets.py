"""Provision repository secrets from 1Password."""

from dataclasses import dataclass

from jd_cli.console import Console
from jd_cli.errors import SecretProvisioningError
from jd_cli.operations.executor import CommandExecutor, combined_output
from jd_cli.operations.github import GitHubClient

# (secret name, 1Password item, takes the environment suffix)
SECRET_GROUPS: dict[str, tuple[tuple[str, str, bool], ...]] = {
    "bot": (
        ("BOT_ID", "github-app", False),
        ("BOT_KEY", "github-app", False),
    ),
    "npm": (("NPM_TOKEN", "npm", False),),
    "extensions": (
        ("VSCE_PAT", "extensions", False),
        ("OVSX_PAT", "extensions", False),
    ),
    "claude": (("CLAUDE_CODE_OAUTH_TOKEN", "claude", False),),
    "apple": (
        ("APPSTORE_ISSUER_ID", "apple", True),
        ("APPSTORE_KEY_ID", "apple", True),
        ("APPSTORE_P8", "apple", True),
        ("MATCH_REPOSITORY", "fastlane", True),
        ("MATCH_PASSWORD", "fastlane", True),
        ("GH_PAT", "github", False),
    ),
}


@dataclass(frozen=True, slots=True)
class SecretMapping:
    """A GitHub secret name and the 1Password reference holding its value."""

    name: str
    reference: str


def build_secret_catalog(
    vault: str = "dev",
    npm: bool = False,
    extensions: bool = False,
    claude: bool = False,
    apple: bool = False,
    suffix: str = "",
) -> tuple[SecretMapping, ...]:
    """Expand the enabled secret groups into mappings.

    The suffix is appended as ``_<SUFFIX>`` to both the secret name and the
    1Password field of suffixable secrets.
    """
    enabled = {"bot": True, "npm": npm, "extensions": extensions, "claude": claude, "apple": apple}
    secret_suffix = f"_{suffix}" if suffix else ""

    catalog = []
    for group, entries in SECRET_GROUPS.items():
        if not enabled[group]:
            continue
        for name, item, suffixable in entries:
            if suffixable:
                name = f"{name}{secret_suffix}"
            catalog.append(SecretMapping(name, f"op://{vault}/{item}/{name}"))
    return tuple(catalog)


class OnePasswordClient(CommandExecutor):
    """Read and update secrets through the 1Password CLI."""

    program = "op"

    def read(self, reference: str) -> str:
        result = self.run(["read", reference], check=False, capture=True)
        if result.returncode != 0:
            raise SecretProvisioningError(
                f"Failed to read secret from 1Password: {reference}",
                output=combined_output(result),
            )
        return (result.stdout or "").rstrip("\n")

    def edit_field(self, item: str, field: str, value: str, vault: str) -> bool:
        return self.succeeds(["item", "edit", item, f"{field}={value}", "--vault", vault])


class SecretProvisioner:
    """Copy catalog secrets from 1Password into the repository's GitHub secrets."""

    def __init__(self, op: OnePasswordClient, gh: GitHubClient, console: Console):
        self.op = op
        self.gh = gh
        self.console = console

    def add_secret(self, mapping: SecretMapping) -> None:
        self.console.info(f"Adding secret: {mapping.name}")
        try:
            value = self.op.read(mapping.reference)
        except SecretProvisioningError as e:
            raise SecretProvisioningError(
                f"Failed to read {mapping.name} from 1Password: {mapping.reference}",
                output=e.output,
            )

        result = self.gh.set_secret(mapping.name, value)
        if result.returncode != 0:
            raise SecretProvisioningError(
                f"Failed to add {mapping.name} to GitHub repository",
                output=combined_output(result),
            )
        self.console.log(f"✓ Added {mapping.name}")

    def provision(self, catalog: tuple[SecretMapping, ...]) -> list[str]:
        """Add every secret in order, stopping at the first failure."""
        added = []
        for mapping in catalog:
            self.add_secret(mapping)
            added.append(mapping.name)
        return added
