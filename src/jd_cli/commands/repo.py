from pathlib import Path

import click

from ..errors import PreconditionError
from ..operations import OnePasswordClient, SecretProvisioner
from ..operations.environment import get_default_branch
from ..operations.repo_setup import (
    apply_rulesets,
    copy_workflows,
    write_claude_settings,
    write_pages_index,
)
from ..operations.secrets import build_secret_catalog
from ._shared import (
    get_config,
    get_console,
    get_git,
    get_github,
    report_errors,
    require_dependencies,
)


@click.command()
@click.option("--npm", is_flag=True, help="Also add NPM_TOKEN secret")
@click.option("--extensions", is_flag=True, help="Also add VSCE_PAT and OVSX_PAT secrets")
@click.option("--claude", is_flag=True, help="Also add CLAUDE_CODE_OAUTH_TOKEN and Claude settings")
@click.option("--apple", is_flag=True, help="Also add App Store and Fastlane secrets")
@click.option("--suffix", default="", help="Suffix for APPSTORE_* and MATCH_* secrets")
@click.option("--public", is_flag=True, help="Create public repository (default: private)")
@click.option("--description", default="", help="Repository description")
@click.option("--no-init", is_flag=True, help="Skip git initialization")
@click.option("--rules", is_flag=True, help="Apply Main and Dev branch rulesets")
@click.option("--workflows", is_flag=True, help="Copy workflows from the configured directory")
@click.option("--pages", is_flag=True, help="Enable GitHub Pages from /docs")
@click.pass_context
@report_errors
def repo(
    ctx: click.Context,
    npm: bool,
    extensions: bool,
    claude: bool,
    apple: bool,
    suffix: str,
    public: bool,
    description: str,
    no_init: bool,
    rules: bool,
    workflows: bool,
    pages: bool,
) -> None:
    """Initialize a GitHub repository and configure its secrets.

    Secrets are read from 1Password; BOT_ID and BOT_KEY are always added.
    """
    require_dependencies(ctx, "repo")
    console = get_console(ctx)
    git = get_git(ctx)
    gh = get_github(ctx)
    config = get_config(ctx)
    root = Path(git.cwd or Path.cwd())

    if workflows and not config.workflows_dir:
        raise PreconditionError(
            "No workflows directory configured",
            hints=["Set one with: git config --global jd.workflowsDir <path>"],
        )

    if not no_init:
        if git.is_inside_work_tree():
            console.warning("Already in a git repository")
        else:
            console.info("Initializing git repository...")
            git.init()
            console.log("Git repository initialized")

    if gh.repo_exists():
        console.warning("GitHub repository already exists")
        console.info(f"Repository: {gh.repo_name_with_owner()}")
    else:
        console.info(f"Creating GitHub repository: {root.name}")
        gh.create_repo(root.name, "public" if public else "private", description)
        console.log("GitHub repository created successfully")

    console.info("Adding secrets to GitHub repository...")
    catalog = build_secret_catalog(
        vault=config.vault,
        npm=npm,
        extensions=extensions,
        claude=claude,
        apple=apple,
        suffix=suffix,
    )
    provisioner = SecretProvisioner(ctx.obj.get("op") or OnePasswordClient(), gh, console)
    provisioner.provision(catalog)

    name_with_owner = gh.repo_name_with_owner()

    if rules:
        console.info("Applying branch rulesets...")
        apply_rulesets(gh, name_with_owner, console)

    if workflows:
        console.info(f"Copying workflows from {config.workflows_dir}...")
        for path in copy_workflows(Path(config.workflows_dir).expanduser(), root):
            console.log(f"✓ Added {path.relative_to(root)}")

    if pages:
        if write_pages_index(root, root.name):
            console.log("✓ Created docs/index.html")
        branch = get_default_branch(git, gh)
        if gh.enable_pages(name_with_owner, branch):
            console.log(f"✓ Enabled GitHub Pages from {branch}:/docs")
        else:
            console.warning("Could not enable GitHub Pages (it may already be enabled)")

    if claude and write_claude_settings(root):
        console.log("✓ Created .claude/settings.json")

    console.log("Repository initialization complete!")
    url = gh.repo_url()
    if url:
        console.info(f"Repository URL: {url}")
