import click

from ..errors import PreconditionError
from ..operations.environment import get_default_branch
from ..operations.pr_content import CLAUDE_MODELS, is_draft_branch, resolve_pr_content
from ._shared import (
    confirm_or_stop,
    get_config,
    get_console,
    get_github,
    report_errors,
    require_dependencies,
    require_git_repo,
)


def ensure_branch_pushed(ctx: click.Context, branch: str, label: str) -> None:
    """Offer to push ``branch`` when origin does not have it yet."""
    git = require_git_repo(ctx)
    console = get_console(ctx)
    if git.remote_branch_exists(branch):
        return

    console.warning(f"{label} '{branch}' does not exist on origin")
    if not git.branch_exists(branch):
        raise PreconditionError(
            f"{label} '{branch}' does not exist locally or on origin",
            hints=["Cannot create PR without pushing base branch"],
        )
    if not click.confirm(f"Push {branch} to origin?", default=True):
        raise PreconditionError("Cannot create PR without pushing base branch")

    console.log(f"Pushing {branch} to origin...")
    git.push(branch, set_upstream=True)


@click.command()
@click.option("--title", help="PR title (defaults to generated or branch name)")
@click.option("--body", help="PR body (defaults to generated)")
@click.option("--base", "base_branch", help="Base branch (defaults to the default branch)")
@click.option("--head", "head_branch", help="Head branch (defaults to current branch)")
@click.option("--draft", is_flag=True, help="Create as draft PR")
@click.option("--auto-draft", is_flag=True, help="Detect draft from wip/draft branch names")
@click.option("--web", is_flag=True, help="Open PR in web browser after creation")
@click.option("--reviewers", default="", help="Comma-separated list of reviewers")
@click.option("--assignees", default="", help="Comma-separated list of assignees")
@click.option("--labels", default="", help="Comma-separated list of labels")
@click.option("--milestone", default="", help="Milestone ID or title")
@click.option("--no-maintainer", is_flag=True, help="Disable maintainer edits")
@click.option("--template", "template_file", type=click.Path(), help="Use PR template file")
@click.option("--no-claude", is_flag=True, help="Disable Claude generation")
@click.option("--model", type=click.Choice(CLAUDE_MODELS), help="Claude model to use")
@click.pass_context
@report_errors
def pr(
    ctx: click.Context,
    title: str | None,
    body: str | None,
    base_branch: str | None,
    head_branch: str | None,
    draft: bool,
    auto_draft: bool,
    web: bool,
    reviewers: str,
    assignees: str,
    labels: str,
    milestone: str,
    no_maintainer: bool,
    template_file: str | None,
    no_claude: bool,
    model: str | None,
) -> None:
    """Create a GitHub pull request with smart defaults.

    Title and description are generated with Claude when not given,
    falling back to the branch name, commit log and PR template.
    """
    git = require_git_repo(ctx)
    require_dependencies(ctx, "pr")
    console = get_console(ctx)
    gh = get_github(ctx)
    model = model or get_config(ctx).model

    head_branch = head_branch or git.get_current_branch()
    base_branch = base_branch or get_default_branch(git, gh)

    if head_branch == base_branch:
        raise PreconditionError(
            f"Cannot create PR: currently on base branch ({base_branch})",
            hints=["Please create a feature branch first"],
        )

    if git.has_uncommitted_changes():
        console.warning("You have uncommitted changes")
        confirm_or_stop(
            ctx,
            "Create PR anyway?",
            "Commit your changes first with: git add . && git commit -m 'message'",
        )

    ensure_branch_pushed(ctx, base_branch, "Base branch")

    if not git.remote_branch_exists(head_branch):
        console.log("Pushing branch to remote...")
        git.push(head_branch, set_upstream=True)
    elif git.commits_ahead(head_branch) > 0:
        console.log("Pushing latest changes...")
        git.push(head_branch)

    if auto_draft and not draft and is_draft_branch(head_branch):
        console.info("Auto-detected draft branch pattern")
        draft = True

    content = resolve_pr_content(
        git,
        console,
        base_branch,
        head_branch,
        title=title,
        body=body,
        use_claude=not no_claude,
        model=model,
        template_file=template_file,
        claude=ctx.obj.get("claude"),
    )

    console.info("Creating pull request...")
    gh.create_pr(
        content.title,
        content.body,
        base_branch,
        head_branch,
        draft=draft,
        reviewers=reviewers,
        assignees=assignees or "@me",
        labels=labels,
        milestone=milestone,
        no_maintainer=no_maintainer,
        web=web,
    )
    console.log("Pull request created successfully")

    if not web:
        url = gh.pr_url()
        if url:
            console.info(f"PR URL: {url}")
