import click

from ..errors import PreconditionError
from ..operations import WorktreeReconciler
from ..operations.environment import get_default_branch
from ._shared import (
    confirm_or_stop,
    get_console,
    get_github,
    report_errors,
    require_dependencies,
    require_git_repo,
)


@click.command()
@click.option("--branch", help="Branch to find the PR for (defaults to current branch)")
@click.option(
    "--type",
    "merge_type",
    type=click.Choice(["squash", "merge", "rebase"]),
    default="squash",
    show_default=True,
    help="Merge type",
)
@click.option("--clean", is_flag=True, help="Only clean up temp branches (no merge)")
@click.pass_context
@report_errors
def merge(ctx: click.Context, branch: str | None, merge_type: str, clean: bool) -> None:
    """Merge the GitHub pull request for a branch and clean up.

    After merging the current branch, switches to the updated default
    branch, or to a temporary copy of it when the default branch is
    checked out in another worktree.
    """
    git = require_git_repo(ctx)
    require_dependencies(ctx, "merge")
    console = get_console(ctx)
    gh = get_github(ctx)
    reconciler = WorktreeReconciler(git, console)

    default_branch = get_default_branch(git, gh)
    console.debug(f"Default branch: {default_branch}")

    if clean:
        reconciler.cleanup_temp_branches(default_branch)
        return

    current_branch = git.get_current_branch()
    branch = branch or current_branch
    if not branch:
        raise PreconditionError("Could not determine branch name")
    if branch == default_branch:
        raise PreconditionError(f"Cannot merge the default branch ({default_branch})")

    if git.has_uncommitted_changes():
        console.warning("You have uncommitted changes")
        confirm_or_stop(ctx, "Merge PR anyway?", "Commit or stash your changes first")

    console.info(f"Looking for PR for branch: {branch}")
    number = gh.find_pr_number(branch)
    if not number:
        raise PreconditionError(
            f"No open PR found for branch: {branch}",
            hints=["Create a PR first with: jd pr"],
        )
    console.log(f"Found PR #{number}")
    console.info(f"PR: {gh.pr_title(number)}")

    console.info(f"Merging PR #{number} (type: {merge_type})...")
    gh.merge_pr(number, merge_type)
    console.log("PR merged successfully")

    if branch == current_branch:
        reconciler.reconcile(default_branch)

    console.success("Merge complete!")
