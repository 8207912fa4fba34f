from pathlib import Path

import click

from ..errors import CommandFailedError, PreconditionError
from ..operations.environment import get_default_branch
from ..operations.executor import combined_output
from ..operations.release import (
    find_app_version_files,
    increment_minor_version,
    read_package_version,
    release_tag,
    update_version_file,
)
from ._shared import (
    confirm_or_stop,
    get_console,
    get_github,
    report_errors,
    require_dependencies,
    require_git_repo,
)

RELEASE_BRANCH = "main"


@click.command()
@click.option("--dry-run", is_flag=True, help="Show what would be done without making changes")
@click.pass_context
@report_errors
def release(ctx: click.Context, dry_run: bool) -> None:
    """Merge the default branch into main, bump versions and publish a release.

    \b
    1. Merge the default branch into main (--no-ff) and push
    2. Switch back to the default branch
    3. Bump the minor version in package.json and apps/*
    4. Commit "Version bump" and push
    5. Create GitHub release v<major>.<minor> on main
    """
    git = require_git_repo(ctx)
    require_dependencies(ctx, "release")
    console = get_console(ctx)
    gh = get_github(ctx)
    root = Path(git.cwd or Path.cwd())

    if git.has_uncommitted_changes():
        console.warning("You have uncommitted changes")
        confirm_or_stop(
            ctx,
            "Continue with release anyway?",
            "Commit your changes first with: git add . && git commit -m 'message'",
        )

    default_branch = get_default_branch(git, gh)
    if default_branch == RELEASE_BRANCH:
        raise PreconditionError(
            f"Default branch is {RELEASE_BRANCH}; releases merge a development branch into it"
        )
    if git.get_current_branch() != default_branch:
        console.warning(f"Not on default branch ({default_branch}), switching...")
        if not dry_run and not git.checkout(default_branch, check=False):
            raise CommandFailedError(f"Failed to switch to {default_branch}")

    if not git.branch_exists(RELEASE_BRANCH):
        raise PreconditionError("Main branch does not exist")

    console.info(f"Step 1: Merging {default_branch} into {RELEASE_BRANCH}...")
    if dry_run:
        console.log(f"Would merge {default_branch} into {RELEASE_BRANCH}")
    else:
        if not git.checkout(RELEASE_BRANCH, check=False):
            raise CommandFailedError(f"Failed to checkout {RELEASE_BRANCH} branch")
        result = git.merge(
            default_branch, f"Merge {default_branch} into {RELEASE_BRANCH} for release"
        )
        if result.returncode != 0:
            git.abort_merge()
            git.checkout(default_branch, check=False)
            raise CommandFailedError(
                "Merge failed - please resolve conflicts manually",
                output=combined_output(result),
            )
        console.log(f"✓ Merged {default_branch} into {RELEASE_BRANCH}")
        console.info(f"Pushing {RELEASE_BRANCH} branch...")
        git.push(RELEASE_BRANCH)

    console.info(f"Step 2: Switching back to {default_branch}...")
    if dry_run:
        console.log(f"Would switch back to {default_branch}")
    else:
        if not git.checkout(default_branch, check=False):
            raise CommandFailedError(f"Failed to switch back to {default_branch}")
        console.log(f"✓ Switched back to {default_branch}")

    current_version = read_package_version(root / "package.json")
    new_version = increment_minor_version(current_version)
    tag = release_tag(new_version)
    console.info(f"Current version: {current_version}")
    console.info(f"New version: {new_version}")

    console.info("Step 3: Updating versions...")
    files = [root / "package.json", *find_app_version_files(root)]
    for path in files:
        relative = path.relative_to(root)
        if dry_run:
            console.log(f"Would update version in {relative} to {new_version}")
        else:
            update_version_file(path, new_version)
            console.log(f"Updated version in {relative} to {new_version}")

    console.info("Step 4: Committing and pushing version bump...")
    if dry_run:
        console.log("Would commit and push version bump")
        console.log(f"Would create GitHub release: {tag} on {RELEASE_BRANCH} branch")
        return

    git.add([str(path.relative_to(root)) for path in files])
    if git.has_staged_changes():
        git.commit("Version bump")
        git.push(default_branch)
        console.log("✓ Committed and pushed version bump")
    else:
        console.warning("No changes to commit")

    console.info(f"Step 5: Creating GitHub release on {RELEASE_BRANCH}...")
    try:
        gh.create_release(tag, RELEASE_BRANCH)
    except CommandFailedError as e:
        raise CommandFailedError(
            "Failed to create GitHub release",
            output=e.output,
            hints=[
                "You can create it manually with: "
                f"gh release create {tag} --target {RELEASE_BRANCH} --title {tag} --generate-notes"
            ],
        )
    console.log(f"✓ Created GitHub release: {tag}")
    url = gh.release_url(tag)
    if url:
        console.info(f"Release URL: {url}")

    console.log("✓ Release process completed successfully!")
    console.info("Summary:")
    console.info(f"  - Merged {default_branch} into {RELEASE_BRANCH}")
    console.info(f"  - Bumped version: {current_version} -> {new_version}")
    console.info(f"  - Created release: {tag}")
