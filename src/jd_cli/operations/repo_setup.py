"""Repository scaffolding applied by ``jd repo``."""

import json
import shutil
from pathlib import Path

from jd_cli.console import Console
from jd_cli.operations.github import GitHubClient


def branch_ruleset(name: str, branch: str) -> dict:
    """Ruleset blocking deletion and force pushes on ``branch``."""
    return {
        "name": name,
        "target": "branch",
        "enforcement": "active",
        "conditions": {"ref_name": {"include": [f"refs/heads/{branch}"], "exclude": []}},
        "rules": [{"type": "deletion"}, {"type": "non_fast_forward"}],
    }


RULESETS = (branch_ruleset("Main", "main"), branch_ruleset("Dev", "dev"))

PAGES_INDEX = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{name}</title>
</head>
<body>
  <h1>{name}</h1>
</body>
</html>
"""

CLAUDE_SETTINGS = {
    "$schema": "https://json.schemastore.org/claude-code-settings.json",
    "permissions": {"allow": [], "deny": []},
}


def apply_rulesets(gh: GitHubClient, repo: str, console: Console) -> list[str]:
    """Create the Main and Dev rulesets unless a ruleset with that name exists."""
    existing = set(gh.ruleset_names(repo))
    created = []
    for ruleset in RULESETS:
        if ruleset["name"] in existing:
            console.info(f"Ruleset {ruleset['name']} already exists")
            continue
        gh.create_ruleset(repo, ruleset)
        console.log(f"✓ Added ruleset {ruleset['name']}")
        created.append(ruleset["name"])
    return created


def copy_workflows(source: Path, root: Path) -> list[Path]:
    """Copy workflow files into ``.github/workflows``, keeping existing ones."""
    target = root / ".github" / "workflows"
    target.mkdir(parents=True, exist_ok=True)
    copied = []
    for path in sorted(source.iterdir()):
        if path.suffix not in (".yml", ".yaml") or not path.is_file():
            continue
        destination = target / path.name
        if destination.exists():
            continue
        shutil.copyfile(path, destination)
        copied.append(destination)
    return copied


def write_pages_index(root: Path, name: str) -> Path | None:
    index = root / "docs" / "index.html"
    if index.exists():
        return None
    index.parent.mkdir(parents=True, exist_ok=True)
    index.write_text(PAGES_INDEX.format(name=name))
    return index


def write_claude_settings(root: Path) -> Path | None:
    settings = root / ".claude" / "settings.json"
    if settings.exists():
        return None
    settings.parent.mkdir(parents=True, exist_ok=True)
    settings.write_text(json.dumps(CLAUDE_SETTINGS, indent=2) + "\n")
    return settings
