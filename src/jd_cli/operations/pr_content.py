"""Pull request title and description generation."""

import re
from dataclasses import dataclass
from pathlib import Path
from textwrap import dedent

from jd_cli.console import Console
from jd_cli.operations.executor import CommandExecutor, GitExecutor

CLAUDE_MODELS = ("sonnet", "haiku", "opus")

CONVENTIONAL_BRANCH = re.compile(r"^(feature|fix|docs|style|refactor|test|chore)/(.+)$")

TITLE_PREFIXES = {
    "feature": "Add",
    "fix": "Fix",
    "docs": "Update documentation for",
    "style": "Style improvements for",
    "refactor": "Refactor",
    "test": "Add tests for",
    "chore": "Chore:",
}

DRAFT_PREFIX = re.compile(r"^(wip|draft|WIP|DRAFT)[-/]")
DRAFT_SUFFIX = re.compile(r"[-/](wip|draft|WIP|DRAFT)$")

PR_TEMPLATE_PATHS = (
    ".github/pull_request_template.md",
    ".github/PULL_REQUEST_TEMPLATE.md",
    "docs/pull_request_template.md",
)

TYPE_OF_CHANGE = dedent(
    """\
    - [ ] Bug fix
    - [ ] New feature
    - [ ] Breaking change
    - [ ] Documentation update"""
)

EMPTY_BODY = (
    "## Description\n\nPlease describe your changes.\n\n"
    f"## Type of Change\n\n{TYPE_OF_CHANGE}"
)


@dataclass(frozen=True, slots=True)
class PrContent:
    """Title and body for a new pull request."""

    title: str
    body: str
    generated: bool = False


def is_draft_branch(branch: str) -> bool:
    return bool(DRAFT_PREFIX.search(branch) or DRAFT_SUFFIX.search(branch))


def _capitalize_words(text: str) -> str:
    return re.sub(r"\b(\w)", lambda m: m.group(1).upper(), text)


def title_from_branch(branch: str) -> str | None:
    """Title for a conventional branch name such as ``feature/add-login``."""
    match = CONVENTIONAL_BRANCH.match(branch)
    if not match:
        return None
    branch_type, desc = match.groups()
    desc = _capitalize_words(re.sub(r"[-_]", " ", desc))
    return f"{TITLE_PREFIXES[branch_type]} {desc}"


def generate_pr_title(branch: str, git: GitExecutor) -> str:
    """Fallback title: branch name pattern, then last commit, then the branch."""
    return title_from_branch(branch) or git.last_commit_subject() or branch


def find_pr_template(root: Path, template_file: str | None = None) -> Path | None:
    if template_file:
        path = Path(template_file)
        if not path.is_absolute():
            path = root / path
        if path.is_file():
            return path
    for candidate in PR_TEMPLATE_PATHS:
        path = root / candidate
        if path.is_file():
            return path
    return None


def generate_pr_body(
    base: str,
    head: str,
    git: GitExecutor,
    template_file: str | None = None,
    root: Path | None = None,
) -> str:
    """Fallback body: a PR template if present, else a skeleton from the commits."""
    template = find_pr_template(root or Path.cwd(), template_file)
    if template is not None:
        return template.read_text()

    commits = git.log_oneline(base, head)
    if not commits:
        return EMPTY_BODY

    commit_lines = "\n".join(f"- {c}" for c in commits.splitlines())
    return (
        f"## Changes\n\n### Commits\n{commit_lines}\n\n"
        f"## Type of Change\n{TYPE_OF_CHANGE}\n\n"
        "## Testing\n- [ ] Tests pass locally\n- [ ] Added new tests\n"
    )


def build_claude_prompt(
    commits: str,
    changes: str,
    diff: str,
    custom_title: str | None = None,
) -> str:
    context = (
        f"Commits:\n{commits}\n\n"
        f"Changes summary:\n{changes}\n\n"
        f"Here's a sample of the actual diff (truncated if too long):\n{diff}"
    )
    if custom_title is None:
        return (
            "Based on the following git diff and commits, generate a concise PR title "
            "and description.\n\n"
            "Respond with the following format:\n"
            "TITLE: [Your generated title here]\n\n"
            "DESCRIPTION:\n"
            "[Your generated description here in markdown format]\n\n"
            "Include a summary section explaining what was changed and why, and a test "
            "plan section with specific things to test. Keep it concise and "
            f"professional.\n\n{context}"
        )
    return (
        "Based on the following git diff and commits, generate a concise PR description "
        f"for a pull request titled '{custom_title}'. Include a summary section "
        "explaining what was changed and why, and a test plan section with specific "
        "things to test. Keep it concise and professional.\n\n"
        f"{context}\n\n"
        "Format the response as markdown suitable for a GitHub PR description."
    )


def parse_claude_response(response: str, want_title: bool) -> tuple[str | None, str] | None:
    """Split a model response into ``(title, body)``.

    Returns None when a title was requested but the response lacks the
    ``TITLE:`` line or the ``DESCRIPTION:`` block.
    """
    response = response.strip()
    if not response:
        return None
    if not want_title:
        return None, response

    title = None
    body_lines: list[str] | None = None
    for line in response.splitlines():
        if body_lines is not None:
            body_lines.append(line)
        elif line.startswith("TITLE:") and title is None:
            title = line[len("TITLE:") :].strip()
        elif line.startswith("DESCRIPTION:"):
            body_lines = []

    body = "\n".join(body_lines or []).strip()
    if not title or not body:
        return None
    return title, body


class ClaudeGenerator(CommandExecutor):
    """Generate PR text with the Claude Code CLI."""

    program = "claude"

    def generate(self, prompt: str, model: str) -> str:
        if not self.available():
            return ""
        return self.output(["-p", "--model", model], input=prompt)


def resolve_pr_content(
    git: GitExecutor,
    console: Console,
    base: str,
    head: str,
    title: str | None = None,
    body: str | None = None,
    use_claude: bool = True,
    model: str = "sonnet",
    template_file: str | None = None,
    claude: ClaudeGenerator | None = None,
) -> PrContent:
    """Pick the PR title and body.

    Explicit values win, then generated content, then the heuristics.
    """
    generated = False
    if use_claude and (not title or not body):
        console.info(f"Generating PR content with Claude ({model})...")
        claude = claude or ClaudeGenerator(cwd=git.cwd)
        want_title = not title
        prompt = build_claude_prompt(
            git.log_oneline(base, head),
            git.diff_stat(base, head),
            git.diff(base, head),
            None if want_title else title,
        )
        parsed = parse_claude_response(claude.generate(prompt, model), want_title)
        if parsed is None:
            console.warning("Claude generation failed, falling back to default generation")
        else:
            generated_title, generated_body = parsed
            title = title or generated_title
            body = body or generated_body
            generated = True
            console.debug("Claude generation successful")

    return PrContent(
        title=title or generate_pr_title(head, git),
        body=body or generate_pr_body(base, head, git, template_file, git.cwd),
        generated=generated,
    )
