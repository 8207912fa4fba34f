from pathlib import Path

import pytest
from pytest_check import check

from jd_cli.operations.executor import GitExecutor
from jd_cli.operations.pr_content import (
    EMPTY_BODY,
    ClaudeGenerator,
    find_pr_template,
    generate_pr_body,
    generate_pr_title,
    is_draft_branch,
    parse_claude_response,
    resolve_pr_content,
    title_from_branch,
)

GIT_LOG = ["git", "log", "--oneline", "main..feature/login"]
GIT_STAT = ["git", "diff", "main...feature/login", "--stat"]
GIT_DIFF = ["git", "diff", "main...feature/login"]


@pytest.mark.parametrize(
    "branch,title",
    [
        ("feature/add-login", "Add Add Login"),
        ("fix/null_pointer", "Fix Null Pointer"),
        ("docs/readme", "Update documentation for Readme"),
        ("style/buttons", "Style improvements for Buttons"),
        ("refactor/auth-flow", "Refactor Auth Flow"),
        ("test/parser", "Add tests for Parser"),
        ("chore/bump-deps", "Chore: Bump Deps"),
    ],
)
def test_title_from_conventional_branch(branch, title):
    assert title_from_branch(branch) == title


def test_title_from_other_branch_is_none():
    check.is_true(title_from_branch("my-branch") is None)
    check.is_true(title_from_branch("feat/x") is None)


class TestGeneratePrTitle:
    def test_falls_back_to_last_commit(self, fake_process):
        fake_process.register_subprocess(
            ["git", "log", "-1", "--pretty=format:%s"], stdout="Tidy things up"
        )
        assert generate_pr_title("random", GitExecutor()) == "Tidy things up"

    def test_falls_back_to_branch_name(self, fake_process):
        fake_process.register_subprocess(["git", "log", "-1", "--pretty=format:%s"], returncode=128)
        assert generate_pr_title("random", GitExecutor()) == "random"


@pytest.mark.parametrize(
    "branch,draft",
    [
        ("wip/login", True),
        ("draft-login", True),
        ("WIP-login", True),
        ("login-wip", True),
        ("feature/DRAFT", True),
        ("login", False),
        ("wiplogin", False),
        ("feature/wipe-disk", False),
    ],
)
def test_is_draft_branch(branch, draft):
    assert is_draft_branch(branch) is draft


class TestPrBody:
    def test_explicit_template_wins(self, tmp_path: Path, fake_process):
        (tmp_path / ".github").mkdir()
        (tmp_path / ".github" / "pull_request_template.md").write_text("repo template")
        (tmp_path / "mine.md").write_text("my template")

        body = generate_pr_body("main", "feature/login", GitExecutor(), "mine.md", tmp_path)
        assert body == "my template"

    def test_template_search_order(self, tmp_path: Path):
        (tmp_path / "docs").mkdir()
        (tmp_path / "docs" / "pull_request_template.md").write_text("docs template")
        check.is_true(find_pr_template(tmp_path) == tmp_path / "docs" / "pull_request_template.md")

        (tmp_path / ".github").mkdir()
        (tmp_path / ".github" / "PULL_REQUEST_TEMPLATE.md").write_text("upper")
        check.is_true(find_pr_template(tmp_path) == tmp_path / ".github" / "PULL_REQUEST_TEMPLATE.md")

    def test_commit_skeleton(self, tmp_path: Path, fake_process):
        fake_process.register_subprocess(GIT_LOG, stdout="abc123 Add login\ndef456 Fix typo\n")

        body = generate_pr_body("main", "feature/login", GitExecutor(), None, tmp_path)

        check.is_true("### Commits\n- abc123 Add login\n- def456 Fix typo" in body)
        check.is_true("## Type of Change" in body)
        check.is_true("- [ ] Tests pass locally" in body)

    def test_generic_skeleton_without_commits(self, tmp_path: Path, fake_process):
        fake_process.register_subprocess(GIT_LOG, stdout="")
        body = generate_pr_body("main", "feature/login", GitExecutor(), None, tmp_path)
        assert body == EMPTY_BODY


class TestParseClaudeResponse:
    def test_title_and_description(self):
        response = "TITLE: Add login\n\nDESCRIPTION:\n## Summary\nAdds login.\n"
        assert parse_claude_response(response, want_title=True) == (
            "Add login",
            "## Summary\nAdds login.",
        )

    def test_missing_description_is_rejected(self):
        check.is_true(parse_claude_response("TITLE: Add login\n", want_title=True) is None)
        check.is_true(parse_claude_response("Just some text", want_title=True) is None)

    def test_body_only(self):
        assert parse_claude_response("  ## Summary\n", want_title=False) == (None, "## Summary")

    def test_empty(self):
        assert parse_claude_response("", want_title=False) is None


class FakeClaude(ClaudeGenerator):
    def __init__(self, response: str):
        super().__init__()
        self.response = response
        self.prompts: list[str] = []

    def generate(self, prompt: str, model: str) -> str:
        self.prompts.append(prompt)
        return self.response


def register_context(fake_process, log="abc123 Add login\n"):
    fake_process.register_subprocess(GIT_LOG, stdout=log, occurrences=2)
    fake_process.register_subprocess(GIT_STAT, stdout=" app.py | 3 +++\n")
    fake_process.register_subprocess(GIT_DIFF, stdout="+print('hi')\n")


class TestResolvePrContent:
    def test_explicit_title_and_body_skip_generation(self, console):
        claude = FakeClaude("TITLE: x\nDESCRIPTION:\ny")
        content = resolve_pr_content(
            GitExecutor(), console, "main", "feature/login", title="T", body="B", claude=claude
        )
        check.is_true(content.title == "T")
        check.is_true(content.body == "B")
        check.is_true(content.generated is False)
        check.is_true(claude.prompts == [])

    def test_generated_title_and_body(self, console, fake_process):
        register_context(fake_process)
        claude = FakeClaude("TITLE: Add login form\n\nDESCRIPTION:\n## Summary\nLogin.")

        content = resolve_pr_content(
            GitExecutor(), console, "main", "feature/login", claude=claude
        )

        check.is_true(content.title == "Add login form")
        check.is_true(content.body == "## Summary\nLogin.")
        check.is_true(content.generated is True)
        check.is_true("abc123 Add login" in claude.prompts[0])
        check.is_true("TITLE:" in claude.prompts[0])

    def test_explicit_title_with_generated_body(self, console, fake_process):
        register_context(fake_process)
        claude = FakeClaude("## Summary\nGenerated body")

        content = resolve_pr_content(
            GitExecutor(), console, "main", "feature/login", title="My title", claude=claude
        )

        check.is_true(content.title == "My title")
        check.is_true(content.body == "## Summary\nGenerated body")
        check.is_true("titled 'My title'" in claude.prompts[0])

    def test_explicit_body_survives_generated_title(self, console, fake_process):
        register_context(fake_process)
        claude = FakeClaude("TITLE: Generated\n\nDESCRIPTION:\nGenerated body")

        content = resolve_pr_content(
            GitExecutor(), console, "main", "feature/login", body="Mine", claude=claude
        )

        check.is_true(content.title == "Generated")
        check.is_true(content.body == "Mine")

    def test_unparsable_response_falls_back(self, console, fake_process, tmp_path, capsys):
        register_context(fake_process)
        claude = FakeClaude("no structure here")

        content = resolve_pr_content(
            GitExecutor(cwd=tmp_path), console, "main", "feature/login", claude=claude
        )

        check.is_true(content.title == "Add Login")
        check.is_true("- abc123 Add login" in content.body)
        check.is_true(content.generated is False)
        check.is_true("falling back" in capsys.readouterr().out)

    def test_no_claude_uses_heuristics(self, console, fake_process, tmp_path):
        fake_process.register_subprocess(GIT_LOG, stdout="")
        content = resolve_pr_content(
            GitExecutor(cwd=tmp_path), console, "main", "feature/login", use_claude=False
        )
        check.is_true(content.title == "Add Login")
        check.is_true(content.body == EMPTY_BODY)


def test_claude_generator_pipes_prompt(fake_process, monkeypatch):
    monkeypatch.setattr("shutil.which", lambda name: f"/usr/bin/{name}")
    fake_process.register_subprocess(["claude", "-p", "--model", "opus"], stdout="answer\n")
    assert ClaudeGenerator().generate("prompt", "opus") == "answer"


def test_claude_generator_missing_returns_empty(monkeypatch):
    monkeypatch.setattr("shutil.which", lambda name: None)
    assert ClaudeGenerator().generate("prompt", "sonnet") == ""
