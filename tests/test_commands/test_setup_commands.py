"""Tests for repository, cluster and workstation setup commands."""

from pathlib import Path

import pytest
import yaml
from pytest_check import check

from jd_cli.cli import cli

REPO_VIEW = ["gh", "repo", "view"]
NAME_WITH_OWNER = ["gh", "repo", "view", "--json", "nameWithOwner", "-q", ".nameWithOwner"]
REPO_URL = ["gh", "repo", "view", "--json", "url", "-q", ".url"]


def register_bot_secrets(fake_process) -> None:
    for name in ("BOT_ID", "BOT_KEY"):
        fake_process.register_subprocess(
            ["op", "read", f"op://dev/github-app/{name}"], stdout=f"{name}-value\n"
        )
        fake_process.register_subprocess(["gh", "secret", "set", name])


class TestRepoCommand:
    @pytest.fixture(autouse=True)
    def workspace(self, tmp_path: Path, monkeypatch, fake_process):
        project = tmp_path / "shop"
        project.mkdir()
        monkeypatch.chdir(project)
        fake_process.allow_unregistered(True)
        return project

    def test_stops_at_first_secret_failure(self, runner, deps_ok, fake_process):
        fake_process.register_subprocess(REPO_VIEW)
        fake_process.register_subprocess(NAME_WITH_OWNER, stdout="acme/shop\n")
        fake_process.register_subprocess(
            ["op", "read", "op://dev/github-app/BOT_ID"], returncode=1, stderr="not found\n"
        )

        result = runner.invoke(cli, ["repo", "--no-init"], obj={"dependencies": deps_ok})

        check.is_true(result.exit_code == 1)
        check.is_true("Failed to read BOT_ID from 1Password" in result.output)
        check.is_true(fake_process.call_count(["gh", "secret", "set", "BOT_ID"]) == 0)
        check.is_true(fake_process.call_count(["op", "read", "op://dev/github-app/BOT_KEY"]) == 0)

    def test_creates_repo_with_claude_setup(self, runner, deps_ok, fake_process, workspace):
        create_repo = ["gh", "repo", "create", "shop", "--source=.", "--private"]
        post_ruleset = ["gh", "api", "repos/acme/shop/rulesets", "--method", "POST", "--input", "-"]
        fake_process.register_subprocess(REPO_VIEW, returncode=1)
        fake_process.register_subprocess(create_repo)
        register_bot_secrets(fake_process)
        fake_process.register_subprocess(
            ["op", "read", "op://dev/claude/CLAUDE_CODE_OAUTH_TOKEN"], stdout="oauth\n"
        )
        fake_process.register_subprocess(["gh", "secret", "set", "CLAUDE_CODE_OAUTH_TOKEN"])
        fake_process.register_subprocess(NAME_WITH_OWNER, stdout="acme/shop\n")
        fake_process.register_subprocess(
            ["gh", "api", "repos/acme/shop/rulesets", "--jq", ".[].name"], stdout=""
        )
        fake_process.register_subprocess(post_ruleset, occurrences=2)
        fake_process.register_subprocess(REPO_URL, stdout="")

        result = runner.invoke(
            cli, ["repo", "--no-init", "--rules", "--claude"], obj={"dependencies": deps_ok}
        )

        check.is_true(result.exit_code == 0, result.output)
        check.is_true(fake_process.call_count(create_repo) == 1)
        check.is_true(fake_process.call_count(post_ruleset) == 2)
        check.is_true("Added CLAUDE_CODE_OAUTH_TOKEN" in result.output)
        check.is_true((workspace / ".claude" / "settings.json").is_file())

    def test_workflows_need_configured_directory(self, runner, deps_ok):
        result = runner.invoke(cli, ["repo", "--no-init", "--workflows"], obj={"dependencies": deps_ok})
        check.is_true(result.exit_code == 1)
        check.is_true("No workflows directory configured" in result.output)

    def test_full_setup(self, runner, deps_ok, fake_process, workspace):
        post_ruleset = ["gh", "api", "repos/acme/shop/rulesets", "--method", "POST", "--input", "-"]
        fake_process.register_subprocess(REPO_VIEW)
        fake_process.register_subprocess(NAME_WITH_OWNER, stdout="acme/shop\n", occurrences=2)
        register_bot_secrets(fake_process)
        fake_process.register_subprocess(
            ["gh", "api", "repos/acme/shop/rulesets", "--jq", ".[].name"], stdout="Dev\n"
        )
        fake_process.register_subprocess(post_ruleset)
        fake_process.register_subprocess(REPO_URL, stdout="https://github.com/acme/shop\n")

        result = runner.invoke(cli, ["repo", "--no-init", "--rules"], obj={"dependencies": deps_ok})

        check.is_true(result.exit_code == 0, result.output)
        check.is_true("GitHub repository already exists" in result.output)
        check.is_true("Ruleset Dev already exists" in result.output)
        check.is_true(fake_process.call_count(post_ruleset) == 1)
        check.is_true("Repository URL: https://github.com/acme/shop" in result.output)


class TestKubeconfigCommand:
    def test_writes_to_output_dir(self, runner, deps_ok, fake_kubectl, tmp_path: Path):
        out = tmp_path / "out"
        result = runner.invoke(
            cli,
            ["kubeconfig", "shop", "acme/shop", "--output-dir", str(out)],
            obj={"dependencies": deps_ok, "kubectl": fake_kubectl},
        )

        check.is_true(result.exit_code == 0, result.output)
        check.is_true(f"Kubeconfig file created at: {out / 'kubeconfig.yaml'}" in result.output)
        check.is_true("  - shop-pr" in result.output)
        check.is_true("https://github.com/acme/shop" in result.output)
        check.is_true("Kubeconfig file preserved at" in result.output)
        config = yaml.safe_load((out / "kubeconfig.yaml").read_text())
        check.is_true(config["contexts"][0]["context"]["namespace"] == "shop")

    def test_namespace_from_chart(self, runner, deps_ok, fake_kubectl, tmp_path: Path, monkeypatch):
        (tmp_path / "chart").mkdir()
        (tmp_path / "chart" / "values.yaml").write_text("namespace: shop\n")
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(
            cli,
            ["kubeconfig", "--minimal"],
            obj={"dependencies": deps_ok, "kubectl": fake_kubectl},
        )

        check.is_true(result.exit_code == 0, result.output)
        check.is_true("Using namespace from Helm chart: shop" in result.output)
        check.is_true("Removed temporary directory" in result.output)
        check.is_true(("namespace", None, "shop-dev") not in fake_kubectl.objects)

    def test_prompts_between_chart_namespaces(
        self, runner, deps_ok, fake_kubectl, tmp_path: Path, monkeypatch
    ):
        (tmp_path / "helm").mkdir()
        (tmp_path / "helm" / "values.yaml").write_text("namespace: shop\napi:\n  namespace: api\n")
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(
            cli,
            ["kubeconfig", "--minimal"],
            obj={"dependencies": deps_ok, "kubectl": fake_kubectl},
            input="2\n",
        )

        check.is_true(result.exit_code == 0, result.output)
        check.is_true(("serviceaccount", "api", "github-deployer") in fake_kubectl.objects)

    def test_no_namespace_anywhere(self, runner, deps_ok, fake_kubectl, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(
            cli, ["kubeconfig"], obj={"dependencies": deps_ok, "kubectl": fake_kubectl}
        )
        check.is_true(result.exit_code == 1)
        check.is_true("Namespace is required" in result.output)

    def test_set_secret_needs_repo(self, runner, deps_ok, fake_kubectl):
        result = runner.invoke(
            cli,
            ["kubeconfig", "shop", "--set-secret"],
            obj={"dependencies": deps_ok, "kubectl": fake_kubectl},
        )
        check.is_true(result.exit_code == 1)
        check.is_true("--set-secret needs a GITHUB_REPO argument" in result.output)

    def test_set_secret_uploads(self, runner, deps_ok, fake_kubectl, fake_process):
        upload = ["gh", "secret", "set", "KUBE_CONFIG", "--repo", "acme/shop"]
        fake_process.register_subprocess(upload)

        result = runner.invoke(
            cli,
            ["kubeconfig", "shop", "acme/shop", "--set-secret"],
            obj={"dependencies": deps_ok, "kubectl": fake_kubectl},
        )

        check.is_true(result.exit_code == 0, result.output)
        check.is_true(fake_process.call_count(upload) == 1)
        check.is_true("KUBE_CONFIG secret set on acme/shop" in result.output)


class TestPgCommand:
    def test_missing_namespace_lists_available(self, runner, deps_ok, fake_kubectl):
        fake_kubectl.create_namespace("apps")
        result = runner.invoke(cli, ["pg"], obj={"dependencies": deps_ok, "kubectl": fake_kubectl})
        check.is_true(result.exit_code == 1)
        check.is_true("Namespace 'postgres' not found" in result.output)
        check.is_true("  - apps" in result.output)

    def test_missing_service(self, runner, deps_ok, fake_kubectl):
        fake_kubectl.create_namespace("postgres")
        fake_kubectl.objects.add(("svc", "postgres", "postgres-ro"))
        result = runner.invoke(cli, ["pg"], obj={"dependencies": deps_ok, "kubectl": fake_kubectl})
        check.is_true(result.exit_code == 1)
        check.is_true("Service 'postgres-rw' not found" in result.output)
        check.is_true("  - postgres-ro" in result.output)

    def test_forwards_port(self, runner, deps_ok, fake_kubectl):
        fake_kubectl.create_namespace("postgres")
        fake_kubectl.objects.add(("svc", "postgres", "postgres-rw"))
        result = runner.invoke(cli, ["pg"], obj={"dependencies": deps_ok, "kubectl": fake_kubectl})
        check.is_true(result.exit_code == 0, result.output)
        check.is_true(fake_kubectl.forwarded == [("postgres", "svc/postgres-rw", "5432:5432")])

    def test_requires_context(self, runner, deps_ok, fake_kubectl):
        fake_kubectl.context = ""
        result = runner.invoke(cli, ["pg"], obj={"dependencies": deps_ok, "kubectl": fake_kubectl})
        check.is_true(result.exit_code == 1)
        check.is_true("No active Kubernetes context found" in result.output)


@pytest.fixture
def projects(tmp_path: Path) -> Path:
    root = tmp_path / "projects"
    (root / "web" / "node_modules").mkdir(parents=True)
    (root / "web" / "node_modules" / "index.js").write_text("x" * 100)
    (root / "api" / "node_modules").mkdir(parents=True)
    return root


class TestCleanupCommand:
    def test_dry_run_keeps_everything(self, runner, projects: Path):
        result = runner.invoke(cli, ["cleanup", "--path", str(projects), "--dry-run"])

        check.is_true(result.exit_code == 0, result.output)
        check.is_true("Would remove: web/node_modules (100B)" in result.output)
        check.is_true("Found 2 node_modules directories" in result.output)
        check.is_true((projects / "web" / "node_modules").is_dir())

    def test_removes_directories(self, runner, projects: Path):
        result = runner.invoke(cli, ["cleanup", "-p", str(projects), "-s"])

        check.is_true(result.exit_code == 0, result.output)
        check.is_true("Removed 2 of 2 node_modules directories" in result.output)
        check.is_true(not (projects / "web" / "node_modules").exists())
        check.is_true((projects / "web").is_dir())

    def test_missing_path(self, runner, tmp_path: Path):
        result = runner.invoke(cli, ["cleanup", "-p", str(tmp_path / "nope")])
        check.is_true(result.exit_code == 1)
        check.is_true("Path does not exist" in result.output)


class TestDevCommand:
    def test_list(self, runner):
        result = runner.invoke(cli, ["dev", "--list"])
        check.is_true(result.exit_code == 0)
        check.is_true("nodejs-postgres" in result.output)
        check.is_true("containers.dev/templates" in result.output)

    def test_existing_devcontainer(self, runner, deps_ok, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".devcontainer").mkdir()
        result = runner.invoke(cli, ["dev"], obj={"dependencies": deps_ok})
        check.is_true(result.exit_code == 1)
        check.is_true("--force" in result.output)

    def test_applies_template_and_names_it(
        self, runner, deps_ok, tmp_path: Path, monkeypatch, fake_process
    ):
        project = tmp_path / "shop"
        project.mkdir()
        monkeypatch.chdir(project)
        monkeypatch.setattr("shutil.which", lambda name: None)

        def write_template(process):
            devcontainer = project / ".devcontainer"
            devcontainer.mkdir()
            (devcontainer / "devcontainer.json").write_text(
                '{"name": "${localWorkspaceFolderBasename}"}\n'
            )

        fake_process.allow_unregistered(True)
        fake_process.register_subprocess(
            [
                "devcontainer", "templates", "apply",
                "--template-id", "ghcr.io/starburst997/devcontainer/templates/python",
                "--workspace-folder", ".",
            ],
            callback=write_template,
        )  # fmt: skip

        result = runner.invoke(cli, ["dev", "python"], obj={"dependencies": deps_ok})

        check.is_true(result.exit_code == 0, result.output)
        check.is_true("default registry" in result.output)
        check.is_true(
            (project / ".devcontainer" / "devcontainer.json").read_text() == '{"name": "shop"}\n'
        )


class TestNpmCommand:
    def test_needs_package_json(self, runner, deps_ok, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(cli, ["npm"], obj={"dependencies": deps_ok})
        check.is_true(result.exit_code == 1)
        check.is_true("No package.json found" in result.output)

    def test_publish_failure(self, runner, deps_ok, tmp_path: Path, monkeypatch, fake_process):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        (tmp_path / "package.json").write_text('{"name": "@acme/widgets"}')
        fake_process.allow_unregistered(True)
        fake_process.register_subprocess(
            ["npm", "publish", "--tag", "placeholder", "--access", "public"],
            returncode=1,
            stderr="npm ERR! 403 Forbidden\n",
        )

        result = runner.invoke(cli, ["npm"], obj={"dependencies": deps_ok})

        check.is_true(result.exit_code == 1)
        check.is_true("Failed to publish placeholder package" in result.output)
        check.is_true("403 Forbidden" in result.output)

    def test_publishes_and_opens_access_page(
        self, runner, deps_ok, tmp_path: Path, monkeypatch, fake_process
    ):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        opened = []
        monkeypatch.setattr("click.launch", lambda url: opened.append(url) or 0)
        (tmp_path / "package.json").write_text('{"name": "@acme/widgets"}')
        fake_process.allow_unregistered(True)
        fake_process.register_subprocess(
            ["npm", "publish", "--tag", "placeholder", "--access", "public"]
        )

        result = runner.invoke(cli, ["npm"], obj={"dependencies": deps_ok})

        check.is_true(result.exit_code == 0, result.output)
        check.is_true("@acme/widgets@0.0.0-placeholder" in result.output)
        check.is_true(opened == ["https://www.npmjs.com/package/@acme/widgets/access"])


class TestVenvCommands:
    def test_existing_venv(self, runner, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("shutil.which", lambda name: f"/usr/bin/{name}")
        (tmp_path / "venv").mkdir()
        result = runner.invoke(cli, ["venv"])
        check.is_true(result.exit_code == 0)
        check.is_true("source venv/bin/activate" in result.output)

    def test_requirements_without_venv(self, runner, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(cli, ["requirements"])
        check.is_true(result.exit_code == 1)
        check.is_true("Run 'jd venv' first" in result.output)

    def test_requirements_written(self, runner, tmp_path: Path, monkeypatch, fake_process):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "venv" / "bin").mkdir(parents=True)
        fake_process.register_subprocess(["venv/bin/pip", "freeze"], stdout="click==8.1.7\n")

        result = runner.invoke(cli, ["requirements"])

        check.is_true(result.exit_code == 0, result.output)
        check.is_true((tmp_path / "requirements.txt").read_text() == "click==8.1.7\n")


class TestClaudeGithubCommand:
    @pytest.fixture(autouse=True)
    def unregistered_git(self, fake_process):
        fake_process.allow_unregistered(True)
        fake_process.register_subprocess(["claude", "setup-token"])

    def test_rotates_only_existing_secrets(self, runner, deps_ok, fake_process):
        edit = ["op", "item", "edit", "claude", "CLAUDE_CODE_OAUTH_TOKEN=tok123", "--vault", "dev"]
        upload = ["gh", "secret", "set", "CLAUDE_CODE_OAUTH_TOKEN", "--repo", "acme/a"]
        fake_process.register_subprocess(edit)
        fake_process.register_subprocess(
            ["gh", "repo", "list", "--limit", "1000", "--json", "nameWithOwner", "--jq", ".[].nameWithOwner"],
            stdout="acme/a\nacme/b\n",
        )
        fake_process.register_subprocess(
            ["gh", "secret", "list", "--repo", "acme/a"],
            stdout="CLAUDE_CODE_OAUTH_TOKEN\t2025-01-01T00:00:00Z\n",
        )
        fake_process.register_subprocess(
            ["gh", "secret", "list", "--repo", "acme/b"], stdout="NPM_TOKEN\t2025-01-01T00:00:00Z\n"
        )
        fake_process.register_subprocess(upload)

        result = runner.invoke(cli, ["claude-github"], obj={"dependencies": deps_ok}, input="tok123\n")

        check.is_true(result.exit_code == 0, result.output)
        check.is_true(fake_process.call_count(edit) == 1)
        check.is_true(fake_process.call_count(upload) == 1)
        check.is_true("Updated: 1 repositories" in result.output)
        check.is_true("Skipped: 1 repositories" in result.output)

    def test_empty_token_aborts(self, runner, deps_ok):
        result = runner.invoke(cli, ["claude-github"], obj={"dependencies": deps_ok}, input="\n")
        check.is_true(result.exit_code == 1)
        check.is_true("No token provided" in result.output)


def test_update_check_without_gh(runner, offline_gh):
    result = runner.invoke(cli, ["update", "--check"], obj={"github": offline_gh})
    check.is_true(result.exit_code == 0, result.output)
    check.is_true("Could not determine latest version" in result.output)
