from jd_cli.operations.config import JdConfig, JdConfigManager

from .dependencies import DependencyChecker
from .executor import CommandExecutor, GitExecutor
from .github import GitHubClient
from .kubectl import KubectlClient
from .secrets import OnePasswordClient, SecretProvisioner
from .worktree import WorktreeReconciler
