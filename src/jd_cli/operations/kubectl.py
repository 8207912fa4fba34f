"""kubectl client."""

import subprocess

import yaml

from jd_cli.errors import KubernetesError
from jd_cli.operations.executor import CommandExecutor, combined_output


class KubectlClient(CommandExecutor):
    """Probe and create cluster objects through kubectl."""

    program = "kubectl"

    def current_context(self) -> str:
        return self.output(["config", "current-context"])

    def server(self) -> str:
        return self.output(
            ["config", "view", "--minify", "-o", "jsonpath={.clusters[0].cluster.server}"]
        )

    def _scope(self, namespace: str | None) -> list[str]:
        return ["-n", namespace] if namespace else []

    def exists(self, kind: str, name: str, namespace: str | None = None) -> bool:
        return self.succeeds(["get", kind, name, *self._scope(namespace)])

    def names(self, kind: str, namespace: str | None = None) -> list[str]:
        """Names of every ``kind`` object, without the ``kind/`` prefix."""
        lines = self.lines(["get", kind, *self._scope(namespace), "-o", "name"])
        return [line.split("/", 1)[-1] for line in lines]

    def jsonpath(self, kind: str, name: str, path: str, namespace: str | None = None) -> str:
        return self.output(["get", kind, name, *self._scope(namespace), "-o", f"jsonpath={path}"])

    def _check(self, result: subprocess.CompletedProcess[str], message: str) -> None:
        if result.returncode != 0:
            raise KubernetesError(message, output=combined_output(result))

    def create_namespace(self, namespace: str) -> None:
        result = self.run(["create", "namespace", namespace], check=False, capture=True)
        self._check(result, f"Failed to create namespace {namespace}")

    def apply(self, manifest: dict) -> None:
        """Apply a single manifest, passed to kubectl as YAML on stdin."""
        result = self.run(
            ["apply", "-f", "-"],
            check=False,
            capture=True,
            input=yaml.safe_dump(manifest, sort_keys=False),
        )
        kind = manifest.get("kind", "object")
        name = manifest.get("metadata", {}).get("name", "")
        self._check(result, f"Failed to apply {kind} {name}".rstrip())

    def port_forward(self, namespace: str, target: str, ports: str) -> int:
        """Forward ports in the foreground until interrupted."""
        return self.run(["port-forward", "-n", namespace, target, ports], check=False).returncode
