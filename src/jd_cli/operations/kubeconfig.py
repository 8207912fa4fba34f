"""Namespace, RBAC and kubeconfig provisioning for CI deployers."""

import base64
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from jd_cli.console import Console
from jd_cli.errors import KubernetesError
from jd_cli.operations.kubectl import KubectlClient

SERVICE_ACCOUNT = "github-deployer"
FLUX_REGISTRY_NAMESPACE = "flux-registry"
ADMIN_BINDING = f"{SERVICE_ACCOUNT}-admin-binding"
TOKEN_SECRET = f"{SERVICE_ACCOUNT}-token"
CHART_DIRS = ("chart", "charts", "helm", "deploy")


def namespaces_for(base: str, minimal: bool = False) -> list[str]:
    """Application namespaces for ``base``; flux-registry is handled separately."""
    if minimal:
        return [base]
    return [base, f"{base}-dev", f"{base}-pr"]


def cluster_role_name(base: str) -> str:
    return f"app-admin-{base}"


def service_account_manifest(base: str) -> dict:
    return {
        "apiVersion": "v1",
        "kind": "ServiceAccount",
        "metadata": {"name": SERVICE_ACCOUNT, "namespace": base},
    }


def cluster_role_manifest(base: str, namespaces: list[str]) -> dict:
    return {
        "apiVersion": "rbac.authorization.k8s.io/v1",
        "kind": "ClusterRole",
        "metadata": {"name": cluster_role_name(base)},
        "rules": [
            {"apiGroups": ["*"], "resources": ["*"], "verbs": ["*"]},
            {
                "apiGroups": [""],
                "resources": ["namespaces"],
                "verbs": ["get", "list", "watch", "create", "update", "patch"],
                "resourceNames": list(namespaces),
            },
            {
                "apiGroups": ["apiextensions.k8s.io"],
                "resources": ["customresourcedefinitions"],
                "verbs": ["get", "list"],
            },
            {
                "apiGroups": ["source.toolkit.fluxcd.io"],
                "resources": ["helmrepositories", "helmrepositories/status"],
                "verbs": ["get", "list", "watch", "patch"],
            },
        ],
    }


def role_binding_manifest(name: str, namespace: str, base: str) -> dict:
    return {
        "apiVersion": "rbac.authorization.k8s.io/v1",
        "kind": "RoleBinding",
        "metadata": {"name": name, "namespace": namespace},
        "subjects": [{"kind": "ServiceAccount", "name": SERVICE_ACCOUNT, "namespace": base}],
        "roleRef": {
            "kind": "ClusterRole",
            "name": cluster_role_name(base),
            "apiGroup": "rbac.authorization.k8s.io",
        },
    }


def token_secret_manifest(base: str) -> dict:
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {
            "name": TOKEN_SECRET,
            "namespace": base,
            "annotations": {"kubernetes.io/service-account.name": SERVICE_ACCOUNT},
        },
        "type": "kubernetes.io/service-account-token",
    }


def build_kubeconfig(cluster: str, server: str, ca_data: str, namespace: str, token: str) -> dict:
    """Standard kubeconfig with one cluster, one bearer-token user and one context.

    ``ca_data`` is the base64-encoded CA certificate.
    """
    context = f"{SERVICE_ACCOUNT}@{cluster}"
    return {
        "apiVersion": "v1",
        "kind": "Config",
        "preferences": {},
        "clusters": [
            {
                "cluster": {"certificate-authority-data": ca_data, "server": server},
                "name": cluster,
            }
        ],
        "contexts": [
            {
                "context": {"cluster": cluster, "namespace": namespace, "user": SERVICE_ACCOUNT},
                "name": context,
            }
        ],
        "current-context": context,
        "users": [{"name": SERVICE_ACCOUNT, "user": {"token": token}}],
    }


def _namespace_values(node) -> list[str]:
    found = []
    if isinstance(node, dict):
        for key, value in node.items():
            if key == "namespace" and isinstance(value, str) and value:
                found.append(value)
            else:
                found.extend(_namespace_values(value))
    elif isinstance(node, list):
        for item in node:
            found.extend(_namespace_values(item))
    return found


def discover_chart_namespaces(root: Path) -> list[str]:
    """Namespaces named in Helm ``Chart.yaml`` and ``values*.yaml`` files under ``root``."""
    namespaces: list[str] = []
    for chart_dir in CHART_DIRS:
        base = root / chart_dir
        if not base.is_dir():
            continue
        paths = sorted(
            p for p in base.rglob("*.yaml") if p.name == "Chart.yaml" or p.name.startswith("values")
        )
        for path in paths:
            try:
                documents = list(yaml.safe_load_all(path.read_text()))
            except yaml.YAMLError:
                # templated values files are not always plain YAML
                continue
            for document in documents:
                for namespace in _namespace_values(document):
                    if namespace not in namespaces:
                        namespaces.append(namespace)
    return namespaces


@dataclass
class KubeconfigResult:
    """What a provisioning run produced."""

    kubeconfig_path: Path
    ca_path: Path
    content: str
    namespaces: list[str]
    created: list[str] = field(default_factory=list)


class KubeconfigGenerator:
    """Provision a namespace-scoped deployer account and write its kubeconfig.

    Every cluster object is probed before it is created, so running twice
    against the same cluster creates nothing the second time.
    """

    def __init__(
        self,
        kubectl: KubectlClient,
        console: Console,
        sleep: Callable[[float], None] | None = None,
        attempts: int = 10,
        interval: float = 1.0,
    ):
        self.kubectl = kubectl
        self.console = console
        self.sleep = sleep or time.sleep
        self.attempts = attempts
        self.interval = interval
        self.created: list[str] = []

    def _ensure(self, kind: str, name: str, namespace: str | None, create: Callable[[], None]) -> None:
        if self.kubectl.exists(kind, name, namespace):
            self.console.debug(f"{kind} {name} already exists")
            return
        create()
        self.created.append(f"{kind}/{name}" if not namespace else f"{kind}/{namespace}/{name}")

    def ensure_namespace(self, namespace: str) -> None:
        self._ensure(
            "namespace", namespace, None, lambda: self.kubectl.create_namespace(namespace)
        )
        self.console.success(f"Namespace {namespace} ready")

    def ensure_manifest(self, manifest: dict) -> None:
        metadata = manifest["metadata"]
        self._ensure(
            manifest["kind"].lower(),
            metadata["name"],
            metadata.get("namespace"),
            lambda: self.kubectl.apply(manifest),
        )

    def token_secret_name(self, base: str) -> str:
        """The service account's token secret, created when it has none."""
        listed = self.kubectl.jsonpath("serviceaccount", SERVICE_ACCOUNT, "{.secrets[0].name}", base)
        if listed:
            return listed
        self.console.info("Creating token for service account...")
        self.ensure_manifest(token_secret_manifest(base))
        return TOKEN_SECRET

    def wait_for_token(self, secret: str, base: str) -> tuple[str, str]:
        """Poll the token secret until it carries a token; returns (token, ca base64)."""
        self.console.info("Waiting for secret to be initialized...")
        for attempt in range(self.attempts):
            token = self.kubectl.jsonpath("secret", secret, "{.data.token}", base)
            ca_data = self.kubectl.jsonpath("secret", secret, r"{.data.ca\.crt}", base)
            if token and ca_data:
                return base64.b64decode(token).decode(), ca_data
            if attempt < self.attempts - 1:
                self.sleep(self.interval)
        raise KubernetesError(
            f"Token for secret {secret} was not populated",
            hints=[f"Check the secret with: kubectl describe secret {secret} -n {base}"],
        )

    def provision(self, base: str, minimal: bool = False) -> tuple[list[str], str, str]:
        """Create namespaces and RBAC; returns (namespaces, token, ca base64)."""
        self.created = []
        namespaces = namespaces_for(base, minimal)
        if minimal:
            self.console.info("Running in minimal mode: single namespace only")
        else:
            self.console.info("Running in full mode: namespace + -dev + -pr variants")

        self.console.info("Creating namespaces...")
        for namespace in [*namespaces, FLUX_REGISTRY_NAMESPACE]:
            self.ensure_namespace(namespace)

        self.console.info(f"Creating service account in namespace {base}...")
        self.ensure_manifest(service_account_manifest(base))

        self.console.info("Creating ClusterRole with namespace-scoped admin permissions...")
        self.ensure_manifest(cluster_role_manifest(base, namespaces))

        self.console.info("Creating role bindings in all namespaces...")
        for namespace in namespaces:
            self.ensure_manifest(role_binding_manifest(ADMIN_BINDING, namespace, base))
            self.console.success(f"RoleBinding ready in {namespace}")
        self.ensure_manifest(
            role_binding_manifest(f"{SERVICE_ACCOUNT}-{base}", FLUX_REGISTRY_NAMESPACE, base)
        )
        self.console.success(f"RoleBinding ready in {FLUX_REGISTRY_NAMESPACE}")

        token, ca_data = self.wait_for_token(self.token_secret_name(base), base)
        return namespaces, token, ca_data

    def generate(self, base: str, output_dir: Path, minimal: bool = False) -> KubeconfigResult:
        """Provision the cluster and write ``kubeconfig.yaml`` and ``ca.crt``."""
        cluster = self.kubectl.current_context()
        if not cluster:
            raise KubernetesError(
                "No active Kubernetes context found",
                hints=["Configure kubectl to connect to your cluster first"],
            )

        namespaces, token, ca_data = self.provision(base, minimal)
        server = self.kubectl.server()

        output_dir.mkdir(parents=True, exist_ok=True)
        ca_path = output_dir / "ca.crt"
        ca_path.write_bytes(base64.b64decode(ca_data))

        content = yaml.safe_dump(
            build_kubeconfig(cluster, server, ca_data, base, token), sort_keys=False
        )
        kubeconfig_path = output_dir / "kubeconfig.yaml"
        kubeconfig_path.write_text(content)

        return KubeconfigResult(
            kubeconfig_path=kubeconfig_path,
            ca_path=ca_path,
            content=content,
            namespaces=namespaces,
            created=list(self.created),
        )
