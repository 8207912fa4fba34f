import click

from ..errors import KubernetesError
from ..operations import KubectlClient
from ._shared import get_console, report_errors, require_dependencies

NAMESPACE = "postgres"
SERVICE = "postgres-rw"
PORTS = "5432:5432"


def _listing(title: str, names: list[str]) -> list[str]:
    return [title, *(f"  - {name}" for name in names)]


@click.command()
@click.pass_context
@report_errors
def pg(ctx: click.Context) -> None:
    """Port-forward local 5432 to the postgres-rw service (Ctrl+C to stop).

    Connect with: psql -h localhost -p 5432 -U <username> <database>
    """
    require_dependencies(ctx, "pg")
    console = get_console(ctx)
    kubectl = ctx.obj.get("kubectl") or KubectlClient()

    if not kubectl.current_context():
        raise KubernetesError(
            "No active Kubernetes context found",
            hints=["Configure kubectl to connect to your cluster first"],
        )

    if not kubectl.exists("namespace", NAMESPACE):
        raise KubernetesError(
            f"Namespace '{NAMESPACE}' not found in current cluster",
            hints=_listing("Available namespaces:", kubectl.names("namespaces")),
        )

    if not kubectl.exists("svc", SERVICE, NAMESPACE):
        raise KubernetesError(
            f"Service '{SERVICE}' not found in namespace '{NAMESPACE}'",
            hints=_listing(
                f"Available services in {NAMESPACE} namespace:", kubectl.names("svc", NAMESPACE)
            ),
        )

    console.info("Starting port-forward to PostgreSQL (port 5432)")
    console.info("Press Ctrl+C to stop the port-forward")
    console.info("Connect using: psql -h localhost -p 5432 -U <username> <database>")
    kubectl.port_forward(NAMESPACE, f"svc/{SERVICE}", PORTS)
