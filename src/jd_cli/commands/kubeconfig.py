import shutil
import tempfile
from pathlib import Path

import click

from ..errors import PreconditionError, SecretProvisioningError
from ..operations import KubectlClient
from ..operations.executor import combined_output
from ..operations.kubeconfig import (
    FLUX_REGISTRY_NAMESPACE,
    KubeconfigGenerator,
    discover_chart_namespaces,
)
from ._shared import get_console, get_github, report_errors, require_dependencies

SEPARATOR = "=" * 54


def choose_namespace(ctx: click.Context, chart_dir: Path) -> str:
    """Pick the base namespace from the Helm charts under ``chart_dir``."""
    console = get_console(ctx)
    found = discover_chart_namespaces(chart_dir)
    if not found:
        raise PreconditionError(
            "Namespace is required",
            hints=[f"No namespace found in Helm charts under {chart_dir}"],
        )
    if len(found) == 1:
        console.info(f"Using namespace from Helm chart: {found[0]}")
        return found[0]
    console.info("Namespaces found in Helm charts:")
    for index, name in enumerate(found, start=1):
        console.echo(f"  {index}. {name}")
    choice = click.prompt("Select namespace", type=click.IntRange(1, len(found)), default=1)
    return found[choice - 1]


@click.command()
@click.argument("namespace", required=False)
@click.argument("github_repo", required=False)
@click.option("--output-dir", type=click.Path(file_okay=False), help="Directory for the files")
@click.option("--keep-temp", is_flag=True, help="Keep the temporary output directory")
@click.option("--minimal", is_flag=True, help="Only create the base namespace")
@click.option("--set-secret", is_flag=True, help="Upload as KUBE_CONFIG secret to GITHUB_REPO")
@click.option(
    "--chart-dir",
    type=click.Path(file_okay=False),
    default=".",
    show_default=True,
    help="Where to look for Helm charts when NAMESPACE is omitted",
)
@click.pass_context
@report_errors
def kubeconfig(
    ctx: click.Context,
    namespace: str | None,
    github_repo: str | None,
    output_dir: str | None,
    keep_temp: bool,
    minimal: bool,
    set_secret: bool,
    chart_dir: str,
) -> None:
    """Create a deployer service account and write its kubeconfig.

    NAMESPACE gets -dev and -pr variants unless --minimal. Every object is
    created only when missing, so the command can be re-run safely.
    """
    require_dependencies(ctx, "kubeconfig")
    console = get_console(ctx)
    if set_secret and not github_repo:
        raise PreconditionError("--set-secret needs a GITHUB_REPO argument")

    namespace = namespace or choose_namespace(ctx, Path(chart_dir))
    kubectl = ctx.obj.get("kubectl") or KubectlClient()
    generator = KubeconfigGenerator(kubectl, console)

    target = Path(output_dir) if output_dir else Path(tempfile.mkdtemp())
    try:
        result = generator.generate(namespace, target, minimal)

        console.echo(SEPARATOR)
        console.echo(f"Kubeconfig file created at: {result.kubeconfig_path}")
        console.echo("Content of the kubeconfig (to copy to GitHub Secret):")
        console.echo(SEPARATOR)
        console.echo(result.content.rstrip("\n"))
        console.echo(SEPARATOR)

        if github_repo and set_secret:
            upload = get_github(ctx).set_secret("KUBE_CONFIG", result.content, github_repo)
            if upload.returncode != 0:
                raise SecretProvisioningError(
                    f"Failed to set KUBE_CONFIG secret on {github_repo}",
                    output=combined_output(upload),
                )
            console.success(f"KUBE_CONFIG secret set on {github_repo}")
        elif github_repo:
            console.echo("Instructions:")
            console.echo("1. Copy the above kubeconfig content")
            console.echo(f"2. Go to your GitHub repository: https://github.com/{github_repo}")
            console.echo("3. Navigate to Settings > Secrets > Actions")
            console.echo("4. Create a new repository secret named 'KUBE_CONFIG'")
            console.echo("5. Paste the content and save")

        console.echo()
        console.echo("Service account has been granted full admin access to the following namespaces:")
        for name in result.namespaces:
            console.echo(f"  - {name}")
        console.echo(f"  - {FLUX_REGISTRY_NAMESPACE} (read/reconcile HelmRepository sources)")
        console.echo()
        console.echo("To trigger immediate Flux reconciliation from GitHub Actions:")
        console.echo(
            'kubectl annotate helmrelease/<release-name> reconcile.fluxcd.io/requestedAt="$(date +%s)"'
            " -n <namespace> --overwrite"
        )
    finally:
        if not output_dir and not keep_temp:
            shutil.rmtree(target, ignore_errors=True)

    console.echo()
    if output_dir or keep_temp:
        console.info(f"Kubeconfig file preserved at: {result.kubeconfig_path}")
    else:
        console.info("Removed temporary directory")
    console.success("Setup complete!")
