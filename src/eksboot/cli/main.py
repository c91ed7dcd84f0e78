"""Main CLI entry point for eksboot."""

import json
import sys

import click
import yaml
from rich.console import Console
from rich.table import Table

from eksboot import __version__
from eksboot.core.config import resolve_region
from eksboot.core.exceptions import EksBootError
from eksboot.utils.logging import setup_logging

console = Console()


def _fail(error: EksBootError) -> None:
    console.print(f"[red]Error ({error.step}): {error}[/red]")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    help="Log level (DEBUG, INFO, WARNING, ERROR)",
)
@click.option(
    "--log-format",
    type=click.Choice(["json", "console"]),
    default="console",
    show_default=True,
    help="Log format",
)
def cli(log_level: str, log_format: str) -> None:
    """EKS Bootstrap (eksboot) - authenticated Kubernetes access from stateless invocations."""
    # Logs go to stderr so token and kubeconfig output stays machine-readable
    setup_logging(level=log_level, format=log_format, output="stderr")


@cli.command()
@click.option("--cluster", "cluster_name", help="EKS cluster name (default: $CLUSTER_NAME)")
@click.option("--role", "role_arn", help="Role ARN the token asserts (default: $ROLE_ARN)")
@click.option("--region", help="AWS region (default: $CLUSTER_REGION, then $AWS_REGION)")
@click.option("--namespace", "list_namespace", help="Namespace to count pods in (default: all)")
@click.option("--pod-namespace", help="Namespace of the pod to look up")
@click.option("--pod", "pod_name", help="Name of the pod to look up")
def run(
    cluster_name: str | None,
    role_arn: str | None,
    region: str | None,
    list_namespace: str | None,
    pod_namespace: str | None,
    pod_name: str | None,
) -> None:
    """Run the same bootstrap and checks as the Lambda handler."""
    from eksboot.handler import run_invocation

    try:
        run_invocation(
            out=console,
            configure_logging=False,
            cluster_name=cluster_name,
            role_arn=role_arn,
            region=region,
            list_namespace=list_namespace,
            pod_namespace=pod_namespace,
            pod_name=pod_name,
        )
    except EksBootError as e:
        _fail(e)


@cli.command()
@click.option("--cluster", "cluster_name", required=True, help="EKS cluster name")
@click.option("--region", help="AWS region (default: $CLUSTER_REGION, then $AWS_REGION)")
def describe(cluster_name: str, region: str | None) -> None:
    """Show the connection parameters of a cluster."""
    from eksboot.auth.descriptor import ClusterDescriptorFetcher

    try:
        descriptor = ClusterDescriptorFetcher().fetch(cluster_name, resolve_region(region))
    except EksBootError as e:
        _fail(e)
        return

    table = Table(title=f"Cluster {descriptor.name}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Status", descriptor.status)
    table.add_row("Endpoint", descriptor.endpoint)
    table.add_row("Version", descriptor.version or "-")
    table.add_row("ARN", descriptor.arn or "-")
    table.add_row("Region", descriptor.region)
    table.add_row("CA bundle", f"{len(descriptor.ca_bundle)} bytes")
    console.print(table)


@cli.command()
@click.option("--cluster", "-i", "cluster_name", required=True, help="EKS cluster name")
@click.option("--role", "-r", "role_arn", default="", help="Role ARN to assume before signing")
@click.option("--region", help="AWS region (default: $CLUSTER_REGION, then $AWS_REGION)")
def token(cluster_name: str, role_arn: str, region: str | None) -> None:
    """Print an ExecCredential for use as a kubeconfig exec plugin."""
    from eksboot.auth.token import TokenMinter, exec_credential

    try:
        bearer = TokenMinter(region=resolve_region(region)).mint(cluster_name, role_arn)
    except EksBootError as e:
        _fail(e)
        return

    click.echo(json.dumps(exec_credential(bearer)))


@cli.command()
@click.option("--cluster", "cluster_name", required=True, help="EKS cluster name")
@click.option("--role", "role_arn", default="", help="Role ARN the token asserts")
@click.option("--region", help="AWS region (default: $CLUSTER_REGION, then $AWS_REGION)")
def kubeconfig(cluster_name: str, role_arn: str, region: str | None) -> None:
    """Print a kubeconfig with a freshly minted token embedded."""
    from eksboot.bootstrap import bootstrap
    from eksboot.core.config import BootstrapConfig

    try:
        config = BootstrapConfig.from_env(
            cluster_name=cluster_name, role_arn=role_arn, region=region
        )
        result = bootstrap(config)
    except EksBootError as e:
        _fail(e)
        return

    click.echo(yaml.safe_dump(result.client_config.to_kubeconfig(), sort_keys=False))


if __name__ == "__main__":
    cli()
