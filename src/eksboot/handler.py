"""Lambda entry point.

This is the single place where a failed bootstrap turns into a failed invocation.
Components below it only raise typed errors.
"""

from collections.abc import Mapping
from typing import Any

import boto3
from rich.console import Console

from eksboot.bootstrap import bootstrap
from eksboot.clients.kubernetes_client import KubernetesClient
from eksboot.core.config import BootstrapConfig
from eksboot.core.exceptions import EksBootError, KubernetesApiError, ResourceNotFoundError
from eksboot.utils.logging import bind_invocation_context, get_logger, log_error, setup_logging

logger = get_logger(__name__)

console = Console(highlight=False, soft_wrap=True)


def pod_count_line(count: int, namespace: str = "") -> str:
    """Format the pod count status line."""
    if namespace:
        return f"There are {count} pods in namespace {namespace}."
    return f"There are {count} pods in the cluster."


def lookup_pod(kube: KubernetesClient, namespace: str, name: str) -> str:
    """Look up one pod and describe the outcome.

    Not-found and API errors are outcomes here, not failures of the invocation.
    """
    try:
        kube.get_pod(namespace, name)
    except ResourceNotFoundError:
        return f"Pod {name} in namespace {namespace} not found."
    except KubernetesApiError as e:
        return f"Error getting pod {name} in namespace {namespace}: {e.message}"
    return f"Found pod {name} in namespace {namespace}."


def run_invocation(
    environ: Mapping[str, str] | None = None,
    session: boto3.Session | None = None,
    out: Console | None = None,
    request_id: str | None = None,
    configure_logging: bool = True,
    **overrides: Any,
) -> list[str]:
    """Bootstrap a client and exercise it against the cluster.

    Args:
        environ: Environment mapping (defaults to os.environ)
        session: boto3 session with the ambient credentials (optional)
        out: Console for status lines (defaults to stdout)
        request_id: Invocation identifier for log context (optional)
        configure_logging: Apply LOG_LEVEL and LOG_FORMAT; False keeps the caller's setup
        **overrides: BootstrapConfig field overrides

    Returns:
        Status lines, in the order they were printed

    Raises:
        EksBootError: If configuration, bootstrap or pod listing fails
    """
    out = out or console
    config = BootstrapConfig.from_env(environ, **overrides)
    if configure_logging:
        setup_logging(level=config.logging.level, format=config.logging.format)
    bind_invocation_context(cluster=config.cluster_name, request_id=request_id)

    lines: list[str] = []

    def report(line: str) -> None:
        lines.append(line)
        out.print(line, markup=False)

    result = bootstrap(config, session=session)
    descriptor = result.descriptor
    report(f"Cluster {descriptor.name} ({descriptor.status}) at {descriptor.endpoint}")

    with KubernetesClient(result.client_config, timeout=config.timeout_seconds) as kube:
        count = kube.count_pods(config.list_namespace)
        report(pod_count_line(count, config.list_namespace))
        report(lookup_pod(kube, config.pod_namespace, config.pod_name))

    return lines


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """AWS Lambda handler.

    The event is ignored; all input comes from the environment.
    """
    request_id = getattr(context, "aws_request_id", None)

    try:
        lines = run_invocation(request_id=request_id)
    except EksBootError as e:
        log_error(logger, e, operation=e.step)
        console.print(f"{e.step} failed: {e}", markup=False)
        raise

    return {"statusCode": 200, "body": lines}
