"""Bootstrap pipeline: describe cluster, mint token, assemble client configuration."""

from dataclasses import dataclass

import boto3

from eksboot.auth.assembler import assemble
from eksboot.auth.descriptor import ClusterDescriptorFetcher
from eksboot.auth.token import TokenMinter
from eksboot.core.config import BootstrapConfig
from eksboot.core.models import BearerToken, ClientConfig, ClusterDescriptor
from eksboot.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class BootstrapResult:
    """Everything the pipeline produced for one invocation."""

    descriptor: ClusterDescriptor
    token: BearerToken
    client_config: ClientConfig


def bootstrap(config: BootstrapConfig, session: boto3.Session | None = None) -> BootstrapResult:
    """Run the bootstrap pipeline for one cluster.

    Steps run strictly in order, each consuming the previous step's output. Nothing is
    cached: every call describes the cluster and mints a new token.

    Args:
        config: Validated bootstrap configuration
        session: boto3 session with the ambient credentials (optional)

    Returns:
        BootstrapResult with descriptor, token and client configuration

    Raises:
        EksBootError: Typed subclass naming the step that failed
    """
    session = session or boto3.Session(region_name=config.region)

    logger.info(
        "bootstrap_started",
        cluster_name=config.cluster_name,
        region=config.region,
        role_arn=config.role_arn or None,
    )

    fetcher = ClusterDescriptorFetcher(session=session, timeout=config.timeout_seconds)
    descriptor = fetcher.fetch(config.cluster_name, config.region, config.role_arn)

    minter = TokenMinter(session=session, region=config.region, timeout=config.timeout_seconds)
    token = minter.mint(descriptor.name, descriptor.authorized_role)

    client_config = assemble(descriptor, token)

    logger.info("bootstrap_completed", cluster_name=descriptor.name, endpoint=descriptor.endpoint)
    return BootstrapResult(descriptor=descriptor, token=token, client_config=client_config)
