"""Client configuration assembly."""

from eksboot.core.exceptions import ClientAssemblyError
from eksboot.core.models import BearerToken, ClientConfig, ClusterDescriptor
from eksboot.utils.logging import get_logger

logger = get_logger(__name__)


def assemble(descriptor: ClusterDescriptor, token: BearerToken | str) -> ClientConfig:
    """Combine a cluster descriptor and a token into a client configuration.

    Pure function, no I/O. An empty CA bundle or token means an earlier step failed,
    and proceeding would mean an unverified or unauthenticated connection.

    Args:
        descriptor: Cluster connection parameters
        token: Bearer token minted for descriptor.name

    Returns:
        ClientConfig ready for KubernetesClient

    Raises:
        ClientAssemblyError: If the CA bundle or token is empty, or the token was
            minted for another cluster
    """
    if not descriptor.ca_bundle:
        raise ClientAssemblyError(
            f"Refusing to build a client for {descriptor.name} without a CA bundle"
        )

    token_value = str(token)
    if not token_value:
        raise ClientAssemblyError(
            f"Refusing to build a client for {descriptor.name} without a token"
        )

    if isinstance(token, BearerToken) and token.cluster_name != descriptor.name:
        raise ClientAssemblyError(
            f"Token was minted for cluster {token.cluster_name}, not {descriptor.name}"
        )

    client_config = ClientConfig(
        endpoint=descriptor.endpoint,
        ca_bundle=descriptor.ca_bundle,
        token=token_value,
    )

    logger.debug(
        "client_config_assembled", cluster_name=descriptor.name, endpoint=descriptor.endpoint
    )
    return client_config
