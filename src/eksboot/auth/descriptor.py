"""Cluster descriptor fetching from the EKS control plane."""

import base64
import binascii
from typing import Any

import boto3

from eksboot.clients.aws_client import DEFAULT_TIMEOUT_SECONDS, AWSClient
from eksboot.core.exceptions import CADecodeError, ConfigurationError, ControlPlaneUnknownError
from eksboot.core.models import ClusterDescriptor
from eksboot.utils.logging import get_logger

logger = get_logger(__name__)


def decode_ca_bundle(ca_data: str | None, cluster_name: str) -> bytes:
    """Decode base64 certificate-authority data.

    Args:
        ca_data: Base64-encoded PEM bundle from DescribeCluster
        cluster_name: Cluster the data belongs to (for error messages)

    Returns:
        Decoded PEM bytes

    Raises:
        CADecodeError: If data is missing, empty or not valid base64
    """
    if not ca_data:
        raise CADecodeError(f"Cluster {cluster_name} has no certificate authority data")

    try:
        ca_bundle = base64.b64decode(ca_data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CADecodeError(
            f"Certificate authority data for {cluster_name} is not valid base64: {e}"
        ) from e

    if not ca_bundle:
        raise CADecodeError(f"Certificate authority data for {cluster_name} decoded to nothing")
    return ca_bundle


class ClusterDescriptorFetcher:
    """Builds a ClusterDescriptor from one DescribeCluster call."""

    def __init__(
        self,
        session: boto3.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """Initialize fetcher.

        Args:
            session: boto3 session holding the ambient credentials (optional)
            timeout: Timeout for the control-plane call (seconds)
        """
        self.session = session
        self.timeout = timeout

    def fetch(self, name: str, region: str, authorized_role: str = "") -> ClusterDescriptor:
        """Describe a cluster and decode its connection parameters.

        Args:
            name: EKS cluster name
            region: AWS region the cluster lives in
            authorized_role: Role ARN the token should assert (carried, not fetched)

        Returns:
            ClusterDescriptor for the cluster

        Raises:
            ConfigurationError: If name or region is empty
            ControlPlaneError: If the control-plane call fails (typed subclass)
            CADecodeError: If the certificate-authority data cannot be decoded
        """
        if not name:
            raise ConfigurationError("Cluster name must not be empty")
        if not region:
            raise ConfigurationError("Region must not be empty")

        client = AWSClient(region=region, session=self.session, timeout=self.timeout)
        cluster_info = client.describe_cluster(name)

        return self._build_descriptor(name, region, authorized_role, cluster_info)

    @staticmethod
    def _build_descriptor(
        name: str, region: str, authorized_role: str, cluster_info: dict[str, Any]
    ) -> ClusterDescriptor:
        cluster_name = cluster_info.get("name") or name
        status = cluster_info.get("status", "UNKNOWN")

        endpoint = cluster_info.get("endpoint")
        if not endpoint:
            logger.error("cluster_endpoint_missing", cluster_name=cluster_name, status=status)
            raise ControlPlaneUnknownError(
                f"Cluster {cluster_name} has no API endpoint (status {status})"
            )
        if not endpoint.startswith("https://"):
            logger.error("cluster_endpoint_not_https", cluster_name=cluster_name, endpoint=endpoint)
            raise ControlPlaneUnknownError(
                f"Cluster {cluster_name} reported a non-HTTPS endpoint: {endpoint}"
            )

        ca_data = (cluster_info.get("certificateAuthority") or {}).get("data")
        ca_bundle = decode_ca_bundle(ca_data, cluster_name)

        if status != "ACTIVE":
            logger.warning("cluster_not_active", cluster_name=cluster_name, status=status)

        descriptor = ClusterDescriptor(
            name=cluster_name,
            endpoint=endpoint,
            ca_bundle=ca_bundle,
            authorized_role=authorized_role,
            status=status,
            region=region,
            arn=cluster_info.get("arn"),
            version=cluster_info.get("version"),
        )

        logger.info(
            "cluster_descriptor_built",
            cluster_name=cluster_name,
            endpoint=endpoint,
            status=status,
            ca_bytes=len(ca_bundle),
        )
        return descriptor
