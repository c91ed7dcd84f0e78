"""AWS client for EKS and STS operations."""

from typing import Any, cast

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from eksboot.core.exceptions import (
    ClusterNotFoundError,
    ControlPlaneClientError,
    ControlPlaneError,
    ControlPlaneServerError,
    ControlPlaneUnavailableError,
    ControlPlaneUnknownError,
    SigningError,
)
from eksboot.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0

# EKS error codes grouped by the error they surface as
_ERROR_CODE_MAP: dict[str, type[ControlPlaneError]] = {
    "ResourceNotFoundException": ClusterNotFoundError,
    "ClientException": ControlPlaneClientError,
    "InvalidParameterException": ControlPlaneClientError,
    "InvalidRequestException": ControlPlaneClientError,
    "ServerException": ControlPlaneServerError,
    "ServiceUnavailableException": ControlPlaneUnavailableError,
}

_NETWORK_ERRORS = (
    EndpointConnectionError,
    ConnectTimeoutError,
    ReadTimeoutError,
    ConnectionClosedError,
)

# Partitions whose regions live outside amazonaws.com, matched by region prefix
_PARTITION_DNS_SUFFIXES = (
    ("cn-", "amazonaws.com.cn"),
    ("us-isob-", "sc2s.sgov.gov"),
    ("us-iso-", "c2s.ic.gov"),
)


def sts_endpoint(region: str) -> str:
    """Regional STS endpoint URL, in the DNS domain of the region's partition."""
    suffix = next(
        (dns for prefix, dns in _PARTITION_DNS_SUFFIXES if region.startswith(prefix)),
        "amazonaws.com",
    )
    return f"https://sts.{region}.{suffix}"


def classify_client_error(error: ClientError) -> type[ControlPlaneError]:
    """Map a botocore ClientError from EKS to a control-plane error type."""
    error_code = error.response.get("Error", {}).get("Code", "")
    if error_code in _ERROR_CODE_MAP:
        return _ERROR_CODE_MAP[error_code]

    status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode") or 0
    if status == 503:
        return ControlPlaneUnavailableError
    if status >= 500:
        return ControlPlaneServerError
    return ControlPlaneUnknownError


class AWSClient:
    """AWS client for STS and EKS operations.

    Calls are bounded by a fixed timeout and botocore's own retries are switched off;
    retry policy belongs to whoever re-invokes the bootstrap.
    """

    def __init__(
        self,
        region: str = "us-east-1",
        profile: str | None = None,
        session: boto3.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """Initialize AWS client.

        Args:
            region: AWS region
            profile: AWS profile name (optional)
            session: Existing boto3 session (optional, overrides profile)
            timeout: Connect and read timeout for every call (seconds)
        """
        self.region = region
        self.profile = profile
        self.timeout = timeout

        if session:
            self.session = session
        elif profile:
            self.session = boto3.Session(profile_name=profile, region_name=region)
        else:
            self.session = boto3.Session(region_name=region)

        self.client_config = Config(
            region_name=region,
            connect_timeout=timeout,
            read_timeout=timeout,
            retries={"total_max_attempts": 1, "mode": "standard"},
        )
        self.sts = self.session.client(
            "sts",
            region_name=region,
            endpoint_url=sts_endpoint(region),
            config=self.client_config,
        )
        self.eks = self.session.client("eks", region_name=region, config=self.client_config)

        logger.debug("aws_client_initialized", region=region, profile=profile, timeout=timeout)

    def describe_cluster(self, cluster_name: str) -> dict[str, Any]:
        """Describe an EKS cluster.

        Args:
            cluster_name: Name of the EKS cluster

        Returns:
            The ``cluster`` section of the DescribeCluster response

        Raises:
            ClusterNotFoundError: If the cluster does not exist in the region
            ControlPlaneClientError: If the request was rejected as malformed
            ControlPlaneServerError: If EKS reported an internal fault
            ControlPlaneUnavailableError: If EKS is unavailable, unreachable or timed out
            ControlPlaneUnknownError: For any other failure
        """
        try:
            logger.debug("describing_cluster", cluster_name=cluster_name, region=self.region)

            response = self.eks.describe_cluster(name=cluster_name)
            cluster_info = cast(dict[str, Any], response["cluster"])

            logger.info(
                "cluster_described",
                cluster_name=cluster_name,
                status=cluster_info.get("status"),
            )
            return cluster_info

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            error_class = classify_client_error(e)
            logger.error(
                "describe_cluster_failed",
                cluster_name=cluster_name,
                region=self.region,
                error_code=error_code,
                error_type=error_class.__name__,
            )

            if error_class is ClusterNotFoundError:
                raise ClusterNotFoundError(
                    f"EKS cluster not found: {cluster_name} in {self.region}"
                ) from e
            raise error_class(
                f"Failed to describe cluster {cluster_name}: {error_code}: {e}"
            ) from e

        except _NETWORK_ERRORS as e:
            logger.error(
                "describe_cluster_unreachable",
                cluster_name=cluster_name,
                region=self.region,
                error=str(e),
            )
            raise ControlPlaneUnavailableError(
                f"EKS control plane unreachable in {self.region}: {e}"
            ) from e

        except BotoCoreError as e:
            logger.error("describe_cluster_error", cluster_name=cluster_name, error=str(e))
            raise ControlPlaneUnknownError(
                f"Failed to describe cluster {cluster_name}: {e}"
            ) from e

    def assume_role(self, role_arn: str, session_name: str) -> boto3.Session:
        """Assume an IAM role and return a new session.

        Args:
            role_arn: IAM role ARN to assume
            session_name: Role session name

        Returns:
            New boto3 session with assumed role credentials

        Raises:
            SigningError: If role assumption fails
        """
        try:
            logger.info("assuming_role", role_arn=role_arn, session_name=session_name)

            response = self.sts.assume_role(
                RoleArn=role_arn,
                RoleSessionName=session_name,
                DurationSeconds=900,
            )

            credentials = response["Credentials"]

            assumed_session = boto3.Session(
                aws_access_key_id=credentials["AccessKeyId"],
                aws_secret_access_key=credentials["SecretAccessKey"],
                aws_session_token=credentials["SessionToken"],
                region_name=self.region,
            )

            logger.info("role_assumed", role_arn=role_arn)
            return assumed_session

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error("role_assumption_failed", role_arn=role_arn, error_code=error_code)
            raise SigningError(f"Failed to assume role {role_arn}: {error_code}") from e

        except BotoCoreError as e:
            logger.error("role_assumption_failed", role_arn=role_arn, error=str(e))
            raise SigningError(f"Failed to assume role {role_arn}: {e}") from e
