"""EKS bearer token minting.

A token is a presigned STS GetCallerIdentity URL, scoped to one cluster through the
signed ``x-k8s-aws-id`` header, base64url-encoded and prefixed with ``k8s-aws-v1.``.
The EKS authenticator replays the URL against STS to learn who signed it. No secret
ever leaves the process, and nothing is sent to STS while minting unless a role has to
be assumed first.
"""

import base64
import binascii
import re
from datetime import datetime, timedelta, timezone
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError
from botocore.model import ServiceId
from botocore.signers import RequestSigner

from eksboot.clients.aws_client import DEFAULT_TIMEOUT_SECONDS, AWSClient, sts_endpoint
from eksboot.core.config import is_role_arn
from eksboot.core.exceptions import ConfigurationError, SigningError
from eksboot.core.models import BearerToken
from eksboot.utils.logging import get_logger

logger = get_logger(__name__)

TOKEN_PREFIX = "k8s-aws-v1."
CLUSTER_ID_HEADER = "x-k8s-aws-id"
STS_QUERY = "?Action=GetCallerIdentity&Version=2011-06-15"
PRESIGN_EXPIRES_SECONDS = 60
# The authenticator accepts a token for 15 minutes after signing
TOKEN_LIFETIME = timedelta(minutes=14)

EXEC_CREDENTIAL_API_VERSION = "client.authentication.k8s.io/v1beta1"
_BASE64URL = re.compile(r"[A-Za-z0-9_-]+")


class TokenMinter:
    """Mints cluster-scoped bearer tokens from the ambient AWS identity."""

    def __init__(
        self,
        session: boto3.Session | None = None,
        region: str = "us-east-1",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """Initialize token minter.

        Args:
            session: boto3 session holding the ambient credentials (optional)
            region: Region whose STS endpoint the token is signed for
            timeout: Timeout for the AssumeRole call, when a role is used (seconds)
        """
        self.session = session or boto3.Session(region_name=region)
        self.region = region
        self.timeout = timeout

    def mint(self, cluster_name: str, role: str = "") -> BearerToken:
        """Mint a bearer token for a cluster.

        Args:
            cluster_name: EKS cluster name, signed into the token as its audience
            role: Role ARN to assume before signing; empty signs with the
                invocation's own identity

        Returns:
            BearerToken scoped to cluster_name

        Raises:
            ConfigurationError: If cluster_name is empty or role is not a role ARN
            SigningError: If credentials are missing, role assumption fails or
                signing fails
        """
        if not cluster_name:
            raise ConfigurationError("Cannot mint a token without a cluster name")

        role = role.strip()
        if role and not is_role_arn(role):
            raise ConfigurationError(f"Not an IAM role ARN: {role!r}")

        logger.debug("minting_token", cluster_name=cluster_name, role_arn=role or None)

        signing_session = self._signing_session(cluster_name, role)
        presigned_url = self._presign(signing_session, cluster_name)

        encoded = base64.urlsafe_b64encode(presigned_url.encode("utf-8")).decode("utf-8")
        token = BearerToken(
            value=f"{TOKEN_PREFIX}{encoded.rstrip('=')}",
            cluster_name=cluster_name,
            expires_at=datetime.now(timezone.utc) + TOKEN_LIFETIME,
        )

        logger.info(
            "token_minted",
            cluster_name=cluster_name,
            role_arn=role or None,
            expires_at=token.expires_at.isoformat(),
        )
        return token

    def _signing_session(self, cluster_name: str, role: str) -> boto3.Session:
        if not role:
            return self.session

        aws_client = AWSClient(region=self.region, session=self.session, timeout=self.timeout)
        return aws_client.assume_role(role, session_name=f"eksboot-{cluster_name}"[:64])

    def _presign(self, session: boto3.Session, cluster_name: str) -> str:
        try:
            credentials = session.get_credentials()
        except BotoCoreError as e:
            raise SigningError(f"Failed to resolve AWS credentials: {e}") from e

        if credentials is None:
            raise SigningError(
                f"No AWS credentials available to sign a token for {cluster_name}"
            )

        frozen_credentials = credentials.get_frozen_credentials()
        if not frozen_credentials.access_key or not frozen_credentials.secret_key:
            raise SigningError(
                f"Incomplete AWS credentials for signing a token for {cluster_name}"
            )

        request_params = {
            "method": "GET",
            "url": f"{sts_endpoint(self.region)}/{STS_QUERY}",
            "body": {},
            "headers": {CLUSTER_ID_HEADER: cluster_name},
            "context": {},
        }

        signer = RequestSigner(
            ServiceId("sts"),
            self.region,
            "sts",
            "v4",
            credentials,
            session.events,
        )

        try:
            return signer.generate_presigned_url(
                request_params,
                region_name=self.region,
                operation_name="GetCallerIdentity",
                expires_in=PRESIGN_EXPIRES_SECONDS,
            )
        except BotoCoreError as e:
            logger.error("token_signing_failed", cluster_name=cluster_name, error=str(e))
            raise SigningError(f"Failed to sign token for {cluster_name}: {e}") from e


def decode_token(token: str | BearerToken) -> str:
    """Return the presigned URL embedded in a token.

    Args:
        token: Token string or BearerToken

    Returns:
        Presigned STS URL

    Raises:
        ConfigurationError: If the token is not a k8s-aws-v1 token
    """
    value = str(token)
    if not value.startswith(TOKEN_PREFIX):
        raise ConfigurationError(f"Token does not start with {TOKEN_PREFIX}")

    payload = value[len(TOKEN_PREFIX) :]
    if not _BASE64URL.fullmatch(payload):
        raise ConfigurationError("Token payload is not base64url")

    payload += "=" * (-len(payload) % 4)
    try:
        return base64.urlsafe_b64decode(payload.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise ConfigurationError(f"Token payload is not valid base64url: {e}") from e


def exec_credential(token: BearerToken) -> dict[str, Any]:
    """Render a token as a client-go ExecCredential document."""
    return {
        "kind": "ExecCredential",
        "apiVersion": EXEC_CREDENTIAL_API_VERSION,
        "spec": {},
        "status": {
            "expirationTimestamp": token.expires_at.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "token": token.value,
        },
    }
