"""Custom exceptions for eksboot.

Every exception carries a ``step`` naming the bootstrap stage that failed, so the
invocation boundary can report where things went wrong without digging through logs.
"""


class EksBootError(Exception):
    """Base exception for all eksboot errors."""

    step = "bootstrap"


class ConfigurationError(EksBootError):
    """Missing or malformed configuration input."""

    step = "configuration"


class ControlPlaneError(EksBootError):
    """EKS control-plane operation failed."""

    step = "describe_cluster"


class ClusterNotFoundError(ControlPlaneError):
    """Cluster name is unknown in the region."""


class ControlPlaneClientError(ControlPlaneError):
    """Request to the control plane was malformed."""


class ControlPlaneServerError(ControlPlaneError):
    """Control plane reported an internal fault."""


class ControlPlaneUnavailableError(ControlPlaneError):
    """Control plane unreachable, unavailable or timed out."""


class ControlPlaneUnknownError(ControlPlaneError):
    """Any other control-plane failure."""


class CADecodeError(EksBootError):
    """Cluster certificate-authority data is missing or not valid base64."""

    step = "decode_ca"


class SigningError(EksBootError):
    """Token could not be signed with the ambient credentials."""

    step = "mint_token"


class ClientAssemblyError(EksBootError):
    """Client configuration refused because an upstream step produced unusable output."""

    step = "assemble_client"


class KubernetesError(EksBootError):
    """Kubernetes API call failed."""

    step = "kubernetes_api"


class ResourceNotFoundError(KubernetesError):
    """Requested Kubernetes object does not exist."""

    def __init__(self, message: str, kind: str, namespace: str, name: str):
        """Initialize not-found error.

        Args:
            message: Error message
            kind: Resource kind (e.g. "Pod")
            namespace: Namespace that was queried
            name: Object name that was queried
        """
        super().__init__(message)
        self.kind = kind
        self.namespace = namespace
        self.name = name


class KubernetesApiError(KubernetesError):
    """Kubernetes API returned an error status or could not be reached.

    Attributes:
        status: HTTP status code, or None for transport failures
        message: Message reported by the API server or the transport
    """

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status
        self.message = message
