"""Kubernetes client for the bootstrapped cluster."""

import json

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.client.models import V1Pod
from urllib3.exceptions import HTTPError

from eksboot.clients.aws_client import DEFAULT_TIMEOUT_SECONDS
from eksboot.core.exceptions import KubernetesApiError, KubernetesError, ResourceNotFoundError
from eksboot.core.models import ClientConfig
from eksboot.utils.logging import get_logger

logger = get_logger(__name__)

_TRANSPORT_ERRORS = (HTTPError, OSError)


def api_error_message(error: ApiException) -> str:
    """Extract the API server's status message from an ApiException."""
    if error.body:
        try:
            status = json.loads(error.body)
        except (TypeError, ValueError):
            status = None
        if isinstance(status, dict) and status.get("message"):
            return str(status["message"])
    return str(error.reason or f"HTTP {error.status}")


class KubernetesClient:
    """Kubernetes client bound to one assembled ClientConfig.

    The configuration is loaded into a private ``Configuration`` and ``ApiClient``,
    so nothing touches the SDK's process-wide default configuration.
    """

    def __init__(self, client_config: ClientConfig, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        """Initialize Kubernetes client.

        Args:
            client_config: Endpoint, CA bundle and token for the cluster
            timeout: Timeout for every API call (seconds)

        Raises:
            KubernetesError: If the client cannot be configured
        """
        self.timeout = timeout
        self.endpoint = client_config.endpoint

        try:
            configuration = client.Configuration()
            config.load_kube_config_from_dict(
                config_dict=client_config.to_kubeconfig(),
                client_configuration=configuration,
                persist_config=False,
            )
            configuration.retries = 0

            self.api_client = client.ApiClient(configuration=configuration)
            self.core_v1 = client.CoreV1Api(api_client=self.api_client)

            logger.debug("k8s_client_initialized", endpoint=self.endpoint)

        except Exception as e:
            logger.error("k8s_client_initialization_failed", error=str(e))
            raise KubernetesError("Failed to initialize Kubernetes client") from e

    def __enter__(self) -> "KubernetesClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the connection pool."""
        self.api_client.close()

    def list_pods(self, namespace: str = "") -> list[V1Pod]:
        """List pods in a namespace, or across all namespaces.

        Args:
            namespace: Namespace to query; empty for all namespaces

        Returns:
            List of V1Pod objects

        Raises:
            KubernetesApiError: If pods cannot be listed
        """
        scope = namespace or "all namespaces"
        try:
            logger.debug("listing_pods", namespace=scope)

            if namespace:
                response = self.core_v1.list_namespaced_pod(
                    namespace=namespace, _request_timeout=self.timeout
                )
            else:
                response = self.core_v1.list_pod_for_all_namespaces(_request_timeout=self.timeout)
            pods = response.items

            logger.info("pods_listed", namespace=scope, count=len(pods))
            return pods

        except ApiException as e:
            message = api_error_message(e)
            logger.error("list_pods_failed", namespace=scope, status=e.status, reason=e.reason)
            raise KubernetesApiError(
                f"Failed to list pods in {scope}: {message}", status=e.status
            ) from e

        except _TRANSPORT_ERRORS as e:
            logger.error("list_pods_unreachable", namespace=scope, error=str(e))
            raise KubernetesApiError(f"Failed to list pods in {scope}: {e}") from e

    def count_pods(self, namespace: str = "") -> int:
        """Count pods in a namespace, or across all namespaces."""
        return len(self.list_pods(namespace=namespace))

    def get_pod(self, namespace: str, name: str) -> V1Pod:
        """Get a pod by namespace and name.

        Args:
            namespace: Namespace
            name: Pod name

        Returns:
            V1Pod object

        Raises:
            ResourceNotFoundError: If the pod does not exist
            KubernetesApiError: For any other API or transport failure
        """
        try:
            logger.debug("getting_pod", namespace=namespace, name=name)

            pod = self.core_v1.read_namespaced_pod(
                name=name, namespace=namespace, _request_timeout=self.timeout
            )

            logger.info("pod_retrieved", namespace=namespace, name=name)
            return pod

        except ApiException as e:
            if e.status == 404:
                logger.warning("pod_not_found", namespace=namespace, name=name)
                raise ResourceNotFoundError(
                    f"Pod {name} not found in {namespace}",
                    kind="Pod",
                    namespace=namespace,
                    name=name,
                ) from e

            message = api_error_message(e)
            logger.error(
                "get_pod_failed",
                namespace=namespace,
                name=name,
                status=e.status,
                reason=e.reason,
            )
            raise KubernetesApiError(message, status=e.status) from e

        except _TRANSPORT_ERRORS as e:
            logger.error("get_pod_unreachable", namespace=namespace, name=name, error=str(e))
            raise KubernetesApiError(str(e)) from e
