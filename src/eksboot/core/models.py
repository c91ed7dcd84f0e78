"""Core data models for eksboot."""

import base64
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Entry names used in rendered kubeconfigs
KUBECONFIG_CLUSTER = "kubernetes"
KUBECONFIG_USER = "aws"
KUBECONFIG_CONTEXT = "aws"


class ClusterDescriptor(BaseModel):
    """Connection parameters of an EKS cluster, as reported by the control plane."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Cluster name")
    endpoint: str = Field(..., min_length=1, description="API server base URL")
    ca_bundle: bytes = Field(..., description="Decoded PEM certificate-authority data")
    authorized_role: str = Field("", description="Role ARN the token asserts")
    status: str = Field("ACTIVE", description="Control-plane cluster status")
    region: str = Field(..., description="Region the cluster was described in")
    arn: str | None = None
    version: str | None = None


class BearerToken(BaseModel):
    """Short-lived EKS bearer token."""

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., min_length=1)
    cluster_name: str = Field(..., min_length=1)
    expires_at: datetime

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"BearerToken(cluster_name={self.cluster_name!r}, expires_at={self.expires_at!r})"


class ClientConfig(BaseModel):
    """Everything needed to talk to the API server: endpoint, trust anchor and token."""

    model_config = ConfigDict(frozen=True)

    endpoint: str = Field(..., min_length=1)
    ca_bundle: bytes
    token: str = Field(..., repr=False)

    @model_validator(mode="after")
    def _require_credentials(self) -> "ClientConfig":
        if not self.ca_bundle:
            raise ValueError("ca_bundle must not be empty")
        if not self.token:
            raise ValueError("token must not be empty")
        return self

    def to_kubeconfig(self) -> dict[str, Any]:
        """Render a single-cluster kubeconfig with the token embedded.

        Returns:
            Kubeconfig mapping
        """
        return {
            "apiVersion": "v1",
            "kind": "Config",
            "preferences": {},
            "clusters": [
                {
                    "name": KUBECONFIG_CLUSTER,
                    "cluster": {
                        "server": self.endpoint,
                        "certificate-authority-data": base64.b64encode(self.ca_bundle).decode(
                            "ascii"
                        ),
                    },
                }
            ],
            "contexts": [
                {
                    "name": KUBECONFIG_CONTEXT,
                    "context": {"cluster": KUBECONFIG_CLUSTER, "user": KUBECONFIG_USER},
                }
            ],
            "current-context": KUBECONFIG_CONTEXT,
            "users": [{"name": KUBECONFIG_USER, "user": {"token": self.token}}],
        }
