"""Pytest configuration and shared fixtures."""

import base64
from datetime import datetime, timezone
from typing import Any
from unittest.mock import patch

import boto3
import pytest

from eksboot.core.models import BearerToken, ClientConfig, ClusterDescriptor

from tests.stubs import ACCESS_KEY, SAMPLE_CA_PEM, SECRET_KEY


@pytest.fixture(autouse=True)
def quiet_logging_setup():
    """Keep entry points from reconfiguring structlog onto short-lived test streams."""
    with patch("eksboot.handler.setup_logging"), patch("eksboot.cli.main.setup_logging"):
        yield


@pytest.fixture
def static_session() -> boto3.Session:
    """boto3 session with static, well-known test credentials."""
    return boto3.Session(
        aws_access_key_id=ACCESS_KEY,
        aws_secret_access_key=SECRET_KEY,
        region_name="us-west-2",
    )


@pytest.fixture
def sample_ca_pem() -> bytes:
    """PEM certificate-authority bundle."""
    return SAMPLE_CA_PEM


@pytest.fixture
def sample_cluster_info() -> dict[str, Any]:
    """DescribeCluster ``cluster`` section for the demo cluster."""
    return {
        "name": "demo",
        "arn": "arn:aws:eks:us-west-2:123456789012:cluster/demo",
        "status": "ACTIVE",
        "version": "1.29",
        "endpoint": "https://x.eks.amazonaws.com",
        "certificateAuthority": {"data": base64.b64encode(SAMPLE_CA_PEM).decode("ascii")},
    }


@pytest.fixture
def sample_descriptor() -> ClusterDescriptor:
    """Descriptor for the demo cluster."""
    return ClusterDescriptor(
        name="demo",
        endpoint="https://x.eks.amazonaws.com",
        ca_bundle=SAMPLE_CA_PEM,
        authorized_role="arn:aws:iam::123456789012:role/KubernetesAdmin",
        status="ACTIVE",
        region="us-west-2",
    )


@pytest.fixture
def sample_token() -> BearerToken:
    """Bearer token for the demo cluster."""
    return BearerToken(
        value="k8s-aws-v1.aHR0cHM6Ly9zdHMudXMtd2VzdC0yLmFtYXpvbmF3cy5jb20v",
        cluster_name="demo",
        expires_at=datetime(2026, 10, 19, 12, 14, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def sample_client_config(sample_token: BearerToken) -> ClientConfig:
    """Assembled client configuration for the demo cluster."""
    return ClientConfig(
        endpoint="https://x.eks.amazonaws.com",
        ca_bundle=SAMPLE_CA_PEM,
        token=sample_token.value,
    )


@pytest.fixture
def base_environ() -> dict[str, str]:
    """Minimal Lambda-style environment for the demo cluster."""
    return {
        "CLUSTER_NAME": "demo",
        "ROLE_ARN": "",
        "AWS_REGION": "us-west-2",
    }


def pytest_configure(config: Any) -> None:
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Tests against real AWS and a real cluster")
