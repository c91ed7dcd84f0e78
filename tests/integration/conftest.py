"""Integration test fixtures and configuration."""

import os

import boto3
import pytest
from botocore.exceptions import BotoCoreError, ClientError


@pytest.fixture
def aws_test_region() -> str:
    """AWS region for integration tests."""
    return os.getenv("AWS_TEST_REGION", "us-east-1")


@pytest.fixture
def aws_test_role_arn() -> str:
    """Role the token should assert (optional, empty for the caller's identity)."""
    return os.getenv("AWS_TEST_ROLE_ARN", "")


@pytest.fixture
def skip_if_no_aws_credentials(aws_test_region: str):
    """Skip test if AWS credentials are not available."""
    try:
        boto3.client("sts", region_name=aws_test_region).get_caller_identity()
    except (BotoCoreError, ClientError) as e:
        pytest.skip(f"AWS credentials not available: {e}")


@pytest.fixture
def integration_environ(request, aws_test_region: str, aws_test_role_arn: str) -> dict[str, str]:
    """Environment for bootstrapping a real cluster.

    Uses environment variables to allow testing against real clusters:
    - EKSBOOT_TEST_CLUSTER_NAME
    - AWS_TEST_REGION
    - AWS_TEST_ROLE_ARN
    """
    cluster_name = os.getenv("EKSBOOT_TEST_CLUSTER_NAME")
    if not cluster_name:
        pytest.skip("Set EKSBOOT_TEST_CLUSTER_NAME to run against a real cluster.")
    request.getfixturevalue("skip_if_no_aws_credentials")

    return {
        "CLUSTER_NAME": cluster_name,
        "ROLE_ARN": aws_test_role_arn,
        "CLUSTER_REGION": aws_test_region,
    }
