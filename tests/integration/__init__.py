"""Integration tests for eksboot.

These tests talk to real AWS and a real EKS cluster and require:
- Valid AWS credentials allowed to describe the cluster
- EKSBOOT_TEST_CLUSTER_NAME naming a cluster that maps the caller (or AWS_TEST_ROLE_ARN)

Tests are marked with @pytest.mark.integration and can be run with:
    pytest tests/integration/ -m integration

To skip integration tests:
    pytest -m "not integration"
"""
