"""Unit tests for the bootstrap pipeline."""

from unittest.mock import MagicMock, Mock, patch

import boto3
import pytest

from eksboot.bootstrap import BootstrapResult, bootstrap
from eksboot.core.config import BootstrapConfig
from eksboot.core.exceptions import (
    CADecodeError,
    ClientAssemblyError,
    ClusterNotFoundError,
    SigningError,
)
from eksboot.core.models import BearerToken, ClusterDescriptor

from tests.stubs import SECRET_KEY, verify_token

ROLE = "arn:aws:iam::123456789012:role/KubernetesAdmin"


@pytest.fixture
def config() -> BootstrapConfig:
    """Bootstrap configuration for the demo cluster."""
    return BootstrapConfig(cluster_name="demo", region="us-west-2", timeout_seconds=5)


class TestBootstrapPipeline:
    """Tests running the real pipeline with a stubbed control plane."""

    @pytest.fixture
    def mock_aws_client_class(self, sample_cluster_info):
        """Patch AWSClient as seen by the descriptor fetcher."""
        with patch("eksboot.auth.descriptor.AWSClient") as mock_class:
            mock_class.return_value.describe_cluster.return_value = sample_cluster_info
            yield mock_class

    def test_bootstrap_produces_usable_client_config(
        self,
        config: BootstrapConfig,
        static_session: boto3.Session,
        mock_aws_client_class: MagicMock,
        sample_ca_pem: bytes,
    ) -> None:
        """Test descriptor, token and client config agree with each other."""
        result = bootstrap(config, session=static_session)

        assert isinstance(result, BootstrapResult)
        assert result.descriptor.name == "demo"
        assert result.client_config.endpoint == "https://x.eks.amazonaws.com"
        assert result.client_config.ca_bundle == sample_ca_pem
        assert result.client_config.token == result.token.value
        assert verify_token(result.token.value, SECRET_KEY, "demo")

        mock_aws_client_class.assert_called_once_with(
            region="us-west-2", session=static_session, timeout=5
        )
        mock_aws_client_class.return_value.describe_cluster.assert_called_once_with("demo")

    def test_each_call_mints_a_new_token(
        self,
        config: BootstrapConfig,
        static_session: boto3.Session,
        mock_aws_client_class: MagicMock,
    ) -> None:
        """Test nothing is cached between invocations."""
        bootstrap(config, session=static_session)
        bootstrap(config, session=static_session)

        assert mock_aws_client_class.return_value.describe_cluster.call_count == 2

    def test_default_session_uses_config_region(
        self, config: BootstrapConfig, static_session: boto3.Session, mock_aws_client_class
    ) -> None:
        """Test a session is created for the configured region when none is given."""
        with patch("eksboot.bootstrap.boto3.Session", return_value=static_session) as mock_session:
            bootstrap(config)

        mock_session.assert_called_once_with(region_name="us-west-2")

    def test_bad_ca_stops_before_signing(
        self, config: BootstrapConfig, static_session: boto3.Session, sample_cluster_info
    ) -> None:
        """Test a CA decode failure means no token is minted."""
        sample_cluster_info["certificateAuthority"] = {"data": "%%%"}

        with (
            patch("eksboot.auth.descriptor.AWSClient") as mock_class,
            patch("eksboot.bootstrap.TokenMinter") as mock_minter,
        ):
            mock_class.return_value.describe_cluster.return_value = sample_cluster_info
            with pytest.raises(CADecodeError):
                bootstrap(config, session=static_session)

        mock_minter.assert_not_called()


class TestBootstrapOrdering:
    """Tests for step ordering and short-circuiting."""

    @pytest.fixture
    def steps(self, sample_descriptor: ClusterDescriptor, sample_token: BearerToken):
        """Patch every pipeline step onto one manager mock."""
        manager = Mock()
        with (
            patch("eksboot.bootstrap.ClusterDescriptorFetcher") as fetcher_class,
            patch("eksboot.bootstrap.TokenMinter") as minter_class,
            patch("eksboot.bootstrap.assemble") as assemble,
        ):
            fetcher_class.return_value.fetch.return_value = sample_descriptor
            minter_class.return_value.mint.return_value = sample_token
            manager.attach_mock(fetcher_class.return_value.fetch, "fetch")
            manager.attach_mock(minter_class.return_value.mint, "mint")
            manager.attach_mock(assemble, "assemble")
            yield manager

    def test_steps_run_in_order(
        self,
        steps: Mock,
        sample_descriptor: ClusterDescriptor,
        sample_token: BearerToken,
    ) -> None:
        """Test describe, then mint, then assemble."""
        config = BootstrapConfig(cluster_name="demo", role_arn=ROLE, region="us-west-2")

        bootstrap(config, session=MagicMock())

        assert [c[0] for c in steps.mock_calls] == ["fetch", "mint", "assemble"]
        steps.fetch.assert_called_once_with("demo", "us-west-2", ROLE)
        steps.mint.assert_called_once_with("demo", sample_descriptor.authorized_role)
        steps.assemble.assert_called_once_with(sample_descriptor, sample_token)

    def test_describe_failure_short_circuits(self, steps: Mock, config: BootstrapConfig) -> None:
        """Test no token is minted for a cluster that could not be described."""
        steps.fetch.side_effect = ClusterNotFoundError("EKS cluster not found: demo in us-west-2")

        with pytest.raises(ClusterNotFoundError):
            bootstrap(config, session=MagicMock())

        steps.mint.assert_not_called()
        steps.assemble.assert_not_called()

    def test_signing_failure_short_circuits(self, steps: Mock, config: BootstrapConfig) -> None:
        """Test no client config is assembled without a token."""
        steps.mint.side_effect = SigningError("No AWS credentials available for signing")

        with pytest.raises(SigningError) as exc_info:
            bootstrap(config, session=MagicMock())

        assert exc_info.value.step == "mint_token"
        steps.assemble.assert_not_called()

    def test_assembly_failure_propagates(self, steps: Mock, config: BootstrapConfig) -> None:
        """Test assembly errors reach the caller unchanged."""
        steps.assemble.side_effect = ClientAssemblyError("Refusing to assemble a client")

        with pytest.raises(ClientAssemblyError):
            bootstrap(config, session=MagicMock())

    def test_timeout_is_passed_to_steps(self) -> None:
        """Test the configured timeout reaches the network-facing steps."""
        config = BootstrapConfig(cluster_name="demo", region="eu-west-1", timeout_seconds=2)
        session = MagicMock()

        with (
            patch("eksboot.bootstrap.ClusterDescriptorFetcher") as fetcher_class,
            patch("eksboot.bootstrap.TokenMinter") as minter_class,
            patch("eksboot.bootstrap.assemble"),
        ):
            bootstrap(config, session=session)

        fetcher_class.assert_called_once_with(session=session, timeout=2)
        minter_class.assert_called_once_with(session=session, region="eu-west-1", timeout=2)
