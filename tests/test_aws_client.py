"""
Tests for the AWS Client module.
"""

import pytest
from botocore.exceptions import NoCredentialsError

from cloud_search.core.aws_client import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT, AWSClient
from cloud_search.core.exceptions import AWSClientError, CredentialsError, ServiceError


class TestAWSClient:
    """Tests for AWSClient class."""

    def test_client_initialization(self, mock_aws_environment):
        """Test basic client initialization."""
        client = AWSClient()
        assert client.profile is None
        assert client.max_retries == DEFAULT_MAX_RETRIES
        assert client.timeout == DEFAULT_TIMEOUT

    def test_retry_config(self, mock_aws_environment):
        """Test that retry configuration is applied."""
        client = AWSClient(max_retries=5, timeout=60)
        ec2 = client.client("ec2", "us-east-1")

        assert client.max_retries == 5
        assert ec2.meta.config.retries["max_attempts"] == 5
        assert ec2.meta.config.read_timeout == 60

    def test_client_for_region(self, mock_aws_environment):
        """Clients talk to the requested region."""
        client = AWSClient()
        assert client.client("kms", "eu-west-1").meta.region_name == "eu-west-1"

    def test_clients_cached_per_service_and_region(self, mock_aws_environment):
        """The same service and region reuse one client."""
        client = AWSClient()

        first = client.client("ec2", "us-east-1")

        assert client.client("ec2", "us-east-1") is first
        assert client.client("ec2", "us-west-2") is not first
        assert client.client("kms", "us-east-1") is not first

    def test_get_caller_identity(self, mock_aws_environment):
        """Test resolving the caller identity."""
        identity = AWSClient().get_caller_identity()

        assert len(identity["Account"]) == 12  # AWS account IDs are 12 digits
        assert identity["Arn"].startswith("arn:aws:")


class TestAWSClientErrors:
    """Tests for AWSClient error handling."""

    def test_invalid_profile_error(self, mock_aws_environment, monkeypatch, tmp_path):
        """A profile missing from the shared files is a credentials error."""
        monkeypatch.setenv("AWS_CONFIG_FILE", str(tmp_path / "config"))
        monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(tmp_path / "credentials"))

        client = AWSClient(profile="nonexistent-profile-xyz")

        with pytest.raises(CredentialsError, match="not found"):
            client.client("ec2", "us-east-1")

    def test_missing_credentials(self, mock_aws_environment, monkeypatch):
        """Client creation failing for lack of credentials is a credentials error."""

        def no_credentials(*args, **kwargs):
            raise NoCredentialsError()

        client = AWSClient()
        monkeypatch.setattr(client.session, "client", no_credentials)

        with pytest.raises(CredentialsError):
            client.client("ec2", "us-east-1")

    def test_unknown_service(self, mock_aws_environment):
        """An unknown service name is a service error."""
        with pytest.raises(ServiceError) as excinfo:
            AWSClient().client("not-a-service", "us-east-1")

        assert excinfo.value.service == "not-a-service"
        assert isinstance(excinfo.value, AWSClientError)
