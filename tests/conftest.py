"""
Pytest configuration and shared fixtures for testing.
"""

import boto3
import pytest
from moto import mock_aws

from cloud_search.core.aws_client import AWSClient
from cloud_search.core.key_trust import KeyTrustCache


@pytest.fixture
def aws_credentials():
    """Mock AWS credentials for moto."""
    import os

    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture
def mock_aws_environment(aws_credentials):
    """Create a mocked AWS environment."""
    with mock_aws():
        yield


@pytest.fixture
def aws_client(mock_aws_environment):
    """Create an AWSClient instance for testing."""
    return AWSClient()


@pytest.fixture
def key_cache(aws_client):
    """Create an empty KeyTrustCache backed by the mocked environment."""
    return KeyTrustCache(aws_client)


@pytest.fixture
def ec2_client(mock_aws_environment):
    """Create a boto3 EC2 client for setting up test resources."""
    return boto3.client("ec2", region_name="us-east-1")


@pytest.fixture
def kms_client(mock_aws_environment):
    """Create a boto3 KMS client for setting up test keys."""
    return boto3.client("kms", region_name="us-east-1")


@pytest.fixture
def sqs_client(mock_aws_environment):
    """Create a boto3 SQS client for setting up test queues."""
    return boto3.client("sqs", region_name="us-east-1")


@pytest.fixture
def sns_client(mock_aws_environment):
    """Create a boto3 SNS client for setting up test topics."""
    return boto3.client("sns", region_name="us-east-1")


@pytest.fixture
def s3_client(mock_aws_environment):
    """Create a boto3 S3 client for setting up test buckets."""
    return boto3.client("s3", region_name="us-east-1")


@pytest.fixture
def cloudtrail_client(mock_aws_environment):
    """Create a boto3 CloudTrail client for setting up test trails."""
    return boto3.client("cloudtrail", region_name="us-east-1")


@pytest.fixture
def customer_key(kms_client):
    """Create a customer managed KMS key and return its metadata."""
    return kms_client.create_key(Description="test key")["KeyMetadata"]


@pytest.fixture
def vpc(ec2_client):
    """Create a VPC for testing."""
    response = ec2_client.create_vpc(CidrBlock="10.0.0.0/16")
    vpc_id = response["Vpc"]["VpcId"]
    return vpc_id


@pytest.fixture
def security_group(ec2_client, vpc):
    """Create a security group for testing."""
    response = ec2_client.create_security_group(
        GroupName="test-sg",
        Description="Test security group",
        VpcId=vpc,
    )
    return response["GroupId"]


@pytest.fixture
def public_security_group(ec2_client, vpc):
    """Create a security group open to the internet on port 22."""
    response = ec2_client.create_security_group(
        GroupName="public-sg",
        Description="Public security group for testing",
        VpcId=vpc,
    )
    group_id = response["GroupId"]
    ec2_client.authorize_security_group_ingress(
        GroupId=group_id,
        IpPermissions=[
            {
                "IpProtocol": "tcp",
                "FromPort": 22,
                "ToPort": 22,
                "IpRanges": [{"CidrIp": "0.0.0.0/0"}],
            }
        ],
    )
    return group_id
