"""
Tests for the compliance rules.
"""

import boto3
import pytest

from cloud_search.core.audit import AuditState
from cloud_search.core.exceptions import PreconditionError
from cloud_search.core.key_trust import KeyTrustCache
from cloud_search.core.scan_driver import ScanDriver
from cloud_search.rules import REGISTRY, find_rule
from cloud_search.rules.cloudtrail import TrailEncrypted
from cloud_search.rules.ebs import VolumeEncrypted
from cloud_search.rules.kms import KeyRotationEnabled
from cloud_search.rules.s3 import BucketEncryption
from cloud_search.rules.sg import PublicPermission, is_public
from cloud_search.rules.sns import TopicEncrypted
from cloud_search.rules.sqs import QueueEncrypted
from fakes import FakeAWSClient, FakeKMS, FakeS3, key_metadata, sse_rule


def make_rule(rule_class, aws_client, key_type=None):
    return rule_class(aws_client, key_cache=KeyTrustCache(aws_client), key_type=key_type)


class TestRegistry:
    """Tests for the rule registry."""

    def test_lookup(self):
        """Rules are found by service path and name."""
        assert find_rule(("ec2", "ebs"), "VolumeEncrypted") is VolumeEncrypted
        assert find_rule(("s3",), "BucketEncryption") is BucketEncryption

    def test_unknown_rule(self):
        """Unknown rules are a precondition failure."""
        with pytest.raises(PreconditionError):
            find_rule(("s3",), "VolumeEncrypted")

    def test_registered_names_match(self):
        """Every rule is registered under its own name."""
        for rules in REGISTRY.values():
            for name, rule_class in rules.items():
                assert rule_class.rule == name

    def test_only_s3_is_global(self):
        """Bucket listing is the only global rule."""
        global_rules = [
            rule_class.rule
            for rules in REGISTRY.values()
            for rule_class in rules.values()
            if rule_class.is_global
        ]
        assert global_rules == ["BucketEncryption"]


class TestQueueEncrypted:
    """Tests for QueueEncrypted."""

    def test_unencrypted_queue_fails(self, aws_client, sqs_client):
        """Queues without any encryption fail."""
        sqs_client.create_queue(QueueName="plain", Attributes={"SqsManagedSseEnabled": "false"})

        audits = make_rule(QueueEncrypted, aws_client, "provider").scan("us-east-1")

        assert [a.state for a in audits] == [AuditState.FAIL]
        assert audits[0].name == audits[0].physical_id

    def test_customer_key(self, aws_client, sqs_client, customer_key):
        """Queues with a customer key pass a customer check."""
        url = sqs_client.create_queue(
            QueueName="orders",
            Attributes={"KmsMasterKeyId": customer_key["KeyId"]},
        )["QueueUrl"]

        audits = make_rule(QueueEncrypted, aws_client, "customer").scan("us-east-1", url)

        assert [(a.physical_id, a.state) for a in audits] == [(url, AuditState.OK)]

    @pytest.mark.parametrize(
        "key_type, expected",
        [("provider", AuditState.OK), ("customer", AuditState.WARNING)],
    )
    def test_sqs_managed_encryption(self, aws_client, sqs_client, key_type, expected):
        """SSE-SQS queues count as encrypted with a provider key."""
        url = sqs_client.create_queue(
            QueueName="managed",
            Attributes={"SqsManagedSseEnabled": "true"},
        )["QueueUrl"]

        driver = ScanDriver(
            QueueEncrypted, region="us-east-1", key_type=key_type, aws_client=aws_client
        )

        assert [(a.physical_id, a.state) for a in driver.start()] == [(url, expected)]

    def test_no_queues(self, aws_client):
        """No queues, no audits."""
        assert make_rule(QueueEncrypted, aws_client, "provider").scan("us-east-1") == []


class TestTopicEncrypted:
    """Tests for TopicEncrypted."""

    def test_unencrypted_topic_fails(self, aws_client, sns_client):
        """Topics without a key fail."""
        arn = sns_client.create_topic(Name="plain")["TopicArn"]

        audits = make_rule(TopicEncrypted, aws_client, "provider").scan("us-east-1")

        assert [(a.physical_id, a.state) for a in audits] == [(arn, AuditState.FAIL)]

    def test_encrypted_topic(self, aws_client, sns_client, customer_key):
        """Topics encrypted with a customer key pass."""
        arn = sns_client.create_topic(
            Name="events",
            Attributes={"KmsMasterKeyId": customer_key["Arn"]},
        )["TopicArn"]

        audits = make_rule(TopicEncrypted, aws_client, "cmk").scan("us-east-1", arn)

        assert [a.state for a in audits] == [AuditState.OK]

    def test_missing_attributes_unknown(self):
        """A topic whose attributes cannot be read stays UNKNOWN."""

        class NoAttributesSNS:
            def get_topic_attributes(self, TopicArn):
                return {}

        aws_client = FakeAWSClient(sns=NoAttributesSNS())
        audits = make_rule(TopicEncrypted, aws_client, "provider").scan("us-east-1", "arn:t")

        assert [a.state for a in audits] == [AuditState.UNKNOWN]


class TestVolumeEncrypted:
    """Tests for VolumeEncrypted."""

    def test_volumes(self, aws_client, ec2_client, customer_key):
        """Encrypted volumes get the key verdict, plain ones fail."""
        plain = ec2_client.create_volume(Size=8, AvailabilityZone="us-east-1a")["VolumeId"]
        encrypted = ec2_client.create_volume(
            Size=8,
            AvailabilityZone="us-east-1a",
            Encrypted=True,
            KmsKeyId=customer_key["Arn"],
        )["VolumeId"]

        audits = make_rule(VolumeEncrypted, aws_client, "customer").scan("us-east-1")
        states = {a.physical_id: a.state for a in audits}

        assert states[plain] is AuditState.FAIL
        assert states[encrypted] is AuditState.OK

    def test_single_volume(self, aws_client, ec2_client):
        """A volume id limits the scan to that volume."""
        ec2_client.create_volume(Size=8, AvailabilityZone="us-east-1a")
        target = ec2_client.create_volume(Size=8, AvailabilityZone="us-east-1a")["VolumeId"]

        audits = make_rule(VolumeEncrypted, aws_client, "provider").scan("us-east-1", target)

        assert [a.physical_id for a in audits] == [target]

    def test_volume_without_id(self):
        """A listed volume without an id is a precondition failure."""

        class BrokenEC2:
            def can_paginate(self, operation):
                return False

            def describe_volumes(self, **kwargs):
                return {"Volumes": [{"KmsKeyId": "k"}]}

        rule = make_rule(VolumeEncrypted, FakeAWSClient(ec2=BrokenEC2()), "provider")
        with pytest.raises(PreconditionError, match="volume does not have an ID"):
            rule.scan("us-east-1")


class TestPublicPermission:
    """Tests for PublicPermission."""

    def test_public_group_fails(self, aws_client, public_security_group):
        """Groups open to 0.0.0.0/0 fail and carry their name."""
        audits = make_rule(PublicPermission, aws_client).scan("us-east-1", public_security_group)

        assert [(a.state, a.name) for a in audits] == [(AuditState.FAIL, "public-sg")]

    def test_private_group_ok(self, aws_client, security_group):
        """Groups without public ingress pass."""
        audits = make_rule(PublicPermission, aws_client).scan("us-east-1", security_group)

        assert [(a.state, a.name) for a in audits] == [(AuditState.OK, "test-sg")]

    def test_scan_all_groups(self, aws_client, security_group, public_security_group):
        """Scanning a region audits every group in it."""
        audits = make_rule(PublicPermission, aws_client).scan("us-east-1")
        states = {a.physical_id: a.state for a in audits}

        assert states[public_security_group] is AuditState.FAIL
        assert states[security_group] is AuditState.OK

    @pytest.mark.parametrize(
        "permission, expected",
        [
            ({"IpRanges": [{"CidrIp": "0.0.0.0/0"}]}, True),
            ({"Ipv6Ranges": [{"CidrIpv6": "::/0"}]}, True),
            ({"IpRanges": [{"CidrIp": "10.0.0.0/8"}]}, False),
            ({"UserIdGroupPairs": [{"GroupId": "sg-1"}]}, False),
            ({}, False),
        ],
    )
    def test_is_public(self, permission, expected):
        """Only the all-addresses ranges count as public."""
        assert is_public(permission) is expected


class TestKeyRotationEnabled:
    """Tests for KeyRotationEnabled."""

    def test_rotation_states(self, aws_client, kms_client):
        """Keys with rotation pass, keys without fail."""
        rotated = kms_client.create_key()["KeyMetadata"]["Arn"]
        kms_client.enable_key_rotation(KeyId=rotated)
        stale = kms_client.create_key()["KeyMetadata"]["Arn"]

        audits = make_rule(KeyRotationEnabled, aws_client).scan("us-east-1")
        states = {a.physical_id: a.state for a in audits}

        assert states == {rotated: AuditState.OK, stale: AuditState.FAIL}

    def test_provider_keys_skipped(self):
        """Keys managed by AWS produce no record."""

        class ProviderKMS(FakeKMS):
            def get_key_rotation_status(self, KeyId):
                raise AssertionError("provider keys are not checked")

        kms = ProviderKMS({"k": key_metadata("k", manager="AWS")})
        rule = make_rule(KeyRotationEnabled, FakeAWSClient(kms=kms))

        assert rule.scan("us-east-1", "k") == []


class TestBucketEncryption:
    """Tests for BucketEncryption."""

    @staticmethod
    def encrypt(s3_client, bucket, algorithm, key_id=None):
        default = {"SSEAlgorithm": algorithm}
        if key_id:
            default["KMSMasterKeyID"] = key_id
        s3_client.put_bucket_encryption(
            Bucket=bucket,
            ServerSideEncryptionConfiguration={
                "Rules": [{"ApplyServerSideEncryptionByDefault": default}]
            },
        )

    def test_aes_bucket(self, aws_client, s3_client):
        """AES256 passes a provider check and warns under a customer check."""
        s3_client.create_bucket(Bucket="aes-bucket")
        self.encrypt(s3_client, "aes-bucket", "AES256")

        provider = make_rule(BucketEncryption, aws_client, "provider")
        customer = make_rule(BucketEncryption, aws_client, "customer")

        assert provider.scan("us-east-1", "aes-bucket")[0].state is AuditState.OK
        assert customer.scan("us-east-1", "aes-bucket")[0].state is AuditState.WARNING

    def test_customer_key_bucket(self, aws_client, s3_client, customer_key):
        """A customer KMS key passes a customer check."""
        s3_client.create_bucket(Bucket="kms-bucket")
        self.encrypt(s3_client, "kms-bucket", "aws:kms", customer_key["Arn"])

        audits = make_rule(BucketEncryption, aws_client, "cmk").scan("us-east-1", "kms-bucket")

        assert [(a.name, a.state) for a in audits] == [("kms-bucket", AuditState.OK)]

    def test_no_encryption_configuration(self, aws_client, s3_client):
        """A bucket reporting no encryption configuration fails."""
        s3_client.create_bucket(Bucket="plain-bucket")
        s3_client.delete_bucket_encryption(Bucket="plain-bucket")

        audits = make_rule(BucketEncryption, aws_client, "provider").scan(
            "us-east-1", "plain-bucket"
        )

        assert audits[0].state is AuditState.FAIL

    def test_driver_labels_global(self, aws_client, s3_client):
        """Scanning all regions runs once and labels the buckets global."""
        for name in ("bucket-a", "bucket-b"):
            s3_client.create_bucket(Bucket=name)
            self.encrypt(s3_client, name, "AES256")

        driver = ScanDriver(BucketEncryption, region="all", aws_client=aws_client)
        audits = driver.start()

        assert sorted(a.physical_id for a in audits) == ["bucket-a", "bucket-b"]
        assert {a.region for a in audits} == {"global"}
        assert {a.state for a in audits} == {AuditState.OK}

    @pytest.fixture
    def eu_bucket(self, mock_aws_environment):
        """A bucket in eu-west-1 and a customer key from the same region."""
        kms = boto3.client("kms", region_name="eu-west-1")
        s3 = boto3.client("s3", region_name="eu-west-1")
        key = kms.create_key(Description="eu key")["KeyMetadata"]
        s3.create_bucket(
            Bucket="eu-bucket",
            CreateBucketConfiguration={"LocationConstraint": "eu-west-1"},
        )
        return s3, key

    def test_key_arn_from_another_region(self, aws_client, eu_bucket):
        """A key ARN is resolved in its own region, not the scan region."""
        s3, key = eu_bucket
        self.encrypt(s3, "eu-bucket", "aws:kms", key["Arn"])

        driver = ScanDriver(
            BucketEncryption, region="all", key_type="customer", aws_client=aws_client
        )
        audits = driver.start()

        assert [(a.physical_id, a.region, a.state) for a in audits] == [
            ("eu-bucket", "global", AuditState.OK)
        ]

    def test_key_id_resolved_in_bucket_region(self, aws_client, eu_bucket):
        """A bare key id is resolved in the bucket's region."""
        s3, key = eu_bucket
        self.encrypt(s3, "eu-bucket", "aws:kms", key["KeyId"])

        audits = make_rule(BucketEncryption, aws_client, "customer").scan("us-east-1", "eu-bucket")

        assert [a.state for a in audits] == [AuditState.OK]

    @pytest.mark.parametrize(
        "algorithm, provider_state, customer_state",
        [
            ("AES256", AuditState.OK, AuditState.WARNING),
            ("aws:kms", AuditState.OK, AuditState.WARNING),
            ("aws:kms:dsse", AuditState.OK, AuditState.WARNING),
            ("aws:unknown", AuditState.FAIL, AuditState.FAIL),
        ],
    )
    def test_algorithms_without_customer_key(self, algorithm, provider_state, customer_state):
        """Encryption without a customer key passes provider checks and warns customer ones."""
        aws_client = FakeAWSClient(s3=FakeS3([sse_rule(algorithm)]), kms=FakeKMS())

        provider = make_rule(BucketEncryption, aws_client, "provider")
        customer = make_rule(BucketEncryption, aws_client, "customer")

        assert provider.scan("us-east-1", "bucket")[0].state is provider_state
        assert customer.scan("us-east-1", "bucket")[0].state is customer_state

    @pytest.mark.parametrize("algorithm", ["aws:kms", "aws:kms:dsse"])
    def test_customer_key_algorithms(self, algorithm):
        """A customer key id gets the key verdict for both KMS algorithms."""
        kms = FakeKMS({"cmk-1": key_metadata("cmk-1", region="eu-west-1")})
        s3 = FakeS3([sse_rule(algorithm, "cmk-1")], location="eu-west-1")
        aws_client = FakeAWSClient(s3=s3, kms=kms)

        audits = make_rule(BucketEncryption, aws_client, "customer").scan("us-east-1", "bucket")

        assert audits[0].state is AuditState.OK
        assert ("kms", "eu-west-1") in aws_client.calls

    def test_legacy_eu_location(self):
        """The legacy 'EU' location means eu-west-1."""
        aws_client = FakeAWSClient(s3=FakeS3(location="EU"))
        rule = make_rule(BucketEncryption, aws_client, "customer")

        assert rule.bucket_region("bucket", "us-east-1") == "eu-west-1"


class TestTrailEncrypted:
    """Tests for TrailEncrypted."""

    @pytest.fixture
    def trail_bucket(self, s3_client):
        s3_client.create_bucket(Bucket="trail-logs")
        return "trail-logs"

    def test_unencrypted_trail_fails(self, aws_client, cloudtrail_client, trail_bucket):
        """Trails without a key fail."""
        arn = cloudtrail_client.create_trail(Name="plain", S3BucketName=trail_bucket)["TrailARN"]

        audits = make_rule(TrailEncrypted, aws_client, "provider").scan("us-east-1")

        assert [(a.physical_id, a.state) for a in audits] == [(arn, AuditState.FAIL)]

    def test_trails_from_other_regions_skipped(self, aws_client, cloudtrail_client, trail_bucket):
        """Only trails homed in the scanned region are audited."""
        cloudtrail_client.create_trail(Name="home", S3BucketName=trail_bucket)

        assert make_rule(TrailEncrypted, aws_client, "provider").scan("eu-west-1") == []

    def test_encrypted_trail(self):
        """Trails with a key get the key verdict."""

        class EncryptedTrail:
            def get_trail(self, Name):
                return {"Trail": {"Name": Name, "KmsKeyId": "trail-key"}}

        kms = FakeKMS({"trail-key": key_metadata("trail-key", manager="AWS")})
        aws_client = FakeAWSClient(cloudtrail=EncryptedTrail(), kms=kms)

        audits = make_rule(TrailEncrypted, aws_client, "customer").scan("us-east-1", "main")

        assert [(a.physical_id, a.state) for a in audits] == [("main", AuditState.WARNING)]
