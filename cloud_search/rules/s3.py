"""
S3 Rules
========

Classes
-------
BucketEncryption
    Buckets must have default encryption of the requested type.

Notes
-----
Bucket listing is global. With ``--region all`` the rule runs once
against the partition's home region and its records are labelled
``global``. Buckets still live in a region of their own: a KMS key id
that is not an ARN is looked up in the bucket's region, as reported by
GetBucketLocation.

Key type handling
-----------------
provider
    Any default encryption (``AES256``, ``aws:kms`` or ``aws:kms:dsse``)
    is OK.
customer
    ``AES256``, and ``aws:kms`` / ``aws:kms:dsse`` without a key id (the
    AWS managed ``aws/s3`` key), are a WARNING: encrypted, but not with a
    customer key. A KMS key id gets the key trust verdict. A
    ``KMSMasterKeyID`` rule evaluated after another rule wins.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError

from cloud_search.core.audit import AuditResult, AuditState
from cloud_search.core.base_rule import BaseRule
from cloud_search.core.key_trust import TrustClass
from cloud_search.core.pager import paginate

# Module logger
logger = logging.getLogger(__name__)

NO_ENCRYPTION_CODE = "ServerSideEncryptionConfigurationNotFoundError"
ENCRYPTED_ALGORITHMS = ("AES256", "aws:kms", "aws:kms:dsse")

# GetBucketLocation reports legacy names for the two oldest regions
LEGACY_LOCATIONS = {"": "us-east-1", "EU": "eu-west-1"}


class BucketEncryption(BaseRule):
    """S3 buckets must be encrypted. The resource id is the bucket name."""

    rule = "BucketEncryption"
    service = "s3"
    is_global = True
    needs_key_type = True
    description = (
        "S3 buckets must be encrypted\n"
        "  OK      - Bucket is encrypted\n"
        "  UNKNOWN - Unable to determine bucket encryption\n"
        "  WARNING - Bucket encrypted but not with the specified key type\n"
        "  FAIL    - Bucket is not encrypted"
    )

    def bucket_region(self, bucket: str, region: str) -> str:
        """Region the bucket lives in, asked through the scan region's client."""
        s3 = self.client("s3", region)
        location = s3.get_bucket_location(Bucket=bucket).get("LocationConstraint") or ""
        return LEGACY_LOCATIONS.get(location, location)

    def _provider_state(self, rules: List[Dict[str, Any]]) -> AuditState:
        for rule in rules:
            default = rule.get("ApplyServerSideEncryptionByDefault") or {}
            if default.get("SSEAlgorithm") in ENCRYPTED_ALGORITHMS:
                return AuditState.OK
        return AuditState.FAIL

    def _customer_state(self, bucket: str, rules: List[Dict[str, Any]], region: str) -> AuditState:
        state = AuditState.FAIL
        key_region = None
        for rule in rules:
            default = rule.get("ApplyServerSideEncryptionByDefault") or {}
            key_id = default.get("KMSMasterKeyID")
            if key_id:
                if key_region is None:
                    key_region = self.bucket_region(bucket, region)
                state = self.is_key_trusted(key_id, key_region)
            elif default.get("SSEAlgorithm") in ENCRYPTED_ALGORITHMS:
                state = self.provider_managed_state()
        return state

    def audit(self, bucket: str, region: str) -> AuditResult:
        s3 = self.client("s3", region)
        audit = self.new_audit(bucket, region, name=bucket)

        try:
            response = s3.get_bucket_encryption(Bucket=bucket)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == NO_ENCRYPTION_CODE:
                audit.state = AuditState.FAIL
                return audit
            raise

        config = response.get("ServerSideEncryptionConfiguration")
        if not config:
            audit.state = AuditState.FAIL
            return audit

        rules = config.get("Rules") or []
        if self.key_type is TrustClass.CUSTOMER:
            audit.state = self._customer_state(bucket, rules, region)
        else:
            audit.state = self._provider_state(rules)
        return audit

    def scan(self, region: str, resource_id: Optional[str] = None) -> List[AuditResult]:
        if resource_id:
            return [self.audit(resource_id, region)]

        s3 = self.client("s3", region)
        audits = []
        for bucket in paginate(s3, "list_buckets", "Buckets"):
            name = self.require(bucket.get("Name"), "bucket must have a name")
            audits.append(self.audit(name, region))
        return audits
