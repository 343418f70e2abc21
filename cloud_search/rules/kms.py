"""
KMS Rules
=========

Classes
-------
KeyRotationEnabled
    Customer managed keys should have yearly rotation enabled.

Notes
-----
Keys managed by AWS cannot be rotated by the account owner and are not
audited at all: they produce no record.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from cloud_search.core.audit import AuditResult, AuditState
from cloud_search.core.base_rule import BaseRule
from cloud_search.core.key_trust import KeyManager
from cloud_search.core.pager import paginate

# Module logger
logger = logging.getLogger(__name__)


class KeyRotationEnabled(BaseRule):
    """Customer managed keys should have yearly rotation enabled."""

    rule = "KeyRotationEnabled"
    service = "kms"
    description = (
        "Customer managed keys (CMKs) should have yearly rotation enabled\n"
        "  OK      - yearly rotation enabled\n"
        "  UNKNOWN - unable to determine if yearly rotation is enabled\n"
        "  FAIL    - yearly rotation is not enabled"
    )

    def audit(self, key_id: str, region: str) -> Optional[AuditResult]:
        """Audit one key; None for keys that are not customer managed."""
        kms = self.client("kms", region)
        metadata = self.require(
            kms.describe_key(KeyId=key_id).get("KeyMetadata"),
            "key does not have metadata",
        )
        if metadata.get("KeyManager") != KeyManager.CUSTOMER.value:
            logger.debug("Skipping %s key %s", metadata.get("KeyManager"), key_id)
            return None

        audit = self.new_audit(key_id, region)

        enabled = kms.get_key_rotation_status(KeyId=key_id).get("KeyRotationEnabled")
        if enabled is True:
            audit.state = AuditState.OK
        elif enabled is False:
            audit.state = AuditState.FAIL
        return audit

    def scan(self, region: str, resource_id: Optional[str] = None) -> List[AuditResult]:
        if resource_id:
            key_ids = [resource_id]
        else:
            kms = self.client("kms", region)
            key_ids = [
                self.require(key.get("KeyArn"), "key missing its key ARN")
                for key in paginate(kms, "list_keys", "Keys")
            ]

        audits = []
        for key_id in key_ids:
            audit = self.audit(key_id, region)
            if audit is not None:
                audits.append(audit)
        return audits
