"""
EBS Rules
=========

Classes
-------
VolumeEncrypted
    EBS volumes should be encrypted at rest with a key of the requested
    type.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from cloud_search.core.audit import AuditResult, AuditState
from cloud_search.core.base_rule import BaseRule
from cloud_search.core.pager import paginate

# Module logger
logger = logging.getLogger(__name__)


class VolumeEncrypted(BaseRule):
    """
    EBS volumes should be encrypted at rest.

    The resource id is the volume id.
    """

    rule = "VolumeEncrypted"
    service = "ebs"
    needs_key_type = True
    description = (
        "EBS volumes should be encrypted at rest\n"
        "  OK      - The volume is encrypted with the specified key type\n"
        "  WARNING - The volume is encrypted, but not with the right key type\n"
        "  FAIL    - The volume is not encrypted"
    )

    def audit(self, volume: Dict[str, Any], region: str) -> AuditResult:
        volume_id = self.require(volume.get("VolumeId"), "volume does not have an ID")
        audit = self.new_audit(volume_id, region)

        key_id = volume.get("KmsKeyId")
        if key_id:
            if volume.get("Encrypted") is not True:
                logger.warning("Volume %s has key %s but reports unencrypted", volume_id, key_id)
            audit.state = self.is_key_trusted(key_id, region)
        else:
            audit.state = AuditState.FAIL
        return audit

    def scan(self, region: str, resource_id: Optional[str] = None) -> List[AuditResult]:
        ec2 = self.client("ec2", region)

        params = {"VolumeIds": [resource_id]} if resource_id else {}
        volumes = paginate(ec2, "describe_volumes", "Volumes", **params)

        return [self.audit(volume, region) for volume in volumes]
