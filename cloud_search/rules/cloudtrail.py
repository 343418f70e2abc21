"""
CloudTrail Rules
================

Classes
-------
TrailEncrypted
    Trails must be configured for encryption with a key of the requested
    type.

Notes
-----
ListTrails returns every trail visible from a region, including
multi-region trails created elsewhere. Only trails whose home region is
the scanned region are audited, so each trail is reported once.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from cloud_search.core.audit import AuditResult, AuditState
from cloud_search.core.base_rule import BaseRule
from cloud_search.core.pager import paginate

# Module logger
logger = logging.getLogger(__name__)


class TrailEncrypted(BaseRule):
    """
    A CloudTrail trail must be configured for encryption.

    The resource id is the trail name or ARN.
    """

    rule = "TrailEncrypted"
    service = "cloudtrail"
    needs_key_type = True
    description = (
        "A cloudtrail trail must be configured for encryption\n"
        "  OK      - The trail is encrypted\n"
        "  WARNING - The trail is encrypted but with the wrong key type\n"
        "  UNKNOWN - Unable to determine trail encryption\n"
        "  FAIL    - The trail is not encrypted"
    )

    def audit(self, trail: str, region: str) -> AuditResult:
        cloudtrail = self.client("cloudtrail", region)
        response = cloudtrail.get_trail(Name=trail)

        audit = self.new_audit(trail, region)

        details = response.get("Trail")
        if details is None:
            return audit

        key_id = details.get("KmsKeyId")
        if key_id:
            audit.state = self.is_key_trusted(key_id, region)
        else:
            audit.state = AuditState.FAIL
        return audit

    def scan(self, region: str, resource_id: Optional[str] = None) -> List[AuditResult]:
        if resource_id:
            return [self.audit(resource_id, region)]

        cloudtrail = self.client("cloudtrail", region)
        audits = []
        for trail in paginate(cloudtrail, "list_trails", "Trails"):
            if trail.get("HomeRegion") != region:
                continue
            trail_arn = self.require(trail.get("TrailARN"), "trail does not have an ARN")
            audits.append(self.audit(trail_arn, region))
        return audits
