"""
Security Group Rules
====================

Classes
-------
PublicPermission
    Security groups must not allow ingress from the whole internet.

Detection Logic
---------------
A group FAILs when any of its ingress permissions, on any port, carries
the IPv4 range ``0.0.0.0/0`` or the IPv6 range ``::/0``. Egress rules are
not inspected.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from cloud_search.core.audit import AuditResult, AuditState
from cloud_search.core.base_rule import BaseRule
from cloud_search.core.pager import paginate

# Module logger
logger = logging.getLogger(__name__)

PUBLIC_IPV4 = "0.0.0.0/0"
PUBLIC_IPV6 = "::/0"


def is_public(permission: Dict[str, Any]) -> bool:
    """True if an ingress permission is open to the internet."""
    for ip_range in permission.get("IpRanges") or []:
        if ip_range.get("CidrIp") == PUBLIC_IPV4:
            return True
    for ip_range in permission.get("Ipv6Ranges") or []:
        if ip_range.get("CidrIpv6") == PUBLIC_IPV6:
            return True
    return False


class PublicPermission(BaseRule):
    """
    Searches security groups for ``0.0.0.0/0`` or ``::/0`` ingress.

    The resource id is the security group id (``sg-xxxxxxxx``). Records
    carry the group name.
    """

    rule = "PublicPermission"
    service = "ec2"
    description = (
        "Searches security groups for 0.0.0.0/0 or ::/0 on any port\n"
        "  OK      - The group does not contain 0.0.0.0/0 or ::/0 ingress permissions\n"
        "  FAIL    - The group allows 0.0.0.0/0 or ::/0 ingress"
    )

    def audit(self, group: Dict[str, Any], region: str) -> AuditResult:
        group_id = self.require(group.get("GroupId"), "security group does not have a group id")
        audit = self.new_audit(group_id, region, name=group.get("GroupName"))

        suspect = any(is_public(p) for p in group.get("IpPermissions") or [])
        audit.state = AuditState.FAIL if suspect else AuditState.OK
        return audit

    def scan(self, region: str, resource_id: Optional[str] = None) -> List[AuditResult]:
        ec2 = self.client("ec2", region)

        params = {"GroupIds": [resource_id]} if resource_id else {}
        groups = paginate(ec2, "describe_security_groups", "SecurityGroups", **params)

        return [self.audit(group, region) for group in groups]
