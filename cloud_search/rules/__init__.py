"""
Compliance Rules
================

Each rule audits one kind of resource and returns one record per
resource. Rules are grouped by service path, which is also how the CLI
exposes them (``cloud-search aws ec2 ebs VolumeEncrypted``).

Available Rules
---------------
=================  ==================  ======  ========
service path       rule                global  key type
=================  ==================  ======  ========
cloudtrail         TrailEncrypted      no      yes
ec2 ebs            VolumeEncrypted     no      yes
ec2 sg             PublicPermission    no      no
kms                KeyRotationEnabled  no      no
s3                 BucketEncryption    yes     yes
sns                TopicEncrypted      no      yes
sqs                QueueEncrypted      no      yes
=================  ==================  ======  ========

Adding New Rules
----------------
1. Create or extend a module in this directory for the service
2. Implement a class extending ``BaseRule`` with ``rule``, ``service``
   and ``scan``
3. Register it in ``REGISTRY`` under its service path

Example
-------
>>> from cloud_search.rules import find_rule
>>>
>>> find_rule(("ec2", "ebs"), "VolumeEncrypted")
<class 'cloud_search.rules.ebs.VolumeEncrypted'>
"""

from typing import Dict, Tuple, Type

from cloud_search.core.base_rule import BaseRule
from cloud_search.core.exceptions import PreconditionError
from cloud_search.rules.cloudtrail import TrailEncrypted
from cloud_search.rules.ebs import VolumeEncrypted
from cloud_search.rules.kms import KeyRotationEnabled
from cloud_search.rules.s3 import BucketEncryption
from cloud_search.rules.sg import PublicPermission
from cloud_search.rules.sns import TopicEncrypted
from cloud_search.rules.sqs import QueueEncrypted

ServicePath = Tuple[str, ...]

REGISTRY: Dict[ServicePath, Dict[str, Type[BaseRule]]] = {
    ("cloudtrail",): {TrailEncrypted.rule: TrailEncrypted},
    ("ec2", "ebs"): {VolumeEncrypted.rule: VolumeEncrypted},
    ("ec2", "sg"): {PublicPermission.rule: PublicPermission},
    ("kms",): {KeyRotationEnabled.rule: KeyRotationEnabled},
    ("s3",): {BucketEncryption.rule: BucketEncryption},
    ("sns",): {TopicEncrypted.rule: TopicEncrypted},
    ("sqs",): {QueueEncrypted.rule: QueueEncrypted},
}


def find_rule(service_path: ServicePath, rule: str) -> Type[BaseRule]:
    """
    Look a rule class up by service path and rule name.

    Raises
    ------
    PreconditionError
        If no such rule is registered.
    """
    rules = REGISTRY.get(tuple(service_path), {})
    if rule not in rules:
        raise PreconditionError(
            f"unknown rule {' '.join(service_path)} {rule}",
            details={"available": sorted(rules)},
        )
    return rules[rule]


__all__ = [
    "BucketEncryption",
    "KeyRotationEnabled",
    "PublicPermission",
    "QueueEncrypted",
    "REGISTRY",
    "TopicEncrypted",
    "TrailEncrypted",
    "VolumeEncrypted",
    "find_rule",
]
