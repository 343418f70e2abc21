"""
SQS Rules
=========

Classes
-------
QueueEncrypted
    SQS queues must be encrypted with a key of the requested type.

Notes
-----
A queue is encrypted either with a KMS key (``KmsMasterKeyId``) or with
SQS owned keys (``SqsManagedSseEnabled``, SSE-SQS). SSE-SQS counts as
provider managed encryption.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from cloud_search.core.audit import AuditResult, AuditState
from cloud_search.core.base_rule import BaseRule
from cloud_search.core.pager import paginate

# Module logger
logger = logging.getLogger(__name__)


class QueueEncrypted(BaseRule):
    """
    SQS queues must be encrypted.

    The resource id is the queue URL.
    """

    rule = "QueueEncrypted"
    service = "sqs"
    needs_key_type = True
    description = (
        "SQS queues must be encrypted\n"
        "  OK      - Queue is encrypted with the specified key type\n"
        "  WARNING - Queue encrypted but not with the specified key type\n"
        "  FAIL    - Queue is not encrypted"
    )

    def audit(self, queue_url: str, region: str) -> AuditResult:
        sqs = self.client("sqs", region)
        response = sqs.get_queue_attributes(
            QueueUrl=queue_url,
            AttributeNames=["KmsMasterKeyId", "SqsManagedSseEnabled"],
        )

        audit = self.new_audit(queue_url, region, name=queue_url)

        # No attributes at all means no encryption was set
        attributes = response.get("Attributes") or {}
        key_id = attributes.get("KmsMasterKeyId")
        if key_id:
            audit.state = self.is_key_trusted(key_id, region)
        elif str(attributes.get("SqsManagedSseEnabled", "")).lower() == "true":
            audit.state = self.provider_managed_state()
        else:
            audit.state = AuditState.FAIL
        return audit

    def scan(self, region: str, resource_id: Optional[str] = None) -> List[AuditResult]:
        if resource_id:
            return [self.audit(resource_id, region)]

        sqs = self.client("sqs", region)
        queue_urls = paginate(sqs, "list_queues", "QueueUrls")
        logger.debug("Found %d queue(s) in %s", len(queue_urls), region)
        return [self.audit(url, region) for url in queue_urls]
