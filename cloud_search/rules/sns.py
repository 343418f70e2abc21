"""
SNS Rules
=========

Classes
-------
TopicEncrypted
    SNS topics must be encrypted with a key of the requested type.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from cloud_search.core.audit import AuditResult, AuditState
from cloud_search.core.base_rule import BaseRule
from cloud_search.core.pager import paginate

# Module logger
logger = logging.getLogger(__name__)


class TopicEncrypted(BaseRule):
    """
    SNS topics must be encrypted.

    A topic whose attributes cannot be read stays UNKNOWN. The resource
    id is the topic ARN.
    """

    rule = "TopicEncrypted"
    service = "sns"
    needs_key_type = True
    description = (
        "SNS topics must be encrypted\n"
        "  OK      - Topic is encrypted with the specified key type\n"
        "  UNKNOWN - Unable to determine topic encryption\n"
        "  WARNING - Topic encrypted but not with the specified key type\n"
        "  FAIL    - Topic is not encrypted"
    )

    def audit(self, topic_arn: str, region: str) -> AuditResult:
        sns = self.client("sns", region)
        response = sns.get_topic_attributes(TopicArn=topic_arn)

        audit = self.new_audit(topic_arn, region, name=topic_arn)

        attributes = response.get("Attributes")
        if attributes is None:
            return audit

        key_id = attributes.get("KmsMasterKeyId")
        if key_id:
            audit.state = self.is_key_trusted(key_id, region)
        else:
            audit.state = AuditState.FAIL
        return audit

    def scan(self, region: str, resource_id: Optional[str] = None) -> List[AuditResult]:
        if resource_id:
            return [self.audit(resource_id, region)]

        sns = self.client("sns", region)
        audits = []
        for topic in paginate(sns, "list_topics", "Topics"):
            topic_arn = self.require(topic.get("TopicArn"), "topic does not have an arn")
            audits.append(self.audit(topic_arn, region))
        return audits
