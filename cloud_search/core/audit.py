"""
Audit Result Module
===================

The normalized record a rule emits for every resource it evaluates.

Classes
-------
AuditState
    Verdict of one audit.
AuditResult
    One verdict for one resource under one rule.

Example
-------
>>> audit = AuditResult(
...     physical_id="vol-0abc",
...     service="ebs",
...     rule="VolumeEncrypted",
...     region="us-east-1",
... )
>>> audit.state
<AuditState.UNKNOWN: 'UNKNOWN'>
>>> audit.state = AuditState.OK
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

PROVIDER = "aws"


class AuditState(str, Enum):
    """Verdict of one audit. ``UNKNOWN`` is the initial state."""

    UNKNOWN = "UNKNOWN"
    OK = "OK"
    FAIL = "FAIL"
    WARNING = "WARNING"

    def __str__(self) -> str:
        return self.value


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds, e.g. ``1970-01-01T00:00:00.000Z``."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


@dataclass
class AuditResult:
    """
    One verdict for one resource under one rule.

    Parameters
    ----------
    physical_id : str
        Provider-assigned identifier of the resource.
    service : str
        Owning service name (e.g. 'sqs').
    rule : str
        Rule identifier (e.g. 'QueueEncrypted').
    region : str
        Region the resource was audited in.
    state : AuditState, default=UNKNOWN
        The verdict.
    profile : str, optional
        Credential profile used for the invocation.
    name : str, optional
        Friendly name of the resource, when it has one.
    comment : str, optional
        Diagnostic text explaining the verdict.
    time : str
        ISO-8601 timestamp of audit completion. Defaults to creation time;
        the scan driver restamps each record when it collects it.
    provider : str
        Always ``"aws"``.
    """

    physical_id: str
    service: str
    rule: str
    region: str
    state: AuditState = AuditState.UNKNOWN
    profile: Optional[str] = None
    name: Optional[str] = None
    comment: Optional[str] = None
    time: str = field(default_factory=utc_timestamp)
    provider: str = PROVIDER

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the camelCase record used for JSON output.

        Optional fields that are not set are left out.
        """
        record: Dict[str, Any] = {
            "provider": self.provider,
            "physicalId": self.physical_id,
            "service": self.service,
            "rule": self.rule,
            "region": self.region,
            "state": self.state.value,
            "time": self.time,
        }
        for key, value in (
            ("name", self.name),
            ("profile", self.profile),
            ("comment", self.comment),
        ):
            if value is not None:
                record[key] = value
        return record

    def __repr__(self) -> str:
        return (
            f"AuditResult(rule='{self.rule}', region='{self.region}', "
            f"physical_id='{self.physical_id}', state={self.state.value})"
        )
