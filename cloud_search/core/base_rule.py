"""
Base Rule Module
================

Provides the abstract base class every compliance rule implements.

A rule knows which service it audits, whether that service is global,
and how to turn the resources of one region into audit records. It does
not know about region resolution, progress reporting or output; the
:class:`~cloud_search.core.scan_driver.ScanDriver` composes those around
it.

Classes
-------
BaseRule
    Abstract base class for compliance rules.

Example
-------
>>> from cloud_search.core.base_rule import BaseRule
>>> from cloud_search.core.pager import paginate
>>>
>>> class QueueExists(BaseRule):
...     rule = "QueueExists"
...     service = "sqs"
...
...     def scan(self, region, resource_id=None):
...         sqs = self.client("sqs", region)
...         urls = paginate(sqs, "list_queues", "QueueUrls")
...         audits = []
...         for url in urls:
...             audit = self.new_audit(url, region)
...             audit.state = AuditState.OK
...             audits.append(audit)
...         return audits

See Also
--------
ScanDriver : Runs a rule across the resolved regions.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional, TypeVar, Union

from cloud_search.core.audit import AuditResult, AuditState
from cloud_search.core.aws_client import AWSClient
from cloud_search.core.exceptions import PreconditionError
from cloud_search.core.key_trust import KeyTrustCache, TrustClass

# Module logger
logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseRule(ABC):
    """
    Abstract base class for all compliance rules.

    Subclasses set the class attributes and implement :meth:`scan`.

    Parameters
    ----------
    aws_client : AWSClient
        Client factory for the invocation.
    key_cache : KeyTrustCache, optional
        Shared key metadata cache. Required by rules that check keys.
    key_type : TrustClass or str, optional
        Requested key trust class (``provider`` / ``customer``).
    profile : str, optional
        Profile name recorded on every audit.

    Attributes
    ----------
    rule : str
        Rule identifier, e.g. ``"QueueEncrypted"``.
    service : str
        Service name recorded on every audit.
    is_global : bool
        True for rules over global services (IAM, S3 bucket listing).
    needs_key_type : bool
        True for rules that verify encryption keys.
    description : str
        What the rule checks and what each state means.

    Raises
    ------
    PreconditionError
        If ``key_type`` is not a trust class.
    """

    rule: str = ""
    service: str = ""
    is_global: bool = False
    needs_key_type: bool = False
    description: str = ""

    def __init__(
        self,
        aws_client: AWSClient,
        key_cache: Optional[KeyTrustCache] = None,
        key_type: Optional[Union[str, TrustClass]] = None,
        profile: Optional[str] = None,
    ) -> None:
        self.aws_client = aws_client
        self.key_cache = key_cache
        self.key_type = TrustClass.parse(key_type) if key_type is not None else None
        self.profile = profile
        logger.debug("Initialized rule %s (service=%s)", self.rule, self.service)

    @abstractmethod
    def scan(self, region: str, resource_id: Optional[str] = None) -> List[AuditResult]:
        """
        Audit the resources of one region.

        Parameters
        ----------
        region : str
            Region to scan.
        resource_id : str, optional
            Audit only this resource.

        Returns
        -------
        list of AuditResult
            One record per audited resource, in listing order.
        """

    # =========================================================================
    # Helpers for implementations
    # =========================================================================

    def client(self, service_name: str, region: str) -> Any:
        """Boto3 client for ``service_name`` in ``region``."""
        return self.aws_client.client(service_name, region)

    def new_audit(
        self,
        physical_id: str,
        region: str,
        name: Optional[str] = None,
    ) -> AuditResult:
        """Create the UNKNOWN audit record for one resource."""
        return AuditResult(
            physical_id=physical_id,
            service=self.service,
            rule=self.rule,
            region=region,
            state=AuditState.UNKNOWN,
            profile=self.profile,
            name=name,
        )

    def is_key_trusted(self, key_identifier: str, region: str) -> AuditState:
        """
        Verdict for a key under the rule's requested key type.

        Raises
        ------
        PreconditionError
            If the rule has no key type or no key cache.
        """
        if self.key_type is None:
            raise PreconditionError("key type is required", details={"rule": self.rule})
        if self.key_cache is None:
            raise PreconditionError("key cache is required", details={"rule": self.rule})
        return self.key_cache.is_trusted(key_identifier, self.key_type, region)

    def provider_managed_state(self) -> AuditState:
        """
        Verdict for encryption whose key is owned by the provider.

        OK when provider keys are acceptable, WARNING when the rule asks for
        a customer key.
        """
        if self.key_type is TrustClass.CUSTOMER:
            return AuditState.WARNING
        return AuditState.OK

    def require(self, value: Optional[T], message: str) -> T:
        """
        Return ``value``, or raise if a resource came back without it.

        Example
        -------
        >>> volume_id = self.require(volume.get("VolumeId"), "volume does not have an ID")
        """
        if value is None or value == "":
            raise PreconditionError(message, details={"rule": self.rule})
        return value

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"{self.__class__.__name__}("
            f"rule='{self.rule}', service='{self.service}', "
            f"is_global={self.is_global})"
        )
