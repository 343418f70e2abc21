"""
Core Infrastructure Components
==============================

This module provides the foundational components for Cloud-Search:

- :class:`AWSClient` - Manages the boto3 session and per-region clients
- :class:`RegionResolver` - Turns the region argument into a scan scope
- :class:`Page` - Uniform view over paged list operations
- :class:`KeyTrustCache` - Key metadata cache and trust verdicts
- :class:`BaseRule` - Interface every compliance rule implements
- :class:`ScanDriver` - Runs one rule across the resolved scope
- Exception hierarchy for error handling

Exceptions
----------
CloudSearchError
    Base exception for all Cloud-Search errors.
PreconditionError
    Invalid input or state, raised before or instead of any AWS call.
RegionDiscoveryError
    Region discovery returned no usable region list.
AWSClientError
    Base exception for AWS client errors.
CredentialsError
    Raised when credentials are invalid or missing.
RegionError
    Raised when region is invalid.
ServiceError
    Raised when AWS service access fails.
ScannerError
    Driver misuse, such as starting a driver twice.

Example
-------
>>> from cloud_search.core import AWSClient, RegionResolver
>>>
>>> resolver = RegionResolver(AWSClient(profile="production"))
>>> resolver.resolve("all", is_global_rule=True).regions
('us-east-1',)

See Also
--------
cloud_search.rules : Rule implementations.
cloud_search.reporters : Progress reporting and output.
"""

from cloud_search.core.audit import AuditResult, AuditState
from cloud_search.core.aws_client import AWSClient
from cloud_search.core.base_rule import BaseRule
from cloud_search.core.exceptions import (
    AWSClientError,
    CloudSearchError,
    CredentialsError,
    PreconditionError,
    RegionDiscoveryError,
    RegionError,
    ScannerError,
    ServiceError,
)
from cloud_search.core.key_trust import (
    KeyLookup,
    KeyManager,
    KeyMetadataCacheEntry,
    KeyTrustCache,
    LookupOutcome,
    TrustClass,
)
from cloud_search.core.pager import (
    IteratorPage,
    Page,
    ResponsePage,
    TokenPage,
    first_page,
    paginate,
)
from cloud_search.core.region_resolver import RegionResolver, ScanScope
from cloud_search.core.scan_driver import DriverState, ScanDriver

__all__ = [
    # Client
    "AWSClient",
    # Records
    "AuditResult",
    "AuditState",
    # Regions
    "RegionResolver",
    "ScanScope",
    # Paging
    "IteratorPage",
    "Page",
    "ResponsePage",
    "TokenPage",
    "first_page",
    "paginate",
    # Keys
    "KeyLookup",
    "KeyManager",
    "KeyMetadataCacheEntry",
    "KeyTrustCache",
    "LookupOutcome",
    "TrustClass",
    # Rules
    "BaseRule",
    "DriverState",
    "ScanDriver",
    # Exceptions - Base
    "CloudSearchError",
    # Exceptions - Preconditions
    "PreconditionError",
    "RegionDiscoveryError",
    # Exceptions - AWS Client
    "AWSClientError",
    "CredentialsError",
    "RegionError",
    "ServiceError",
    # Exceptions - Driver
    "ScannerError",
]
