"""
Region Resolver Module
======================

Turns the user's region argument and a rule's global flag into the
ordered list of regions a scan visits.

Resolution rules
----------------
1. A single-resource request needs a concrete region. ``"all"`` is a
   precondition failure, raised before any AWS call.
2. A concrete region is scanned on its own, global rule or not.
3. ``"all"`` with a global rule scans the partition's home region once;
   audits are labelled ``"global"``.
4. ``"all"`` otherwise scans every region EC2 DescribeRegions returns,
   queried once against the partition's home region, in the returned
   order.

Classes
-------
ScanScope
    Resolved execution plan for one invocation.
RegionResolver
    Builds a ScanScope.

Example
-------
>>> from cloud_search.core.region_resolver import RegionResolver
>>>
>>> resolver = RegionResolver(aws_client)
>>> scope = resolver.resolve("all", is_global_rule=False)
>>> scope.regions
('us-east-1', 'us-west-2', ...)

See Also
--------
ScanDriver : Walks the resolved regions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from cloud_search.core.aws_client import AWSClient
from cloud_search.core.exceptions import PreconditionError, RegionDiscoveryError

# Module logger
logger = logging.getLogger(__name__)

ALL_REGIONS = "all"
GLOBAL_LABEL = "global"
DEFAULT_PARTITION = "pub"

# Home region per partition: used for discovery and for global rules
PARTITION_HOME_REGIONS: Dict[str, str] = {
    "pub": "us-east-1",
    "gov": "us-gov-west-1",
}


@dataclass(frozen=True)
class ScanScope:
    """
    Resolved execution plan for one invocation.

    Parameters
    ----------
    regions : tuple of str
        Regions to scan, in scan order.
    single_resource_id : str, optional
        Set when only one resource is audited.
    is_global_rule : bool
        Copied from the rule.
    global_shortcut : bool
        True when ``"all"`` collapsed to the home region of a global rule.

    Raises
    ------
    PreconditionError
        If a single resource is requested with anything but exactly one
        concrete region.
    """

    regions: Tuple[str, ...]
    single_resource_id: Optional[str] = None
    is_global_rule: bool = False
    global_shortcut: bool = False

    def __post_init__(self) -> None:
        if self.single_resource_id is not None:
            if len(self.regions) != 1 or self.regions[0] == ALL_REGIONS:
                raise PreconditionError(
                    "a single resource scan requires exactly one concrete region",
                    details={
                        "resource_id": self.single_resource_id,
                        "regions": list(self.regions),
                    },
                )

    def display_region(self, region: str) -> str:
        """Region label for audit records."""
        return GLOBAL_LABEL if self.global_shortcut else region


class RegionResolver:
    """
    Resolves the regions a scan will visit.

    Parameters
    ----------
    aws_client : AWSClient
        Client factory used for region discovery.
    partition : str, default="pub"
        ``"pub"`` (commercial) or ``"gov"`` (GovCloud).

    Raises
    ------
    PreconditionError
        If the partition is unknown.

    Examples
    --------
    >>> resolver = RegionResolver(AWSClient(), partition="gov")
    >>> resolver.home_region
    'us-gov-west-1'
    """

    def __init__(
        self,
        aws_client: AWSClient,
        partition: str = DEFAULT_PARTITION,
    ) -> None:
        if partition not in PARTITION_HOME_REGIONS:
            raise PreconditionError(
                f"unknown partition {partition!r}",
                details={"supported": sorted(PARTITION_HOME_REGIONS)},
            )
        self.aws_client = aws_client
        self.partition = partition
        self.home_region = PARTITION_HOME_REGIONS[partition]

    def discover_regions(self) -> List[str]:
        """
        List the regions enabled for the account.

        Returns
        -------
        list of str
            Region names, in the order EC2 returned them.

        Raises
        ------
        RegionDiscoveryError
            If the response has no region list or an unnamed entry.
        botocore.exceptions.ClientError
            Propagated from DescribeRegions.
        """
        ec2 = self.aws_client.client("ec2", self.home_region)
        response = ec2.describe_regions()

        described = response.get("Regions")
        if described is None:
            raise RegionDiscoveryError(
                "unable to describe regions",
                details={"partition": self.partition},
            )

        regions: List[str] = []
        for entry in described:
            name = entry.get("RegionName")
            if not name:
                raise RegionDiscoveryError(
                    "region does not have a name",
                    details={"entry": entry},
                )
            if name not in regions:
                regions.append(name)

        logger.info("Discovered %d regions in partition %s", len(regions), self.partition)
        return regions

    def resolve(
        self,
        requested_region: str,
        is_global_rule: bool,
        resource_id: Optional[str] = None,
    ) -> ScanScope:
        """
        Build the scope for one invocation.

        Parameters
        ----------
        requested_region : str
            A region name or ``"all"``.
        is_global_rule : bool
            Whether the rule audits a global service.
        resource_id : str, optional
            Identifier of the single resource to audit.

        Returns
        -------
        ScanScope
            The resolved scope.

        Raises
        ------
        PreconditionError
            If ``resource_id`` is given with ``"all"``.
        RegionDiscoveryError
            If discovery returns no usable region list.
        """
        if resource_id is not None:
            if requested_region == ALL_REGIONS:
                raise PreconditionError(
                    "a resource id requires a specific region, not 'all'",
                    details={"resource_id": resource_id},
                )
            return ScanScope(
                regions=(requested_region,),
                single_resource_id=resource_id,
                is_global_rule=is_global_rule,
            )

        if requested_region != ALL_REGIONS:
            return ScanScope(regions=(requested_region,), is_global_rule=is_global_rule)

        if is_global_rule:
            logger.debug("Global rule: scanning %s only", self.home_region)
            return ScanScope(
                regions=(self.home_region,),
                is_global_rule=True,
                global_shortcut=True,
            )

        return ScanScope(regions=tuple(self.discover_regions()), is_global_rule=False)

    def __repr__(self) -> str:
        return f"RegionResolver(partition={self.partition!r}, home_region={self.home_region!r})"
