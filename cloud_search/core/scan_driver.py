"""
Scan Driver Module
==================

Runs one rule for one invocation: resolves the regions, calls the rule
for each of them in order, collects the audit records, and reports
progress.

State machine
-------------
::

    IDLE -> STARTING -> SCANNING -> SUCCEEDED
                    \\            \\
                     +-> FAILED   +-> FAILED

Any exception, from scope resolution or from a rule, moves the driver to
FAILED, is reported to the progress reporter, and is re-raised unchanged.
The remaining regions are not scanned. Nothing is skipped silently: a
partial result list is never returned as if it were complete.

Classes
-------
DriverState
    Lifecycle state of a driver.
ScanDriver
    Composes region resolution, key trust and a rule.

Example
-------
>>> from cloud_search.core.scan_driver import ScanDriver
>>> from cloud_search.rules.ebs import VolumeEncrypted
>>>
>>> driver = ScanDriver(
...     VolumeEncrypted, region="all", key_type="customer", verbosity="normal"
... )
>>> audits = driver.start()
>>> driver.output("json")

Notes
-----
Regions are scanned sequentially. The key cache and the result list are
owned by this driver alone and need no locking.

Each record is stamped with the time the driver collects it, after the
rule has finished auditing the region.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import List, Optional, Type, Union

from cloud_search.core.audit import AuditResult, utc_timestamp
from cloud_search.core.aws_client import AWSClient
from cloud_search.core.base_rule import BaseRule
from cloud_search.core.exceptions import PreconditionError, ScannerError
from cloud_search.core.key_trust import KeyTrustCache, TrustClass
from cloud_search.core.region_resolver import (
    ALL_REGIONS,
    DEFAULT_PARTITION,
    RegionResolver,
    ScanScope,
)
from cloud_search.reporters import render
from cloud_search.reporters.progress import ProgressReporter, SpinnerReporter

VERBOSITIES = ("silent", "normal")
DEFAULT_VERBOSITY = "silent"

# Module logger
logger = logging.getLogger(__name__)


class DriverState(str, Enum):
    """Lifecycle state of a :class:`ScanDriver`."""

    IDLE = "IDLE"
    STARTING = "STARTING"
    SCANNING = "SCANNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class ScanDriver:
    """
    Drives one rule across the resolved scope.

    Parameters
    ----------
    rule_class : type
        A :class:`BaseRule` subclass; instantiated by the driver.
    region : str, default="all"
        A region name or ``"all"``.
    profile : str, optional
        AWS profile name.
    resource_id : str, optional
        Audit only this resource. Requires a concrete region.
    key_type : TrustClass or str, optional
        Requested key trust class for rules that check keys. Defaults to
        ``provider`` for those rules.
    partition : str, default="pub"
        ``"pub"`` or ``"gov"``.
    verbosity : str, default="silent"
        ``"silent"`` or ``"normal"``. Picks the default reporter and
        whether :meth:`output` renders anything.
    reporter : ProgressReporter, optional
        Receives start / update / succeed / fail. Defaults to a spinner
        for ``normal`` verbosity and to no reporting otherwise.
    aws_client : AWSClient, optional
        Client factory; built from ``profile`` when omitted.
    strict_keys : bool, default=False
        Re-raise transport failures during key lookups.

    Attributes
    ----------
    state : DriverState
        Current lifecycle state.
    audits : list of AuditResult
        Collected records, region then resource order.
    scope : ScanScope or None
        The resolved scope, once resolution succeeded.
    key_cache : KeyTrustCache
        Key metadata cache for this invocation.
    rule : BaseRule
        The rule instance.

    Examples
    --------
    Scan a single resource:

    >>> driver = ScanDriver(
    ...     QueueEncrypted,
    ...     region="us-east-1",
    ...     resource_id="https://sqs.us-east-1.amazonaws.com/111122223333/orders",
    ...     key_type="customer",
    ... )
    >>> [a.state for a in driver.start()]
    [<AuditState.OK: 'OK'>]
    """

    def __init__(
        self,
        rule_class: Type[BaseRule],
        region: str = ALL_REGIONS,
        profile: Optional[str] = None,
        resource_id: Optional[str] = None,
        key_type: Optional[Union[str, TrustClass]] = None,
        partition: str = DEFAULT_PARTITION,
        verbosity: str = DEFAULT_VERBOSITY,
        reporter: Optional[ProgressReporter] = None,
        aws_client: Optional[AWSClient] = None,
        strict_keys: bool = False,
    ) -> None:
        if verbosity not in VERBOSITIES:
            raise PreconditionError(
                f"unsupported verbosity {verbosity!r}",
                details={"verbosities": list(VERBOSITIES)},
            )
        self.region = region
        self.profile = profile
        self.resource_id = resource_id
        self.verbosity = verbosity

        if reporter is None:
            reporter = (
                SpinnerReporter(rule_class.rule)
                if verbosity == "normal"
                else ProgressReporter()
            )
        self.reporter = reporter

        self.aws_client = aws_client or AWSClient(profile=profile)
        self.resolver = RegionResolver(self.aws_client, partition=partition)
        self.key_cache = KeyTrustCache(self.aws_client, strict=strict_keys)

        if key_type is None and rule_class.needs_key_type:
            key_type = TrustClass.PROVIDER
        self.rule = rule_class(
            self.aws_client,
            key_cache=self.key_cache,
            key_type=key_type,
            profile=profile,
        )

        self.state = DriverState.IDLE
        self.scope: Optional[ScanScope] = None
        self.audits: List[AuditResult] = []

        logger.debug("Initialized %r", self)

    def _collect(self, region: str, resource_id: Optional[str] = None) -> None:
        """Run the rule for one region and append its records."""
        self.reporter.update(region)
        logger.info("Scanning %s in %s", self.rule.rule, region)

        label = self.scope.display_region(region)
        results = self.rule.scan(region, resource_id)
        completed = utc_timestamp()
        for audit in results:
            self.audits.append(replace(audit, region=label, time=completed))

        logger.debug("%s: %d audit(s) in %s", self.rule.rule, len(results), region)

    def start(self) -> List[AuditResult]:
        """
        Run the scan.

        Returns
        -------
        list of AuditResult
            The collected records.

        Raises
        ------
        ScannerError
            If the driver has already been started.
        PreconditionError
            For an invalid scope, before any AWS call.
        Exception
            Whatever a rule or an AWS call raised, unchanged.
        """
        if self.state is not DriverState.IDLE:
            raise ScannerError(
                f"driver already started (state {self.state.value})",
                rule=self.rule.rule,
            )

        self.state = DriverState.STARTING
        self.reporter.start()

        try:
            self.scope = self.resolver.resolve(
                self.region,
                self.rule.is_global,
                resource_id=self.resource_id,
            )
            self.state = DriverState.SCANNING

            if self.scope.single_resource_id is not None:
                self._collect(self.scope.regions[0], self.scope.single_resource_id)
            else:
                for region in self.scope.regions:
                    self._collect(region)

        except Exception as e:
            self.state = DriverState.FAILED
            logger.info("%s failed: %s", self.rule.rule, e)
            self.reporter.fail(str(e))
            raise

        self.state = DriverState.SUCCEEDED
        self.reporter.succeed()
        logger.info(
            "%s complete: %d audit(s) across %d region(s)",
            self.rule.rule,
            len(self.audits),
            len(self.scope.regions),
        )
        return self.audits

    def output(self, fmt: str = "terminal", output_path: Optional[str] = None) -> Optional[str]:
        """
        Render the collected records. Silent drivers render nothing.

        Parameters
        ----------
        fmt : str, default="terminal"
            ``"terminal"`` or ``"json"``.
        output_path : str, optional
            JSON only: write to this file instead of stdout.

        Returns
        -------
        str or None
            Path of the written file, if any.
        """
        if self.verbosity == "silent":
            return None
        return render(self.audits, fmt=fmt, output_path=output_path)

    def __repr__(self) -> str:
        return (
            f"ScanDriver(rule='{self.rule.rule}', region='{self.region}', "
            f"resource_id={self.resource_id!r}, state={self.state.value})"
        )
