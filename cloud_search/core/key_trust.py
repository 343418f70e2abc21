"""
Key Trust Module
================

Resolves whether the KMS key protecting a resource satisfies the trust
class the caller asked for.

Key metadata is fetched on first use and kept for the rest of the
invocation. A key can be referred to by its ARN, its key id, or whatever
identifier a resource happened to report (an alias ARN, for example);
all of these resolve to the same cache entry.

Trust matrix
------------
=============  ==================  ========
requested      key found as        verdict
=============  ==================  ========
any            not found           FAIL
provider       any manager         OK
customer       CUSTOMER            OK
customer       PROVIDER (AWS)      WARNING
=============  ==================  ========

The customer path defaults to WARNING rather than FAIL: some encryption
is present, it just is not confirmed to be customer managed.

Classes
-------
TrustClass
    The caller's key ownership requirement.
KeyManager
    Who manages a key.
KeyMetadataCacheEntry
    Cached key metadata.
KeyLookup
    Outcome of a cache lookup.
KeyTrustCache
    The cache itself.

Example
-------
>>> cache = KeyTrustCache(aws_client)
>>> cache.is_trusted("alias/aws/ebs", TrustClass.CUSTOMER, "us-east-1")
<AuditState.WARNING: 'WARNING'>
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Union

from botocore.exceptions import BotoCoreError, ClientError

from cloud_search.core.audit import AuditState
from cloud_search.core.aws_client import AWSClient
from cloud_search.core.exceptions import PreconditionError

# Module logger
logger = logging.getLogger(__name__)


class TrustClass(str, Enum):
    """Key ownership the caller requires."""

    PROVIDER = "provider"
    CUSTOMER = "customer"

    @classmethod
    def parse(cls, value: Union[str, "TrustClass"]) -> "TrustClass":
        """
        Parse a trust class, accepting ``aws`` and ``cmk`` as aliases.

        Raises
        ------
        PreconditionError
            If ``value`` names no trust class.
        """
        if isinstance(value, cls):
            return value
        normalized = TRUST_CLASS_ALIASES.get(str(value).lower())
        if normalized is None:
            raise PreconditionError(
                f"invalid key type {value!r}",
                details={"choices": sorted(TRUST_CLASS_ALIASES)},
            )
        return normalized

    def __str__(self) -> str:
        return self.value


TRUST_CLASS_ALIASES: Dict[str, TrustClass] = {
    "provider": TrustClass.PROVIDER,
    "customer": TrustClass.CUSTOMER,
    "aws": TrustClass.PROVIDER,
    "cmk": TrustClass.CUSTOMER,
}


def key_region(key_identifier: str, default: str) -> str:
    """
    Region a key identifier points at.

    Key and alias ARNs (``arn:aws:kms:eu-west-1:...``) name their region;
    bare key ids and alias names resolve in ``default``.

    Example
    -------
    >>> key_region("arn:aws:kms:eu-west-1:111122223333:key/abc", "us-east-1")
    'eu-west-1'
    """
    parts = key_identifier.split(":")
    if len(parts) >= 6 and parts[0] == "arn" and parts[2] == "kms" and parts[3]:
        return parts[3]
    return default


class KeyManager(str, Enum):
    """Who manages a key, as reported by KMS ``KeyManager``."""

    PROVIDER = "AWS"
    CUSTOMER = "CUSTOMER"


@dataclass(frozen=True)
class KeyMetadataCacheEntry:
    """
    Cached metadata of one key.

    Parameters
    ----------
    given_key_id : str
        The identifier the key was first looked up with.
    key_manager : KeyManager
        Who manages the key.
    key_arn : str, optional
        ARN reported by KMS.
    key_id : str, optional
        Key id reported by KMS.
    """

    given_key_id: str
    key_manager: KeyManager
    key_arn: Optional[str] = None
    key_id: Optional[str] = None


class LookupOutcome(str, Enum):
    FOUND = "FOUND"
    NOT_FOUND = "NOT_FOUND"
    ERROR = "ERROR"


@dataclass(frozen=True)
class KeyLookup:
    """
    Outcome of resolving a key identifier.

    ``NOT_FOUND`` means KMS answered and the key is missing or unreadable
    (missing key, access denied, invalid ARN, ...). ``ERROR`` means the
    request never got an answer (endpoint, timeout, credentials).
    """

    outcome: LookupOutcome
    entry: Optional[KeyMetadataCacheEntry] = None
    error: Optional[Exception] = None

    @property
    def found(self) -> bool:
        return self.outcome is LookupOutcome.FOUND


class KeyTrustCache:
    """
    Invocation-scoped cache of KMS key metadata.

    Parameters
    ----------
    aws_client : AWSClient
        Client factory for KMS calls.
    strict : bool, default=False
        When True, transport failures during a metadata fetch re-raise
        instead of resolving to "not found".

    Attributes
    ----------
    entries : list of KeyMetadataCacheEntry
        Entries in the order they were fetched.
    fetch_count : int
        Number of DescribeKey calls issued.

    Examples
    --------
    >>> cache = KeyTrustCache(AWSClient())
    >>> entry = cache.find_key("arn:aws:kms:us-east-1:111122223333:key/abc", "us-east-1")
    >>> entry.key_manager
    <KeyManager.CUSTOMER: 'CUSTOMER'>

    A second lookup is served from the cache:

    >>> cache.find_key(entry.key_id, "us-east-1") is entry
    True
    """

    def __init__(self, aws_client: AWSClient, strict: bool = False) -> None:
        self.aws_client = aws_client
        self.strict = strict
        self.entries: List[KeyMetadataCacheEntry] = []
        self.fetch_count = 0

        # One index per alias; each keeps the first entry registered
        self._by_arn: Dict[str, KeyMetadataCacheEntry] = {}
        self._by_given_id: Dict[str, KeyMetadataCacheEntry] = {}
        self._by_key_id: Dict[str, KeyMetadataCacheEntry] = {}

    def __len__(self) -> int:
        return len(self.entries)

    def cached(self, key_identifier: str) -> Optional[KeyMetadataCacheEntry]:
        """
        Look a key up in the cache only.

        Tries the ARN index, then the given-id index, then the key-id
        index; the first hit wins.
        """
        for index in (self._by_arn, self._by_given_id, self._by_key_id):
            entry = index.get(key_identifier)
            if entry is not None:
                return entry
        return None

    def add(self, entry: KeyMetadataCacheEntry) -> None:
        """Append an entry and index it under each of its identifiers."""
        self.entries.append(entry)
        if entry.key_arn:
            self._by_arn.setdefault(entry.key_arn, entry)
        self._by_given_id.setdefault(entry.given_key_id, entry)
        if entry.key_id:
            self._by_key_id.setdefault(entry.key_id, entry)

    def _fetch(self, key_identifier: str, region: str) -> KeyLookup:
        """Describe a key in KMS and cache it on success."""
        self.fetch_count += 1
        region = key_region(key_identifier, region)
        try:
            kms = self.aws_client.client("kms", region)
            response = kms.describe_key(KeyId=key_identifier)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.info("Key %s not readable in %s (%s)", key_identifier, region, code)
            return KeyLookup(LookupOutcome.NOT_FOUND, error=e)
        except BotoCoreError as e:
            logger.warning("Key %s lookup failed in %s: %s", key_identifier, region, e)
            return KeyLookup(LookupOutcome.ERROR, error=e)

        metadata = response.get("KeyMetadata") or {}
        manager = (
            KeyManager.CUSTOMER
            if metadata.get("KeyManager") == KeyManager.CUSTOMER.value
            else KeyManager.PROVIDER
        )
        entry = KeyMetadataCacheEntry(
            given_key_id=key_identifier,
            key_manager=manager,
            key_arn=metadata.get("Arn"),
            key_id=metadata.get("KeyId"),
        )
        self.add(entry)
        logger.debug("Cached key %s (%s)", key_identifier, manager.name)
        return KeyLookup(LookupOutcome.FOUND, entry=entry)

    def lookup(self, key_identifier: str, region: str) -> KeyLookup:
        """
        Resolve a key identifier, fetching its metadata on a cache miss.

        Parameters
        ----------
        key_identifier : str
            Key ARN, key id, or any identifier KMS DescribeKey accepts.
        region : str
            Region to query KMS in on a miss, unless the identifier is an
            ARN naming its own region.

        Returns
        -------
        KeyLookup
            FOUND with the entry, or NOT_FOUND / ERROR with the cause.
        """
        entry = self.cached(key_identifier)
        if entry is not None:
            return KeyLookup(LookupOutcome.FOUND, entry=entry)

        fetched = self._fetch(key_identifier, region)
        if not fetched.found:
            return fetched

        entry = self.cached(key_identifier)
        return KeyLookup(LookupOutcome.FOUND, entry=entry or fetched.entry)

    def find_key(self, key_identifier: str, region: str) -> Optional[KeyMetadataCacheEntry]:
        """
        Resolve a key identifier to its cache entry.

        Returns
        -------
        KeyMetadataCacheEntry or None
            None when the key could not be found or read.

        Raises
        ------
        botocore.exceptions.BotoCoreError
            Only in strict mode, for transport failures.
        """
        result = self.lookup(key_identifier, region)
        if result.outcome is LookupOutcome.ERROR and self.strict:
            raise result.error
        return result.entry

    def is_trusted(
        self,
        key_identifier: str,
        requested: Union[str, TrustClass],
        region: str,
    ) -> AuditState:
        """
        Verdict for a key under the requested trust class.

        Parameters
        ----------
        key_identifier : str
            Identifier reported by the audited resource.
        requested : TrustClass or str
            ``provider`` or ``customer`` (``aws`` / ``cmk`` accepted).
        region : str
            Region of the audited resource.

        Returns
        -------
        AuditState
            OK, WARNING or FAIL, per the trust matrix.

        Raises
        ------
        PreconditionError
            If ``requested`` is not a trust class.
        """
        trust_class = TrustClass.parse(requested)

        entry = self.find_key(key_identifier, region)
        if entry is None:
            return AuditState.FAIL

        if trust_class is TrustClass.PROVIDER:
            return AuditState.OK

        if entry.key_manager is KeyManager.CUSTOMER:
            return AuditState.OK
        return AuditState.WARNING

    def __repr__(self) -> str:
        return f"KeyTrustCache(entries={len(self.entries)}, fetches={self.fetch_count})"
