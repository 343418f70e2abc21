"""
AWS Client Module
=================

Wraps boto3 session and client creation for a single Cloud-Search
invocation.

One :class:`AWSClient` is created per invocation. It owns the boto3
session (optionally bound to a named profile) and hands out service
clients for whichever region the scan is currently visiting. Only the
region varies between calls; credentials are resolved once by boto3 and
never inspected here.

Classes
-------
AWSClient
    Session holder and per-region client factory.

Example
-------
>>> from cloud_search.core.aws_client import AWSClient
>>>
>>> client = AWSClient(profile="audit")
>>> ec2 = client.client("ec2", "us-east-1")
>>> kms = client.client("kms", "eu-west-1")

Notes
-----
Retries and timeouts are configured on the botocore ``Config`` shared by
every client. Nothing above this layer retries.

See Also
--------
boto3 : AWS SDK for Python
botocore : Low-level AWS client library
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import (
    ClientError,
    NoCredentialsError,
    NoRegionError,
    ProfileNotFound,
)

from cloud_search.core.exceptions import (
    AWSClientError,
    CredentialsError,
    RegionError,
    ServiceError,
)

# Module logger
logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3
DEFAULT_TIMEOUT = 30


class AWSClient:
    """
    Session holder and per-region boto3 client factory.

    Parameters
    ----------
    profile : str, optional
        AWS profile name from ~/.aws/credentials. When omitted boto3's
        default credential chain is used.
    max_retries : int, default=3
        Maximum attempts for a failed API call (botocore adaptive mode).
    timeout : int, default=30
        Connect and read timeout in seconds.

    Attributes
    ----------
    profile : str or None
        The configured AWS profile name.
    max_retries : int
        Maximum retry attempts for API calls.
    timeout : int
        Request timeout in seconds.

    Examples
    --------
    >>> client = AWSClient()
    >>> sqs = client.client("sqs", "us-west-2")

    Clients are cached per (service, region):

    >>> client.client("sqs", "us-west-2") is sqs
    True

    Raises
    ------
    CredentialsError
        If the named profile does not exist or no credentials are found.
    ServiceError
        If a service client cannot be created.
    """

    def __init__(
        self,
        profile: Optional[str] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the client factory."""
        self.profile = profile
        self.max_retries = max_retries
        self.timeout = timeout

        self._session: Optional[boto3.Session] = None
        self._clients: Dict[Tuple[str, str], Any] = {}
        self._config = self._create_config()

        logger.debug("Initialized AWSClient (profile=%s)", profile)

    def _create_config(self) -> Config:
        """
        Create the botocore configuration shared by every client.

        Returns
        -------
        Config
            Retry and timeout settings.
        """
        return Config(
            retries={
                "max_attempts": self.max_retries,
                "mode": "adaptive",
            },
            connect_timeout=self.timeout,
            read_timeout=self.timeout,
        )

    @property
    def session(self) -> boto3.Session:
        """
        Get or create the boto3 session (lazy initialization).

        Raises
        ------
        CredentialsError
            If the configured profile is not found.
        """
        if self._session is None:
            self._session = self._create_session()
        return self._session

    def _create_session(self) -> boto3.Session:
        try:
            if self.profile:
                session = boto3.Session(profile_name=self.profile)
            else:
                session = boto3.Session()
            logger.debug("Created boto3 session (profile=%s)", self.profile)
            return session

        except ProfileNotFound:
            raise CredentialsError(
                f"AWS profile '{self.profile}' not found",
                details={
                    "profile": self.profile,
                    "hint": "Check ~/.aws/credentials for available profiles",
                },
            )

    def client(self, service_name: str, region: str) -> Any:
        """
        Get or create a boto3 client for a service in a region.

        Parameters
        ----------
        service_name : str
            Name of the AWS service (e.g., 'ec2', 'kms').
        region : str
            Region the client talks to.

        Returns
        -------
        botocore.client.BaseClient
            The boto3 client.

        Raises
        ------
        CredentialsError
            If credentials are not found.
        RegionError
            If no usable region was given.
        ServiceError
            If the client cannot be created.

        Example
        -------
        >>> kms = client.client("kms", "us-east-1")
        >>> kms.describe_key(KeyId="alias/aws/ebs")
        """
        cache_key = (service_name, region)
        if cache_key in self._clients:
            return self._clients[cache_key]

        try:
            created = self.session.client(
                service_name,
                region_name=region,
                config=self._config,
            )
        except NoCredentialsError:
            raise CredentialsError(
                "AWS credentials not found",
                details={
                    "hint": (
                        "Configure credentials using 'aws configure' or set "
                        "AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY environment variables"
                    ),
                },
            )
        except ProfileNotFound:
            raise CredentialsError(
                f"AWS profile '{self.profile}' not found",
                details={"profile": self.profile},
            )
        except NoRegionError:
            raise RegionError(
                f"Invalid or missing region: {region!r}",
                service=service_name,
                region=region,
            )
        except CredentialsError:
            raise
        except Exception as e:
            logger.exception("Failed to create %s client", service_name)
            raise ServiceError(
                f"Failed to create {service_name} client: {e}",
                service=service_name,
                region=region,
            )

        self._clients[cache_key] = created
        logger.debug("Created %s client for %s", service_name, region)
        return created

    def get_caller_identity(self, region: str = "us-east-1") -> Dict[str, str]:
        """
        Resolve the caller identity through STS GetCallerIdentity.

        Parameters
        ----------
        region : str, default="us-east-1"
            Region of the STS endpoint.

        Returns
        -------
        dict
            Dictionary containing 'Account', 'Arn', and 'UserId'.

        Raises
        ------
        CredentialsError
            If credentials are invalid, expired, or missing.
        AWSClientError
            For any other failure.
        """
        try:
            return self.client("sts", region).get_caller_identity()

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("InvalidClientTokenId", "SignatureDoesNotMatch"):
                raise CredentialsError(
                    "Invalid AWS credentials",
                    details={
                        "error_code": error_code,
                        "hint": "Check your access key and secret key",
                    },
                )
            raise CredentialsError(f"Failed to validate credentials: {e}")

        except AWSClientError:
            raise

        except Exception as e:
            logger.exception("Failed to get caller identity")
            raise AWSClientError(f"Failed to get caller identity: {e}")

    def __repr__(self) -> str:
        """Return string representation of the client."""
        return (
            f"AWSClient(profile={self.profile!r}, "
            f"max_retries={self.max_retries}, "
            f"clients={len(self._clients)})"
        )
