"""
Custom Exceptions for Cloud-Search
==================================

This module defines the exception hierarchy used by the scan engine and
the rules built on top of it.

Exception Hierarchy
-------------------
::

    CloudSearchError (base)
    ├── PreconditionError
    │   └── RegionDiscoveryError
    ├── AWSClientError
    │   ├── CredentialsError
    │   ├── RegionError
    │   └── ServiceError
    └── ScannerError

Notes
-----
A precondition error is fatal: it aborts the invocation before (or
instead of) any further AWS call and is never retried. API errors raised
by botocore during a scan are not wrapped; they propagate as-is so the
caller sees the original error code.

Example
-------
>>> from cloud_search.core.exceptions import PreconditionError
>>>
>>> try:
...     driver.start()
... except PreconditionError as e:
...     print(f"Invalid invocation: {e}")
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class CloudSearchError(Exception):
    """
    Base exception for all Cloud-Search errors.

    Parameters
    ----------
    message : str
        Human-readable error message.
    details : dict, optional
        Additional context about the error.

    Attributes
    ----------
    message : str
        The error message.
    details : dict
        Additional error details.

    Example
    -------
    >>> raise CloudSearchError("Something went wrong", details={"code": 500})
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for serialization.

        Returns
        -------
        dict
            Dictionary representation of the error.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


# =============================================================================
# Precondition Exceptions
# =============================================================================


class PreconditionError(CloudSearchError):
    """
    Raised when an invocation or a returned resource violates a precondition.

    Examples are a single-resource request against the ``"all"`` region,
    an unknown trust class, or a resource returned without its identifier.

    Example
    -------
    >>> raise PreconditionError(
    ...     "a resource id requires a concrete region",
    ...     details={"region": "all"}
    ... )
    """

    pass


class RegionDiscoveryError(PreconditionError):
    """
    Raised when region discovery returns no usable region list.

    Example
    -------
    >>> raise RegionDiscoveryError("unable to describe regions")
    """

    pass


# =============================================================================
# AWS Client Exceptions
# =============================================================================


class AWSClientError(CloudSearchError):
    """
    Base exception for AWS client-related errors.

    Raised when there's an issue with AWS connectivity, authentication,
    or client creation.

    Parameters
    ----------
    message : str
        Human-readable error message.
    service : str, optional
        The AWS service that caused the error.
    region : str, optional
        The AWS region where the error occurred.
    details : dict, optional
        Additional context about the error.
    """

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        region: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.service = service
        self.region = region
        full_details = details or {}
        if service:
            full_details["service"] = service
        if region:
            full_details["region"] = region
        super().__init__(message, full_details)


class CredentialsError(AWSClientError):
    """
    Raised when AWS credentials are invalid, missing, or expired.

    Example
    -------
    >>> raise CredentialsError(
    ...     "AWS profile 'audit' not found",
    ...     details={"hint": "Check ~/.aws/credentials for available profiles"}
    ... )
    """

    pass


class RegionError(AWSClientError):
    """
    Raised when there's an issue with the specified AWS region.

    Example
    -------
    >>> raise RegionError("Invalid region specified", region="us-invalid-1")
    """

    pass


class ServiceError(AWSClientError):
    """
    Raised when a client for a specific AWS service cannot be created.

    Example
    -------
    >>> raise ServiceError(
    ...     "Failed to create kms client",
    ...     service="kms",
    ...     region="us-east-1"
    ... )
    """

    pass


# =============================================================================
# Scanner Exceptions
# =============================================================================


class ScannerError(CloudSearchError):
    """
    Raised when the scan driver is used out of order.

    Parameters
    ----------
    message : str
        Human-readable error message.
    rule : str, optional
        The rule being driven.
    region : str, optional
        The AWS region being scanned.
    details : dict, optional
        Additional context about the error.
    """

    def __init__(
        self,
        message: str,
        rule: Optional[str] = None,
        region: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.rule = rule
        self.region = region
        full_details = details or {}
        if rule:
            full_details["rule"] = rule
        if region:
            full_details["region"] = region
        super().__init__(message, full_details)
