"""
Pagination Module
=================

Drives a remote listing call to completion and gathers one field of every
page into a single list.

The collector never looks inside a response beyond the requested field;
everything provider specific (which token to forward, when the listing is
exhausted) lives behind the :class:`Page` interface.

Classes
-------
Page
    One response of a listing call, able to fetch its successor.
ResponsePage
    A single, non-paginated response.
TokenPage
    Follows a continuation token between calls.
IteratorPage
    Wraps an iterator of responses, such as a boto3 paginator.

Functions
---------
collect
    Accumulate a field across all pages.
first_page
    Build the first page for a boto3 client operation.
paginate
    ``collect(first_page(...), field)`` in one call.

Example
-------
>>> from cloud_search.core.pager import paginate
>>>
>>> ec2 = aws_client.client("ec2", "us-east-1")
>>> volumes = paginate(ec2, "describe_volumes", "Volumes")

Notes
-----
Errors raised while fetching a page propagate to the caller untouched.
Nothing here retries; the botocore client config does.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterator, List, Optional

# Module logger
logger = logging.getLogger(__name__)


class Page(ABC):
    """
    One response unit of a paginated listing call.

    Parameters
    ----------
    response : dict
        The raw response of the call that produced this page.
    """

    def __init__(self, response: Dict[str, Any]) -> None:
        self.response = response or {}

    def items(self, field: str) -> List[Any]:
        """Items held in ``field``; an absent or empty field is an empty page."""
        return list(self.response.get(field) or [])

    @abstractmethod
    def has_more(self) -> bool:
        """Whether another page follows this one."""

    @abstractmethod
    def next(self) -> "Page":
        """Fetch and return the following page."""


class ResponsePage(Page):
    """A response from an operation that does not paginate."""

    def has_more(self) -> bool:
        return False

    def next(self) -> Page:
        raise LookupError("single response has no next page")


class TokenPage(Page):
    """
    Page that forwards a continuation token to the next call.

    Parameters
    ----------
    call : callable
        The API operation, called with keyword arguments.
    kwargs : dict, optional
        Arguments of the first call.
    input_token : str, default="NextToken"
        Request parameter that carries the token.
    output_token : str, default="NextToken"
        Response key holding the token of the next page.
    more_results : str, optional
        Response key of a boolean "more pages" flag (IAM's ``IsTruncated``).
        When given, the flag decides; the token is only forwarded.

    Examples
    --------
    >>> page = TokenPage(iam.list_users, input_token="Marker",
    ...                  output_token="Marker", more_results="IsTruncated")
    >>> users = collect(page, "Users")
    """

    def __init__(
        self,
        call: Callable[..., Dict[str, Any]],
        kwargs: Optional[Dict[str, Any]] = None,
        input_token: str = "NextToken",
        output_token: str = "NextToken",
        more_results: Optional[str] = None,
        response: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.call = call
        self.kwargs = dict(kwargs or {})
        self.input_token = input_token
        self.output_token = output_token
        self.more_results = more_results
        if response is None:
            response = call(**self.kwargs)
        super().__init__(response)

    def has_more(self) -> bool:
        if self.more_results is not None:
            return bool(self.response.get(self.more_results))
        return bool(self.response.get(self.output_token))

    def next(self) -> Page:
        kwargs = dict(self.kwargs)
        kwargs[self.input_token] = self.response.get(self.output_token)
        return TokenPage(
            self.call,
            kwargs,
            input_token=self.input_token,
            output_token=self.output_token,
            more_results=self.more_results,
        )


class IteratorPage(Page):
    """
    Page over an iterator of responses.

    The iterator is advanced one step ahead so :meth:`has_more` can answer
    without fetching twice.

    Parameters
    ----------
    responses : iterator of dict
        Typically ``client.get_paginator(op).paginate(**kwargs)``.
    """

    _EXHAUSTED = object()

    def __init__(self, responses: Iterator[Dict[str, Any]], response=_EXHAUSTED) -> None:
        self._responses = iter(responses)
        if response is IteratorPage._EXHAUSTED:
            response = next(self._responses, {})
        super().__init__(response)
        self._following = next(self._responses, IteratorPage._EXHAUSTED)

    def has_more(self) -> bool:
        return self._following is not IteratorPage._EXHAUSTED

    def next(self) -> Page:
        if not self.has_more():
            raise LookupError("no more pages")
        return IteratorPage(self._responses, self._following)


def collect(page: Page, field: str) -> List[Any]:
    """
    Accumulate ``field`` across a page and all of its successors.

    Parameters
    ----------
    page : Page
        The first page.
    field : str
        Response key holding the page's items.

    Returns
    -------
    list
        Items in page order, concatenated. No deduplication.

    Example
    -------
    >>> collect(ResponsePage({"Buckets": [{"Name": "a"}]}), "Buckets")
    [{'Name': 'a'}]
    """
    items: List[Any] = []
    pages = 0
    while True:
        items.extend(page.items(field))
        pages += 1
        if not page.has_more():
            break
        page = page.next()

    logger.debug("Collected %d %s across %d page(s)", len(items), field, pages)
    return items


def first_page(client: Any, operation: str, **kwargs: Any) -> Page:
    """
    Issue the first call of ``operation`` and wrap its response.

    Uses the client's own paginator when botocore knows how to paginate the
    operation, otherwise a single :class:`ResponsePage`.

    Parameters
    ----------
    client : botocore.client.BaseClient
        A boto3 service client.
    operation : str
        Snake-case operation name, e.g. ``"list_queues"``.
    **kwargs
        Operation parameters.
    """
    if client.can_paginate(operation):
        paginator = client.get_paginator(operation)
        return IteratorPage(iter(paginator.paginate(**kwargs)))
    return ResponsePage(getattr(client, operation)(**kwargs))


def paginate(client: Any, operation: str, field: str, **kwargs: Any) -> List[Any]:
    """
    List every item of ``field`` returned by ``operation``.

    Example
    -------
    >>> trails = paginate(cloudtrail, "list_trails", "Trails")
    """
    return collect(first_page(client, operation, **kwargs), field)
