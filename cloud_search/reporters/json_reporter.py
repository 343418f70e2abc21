"""
JSON Renderer Module
====================

Exports audit records as JSON for programmatic access.

The document is a list of records in collection order. Each record uses
the camelCase keys of :meth:`AuditResult.to_dict`; optional fields that
are unset are left out.

Classes
-------
JSONRenderer
    Renderer for the ``json`` output format.

Example
-------
>>> from cloud_search.reporters import JSONRenderer
>>>
>>> renderer = JSONRenderer()
>>> renderer.render(driver.audits)            # prints to stdout
>>>
>>> renderer = JSONRenderer(output_path="audits.json")
>>> renderer.render(driver.audits)            # writes the file
'audits.json'

Output Structure
----------------
::

    [
      {
        "provider": "aws",
        "physicalId": "vol-0123456789abcdef0",
        "service": "ebs",
        "rule": "VolumeEncrypted",
        "region": "us-east-1",
        "state": "OK",
        "time": "2024-01-15T10:30:00.000Z"
      }
    ]

See Also
--------
TerminalRenderer : For terminal display.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import click

from cloud_search.core.audit import AuditResult

# Module logger
logger = logging.getLogger(__name__)


class JSONRenderer:
    """
    Renderer for exporting audit records to JSON.

    Parameters
    ----------
    output_path : str, optional
        Write the document to this file. Printed to stdout when omitted.
    indent : int, default=2
        JSON indentation level for pretty printing.
        Set to None for compact output.

    Attributes
    ----------
    output_path : str or None
        The configured output path.
    indent : int or None
        JSON indentation level.

    Examples
    --------
    Get as string:

    >>> renderer = JSONRenderer()
    >>> data = json.loads(renderer.to_string(audits))
    >>> data[0]["physicalId"]
    'vol-0123456789abcdef0'

    Compact output (no indentation):

    >>> renderer = JSONRenderer(indent=None)
    """

    def __init__(
        self,
        output_path: Optional[str] = None,
        indent: Optional[int] = 2,
    ) -> None:
        self.output_path = output_path
        self.indent = indent
        logger.debug("Initialized JSONRenderer (output_path=%s)", output_path)

    def to_list(self, audits: Iterable[AuditResult]) -> List[Dict[str, Any]]:
        """Convert audit records to plain dictionaries."""
        return [audit.to_dict() for audit in audits]

    def to_string(self, audits: Iterable[AuditResult]) -> str:
        """
        Convert audit records to a JSON string without writing a file.

        Parameters
        ----------
        audits : iterable of AuditResult
            Records to convert.

        Returns
        -------
        str
            JSON document.
        """
        return json.dumps(self.to_list(audits), indent=self.indent, default=str)

    def render(self, audits: Iterable[AuditResult]) -> Optional[str]:
        """
        Print the document, or write it to ``output_path``.

        Returns
        -------
        str or None
            Path of the written file, if one was written.
        """
        document = self.to_string(audits)

        if not self.output_path:
            click.echo(document)
            return None

        output_path = Path(self.output_path)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(document)
            f.write("\n")

        logger.info("JSON export complete: %s", output_path)
        return str(output_path)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"JSONRenderer(output_path={self.output_path!r}, indent={self.indent})"
