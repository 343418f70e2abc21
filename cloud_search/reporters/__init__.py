"""
Reporters
=========

Progress reporting while a scan runs, and rendering of its audit records
once it is done.

Available Reporters
-------------------
ProgressReporter / SilentReporter
    Ignore every progress event (``silent`` verbosity).
SpinnerReporter
    Rich spinner on stderr (``normal`` verbosity).
RecordingReporter
    Keeps events in a list.

Available Renderers
-------------------
TerminalRenderer
    Rich table: state, region, rule, physicalId.
JSONRenderer
    List of records as JSON, to stdout or to a file.

Example
-------
>>> from cloud_search.reporters import render
>>>
>>> render(audits, fmt="json")
"""

from typing import Iterable, Optional

from cloud_search.core.audit import AuditResult
from cloud_search.core.exceptions import PreconditionError
from cloud_search.reporters.cli_reporter import TerminalRenderer
from cloud_search.reporters.json_reporter import JSONRenderer
from cloud_search.reporters.progress import (
    ProgressReporter,
    RecordingReporter,
    SilentReporter,
    SpinnerReporter,
)

FORMATS = ("terminal", "json")


def render(
    audits: Iterable[AuditResult],
    fmt: str = "terminal",
    output_path: Optional[str] = None,
) -> Optional[str]:
    """
    Render audit records in the given format.

    Returns the path of the written file, if any.

    Raises
    ------
    PreconditionError
        If ``fmt`` is not a supported format.
    """
    if fmt == "terminal":
        TerminalRenderer().render(audits)
        return None
    if fmt == "json":
        return JSONRenderer(output_path=output_path).render(audits)
    raise PreconditionError(f"unsupported format {fmt!r}", details={"formats": list(FORMATS)})


__all__ = [
    "FORMATS",
    "JSONRenderer",
    "ProgressReporter",
    "RecordingReporter",
    "SilentReporter",
    "SpinnerReporter",
    "TerminalRenderer",
    "render",
]
