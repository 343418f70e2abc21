"""
Progress Reporter Module
========================

Receives the lifecycle events of a scan: start, the region currently
being scanned, success, and failure.

Classes
-------
ProgressReporter
    No-op base; also the reporter for silent verbosity.
SilentReporter
    Alias kept for readability at call sites.
SpinnerReporter
    Rich spinner on stderr, prefixed with the rule name.
RecordingReporter
    Keeps every event in a list.

Example
-------
>>> reporter = SpinnerReporter("VolumeEncrypted")
>>> reporter.start()
>>> reporter.update("us-east-1")
>>> reporter.succeed()
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from rich.console import Console
from rich.markup import escape
from rich.status import Status

# Module logger
logger = logging.getLogger(__name__)


class ProgressReporter:
    """Reporter that ignores every event."""

    def start(self) -> None:
        pass

    def update(self, text: str) -> None:
        pass

    def succeed(self) -> None:
        pass

    def fail(self, message: str) -> None:
        pass


SilentReporter = ProgressReporter


class SpinnerReporter(ProgressReporter):
    """
    Spinner showing the region being scanned.

    Parameters
    ----------
    prefix : str
        Text shown before the spinner text, usually the rule name.
    console : Console, optional
        Rich console. Defaults to stderr so stdout stays parseable.
    """

    def __init__(self, prefix: str, console: Optional[Console] = None) -> None:
        self.prefix = prefix
        self.console = console or Console(stderr=True)
        self._status: Optional[Status] = None

    def start(self) -> None:
        self._status = self.console.status(f"[bold]{self.prefix}[/bold]")
        self._status.start()

    def update(self, text: str) -> None:
        if self._status is not None:
            self._status.update(f"[bold]{self.prefix}[/bold] {text}")

    def _stop(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None

    def succeed(self) -> None:
        self._stop()
        self.console.print(f"[green]✔[/green] [bold]{self.prefix}[/bold]")

    def fail(self, message: str) -> None:
        self._stop()
        self.console.print(f"[red]✖[/red] [bold]{self.prefix}[/bold] {escape(message)}")


class RecordingReporter(ProgressReporter):
    """
    Reporter that records events as ``(event, text)`` tuples.

    Example
    -------
    >>> reporter = RecordingReporter()
    >>> reporter.fail("boom")
    >>> reporter.events
    [('fail', 'boom')]
    """

    def __init__(self) -> None:
        self.events: List[Tuple[str, Optional[str]]] = []

    def start(self) -> None:
        self.events.append(("start", None))

    def update(self, text: str) -> None:
        self.events.append(("update", text))

    def succeed(self) -> None:
        self.events.append(("succeed", None))

    def fail(self, message: str) -> None:
        self.events.append(("fail", message))
