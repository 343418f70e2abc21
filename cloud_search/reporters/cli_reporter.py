"""
Terminal Renderer Module
========================

Renders audit records as a Rich table on the terminal.

One row per audit, in collection order, with the columns ``state``,
``region``, ``rule`` and ``physicalId``. The state cell is colored:
green for OK, red for FAIL, yellow for anything else.

Classes
-------
TerminalRenderer
    Table renderer for the ``terminal`` output format.

Example
-------
>>> from cloud_search.reporters import TerminalRenderer
>>>
>>> renderer = TerminalRenderer()
>>> renderer.render(driver.audits)

See Also
--------
JSONRenderer : For programmatic access.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from cloud_search.core.audit import AuditResult, AuditState

# Module logger
logger = logging.getLogger(__name__)

STATE_STYLES: Dict[AuditState, str] = {
    AuditState.OK: "bold green",
    AuditState.FAIL: "bold red",
}
DEFAULT_STATE_STYLE = "bold yellow"


class TerminalRenderer:
    """
    Renderer for displaying audit records in the terminal.

    Parameters
    ----------
    console : Console, optional
        Rich Console instance. If not provided, creates a new one on
        stdout.

    Attributes
    ----------
    console : Console
        The Rich Console used for output.

    Examples
    --------
    With a recording console, as the tests do:

    >>> from rich.console import Console
    >>> console = Console(record=True, width=120)
    >>> TerminalRenderer(console=console).render(audits)
    >>> "physicalId" in console.export_text()
    True
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()
        logger.debug("Initialized TerminalRenderer")

    @staticmethod
    def state_style(state: AuditState) -> str:
        """Rich style for a state cell."""
        return STATE_STYLES.get(state, DEFAULT_STATE_STYLE)

    def build_table(self, audits: Iterable[AuditResult]) -> Table:
        """
        Build the results table.

        Parameters
        ----------
        audits : iterable of AuditResult
            Records to show, in order.

        Returns
        -------
        Table
            A Rich table, one row per record.
        """
        table = Table(show_lines=False, header_style="bold")

        table.add_column("state", no_wrap=True)
        table.add_column("region", style="bold", no_wrap=True)
        table.add_column("rule", style="bold")
        table.add_column("physicalId", style="bold")

        for audit in audits:
            state = AuditState(audit.state)
            table.add_row(
                Text(state.value, style=self.state_style(state)),
                audit.region,
                audit.rule,
                audit.physical_id,
            )

        return table

    def render(self, audits: Iterable[AuditResult]) -> None:
        """Print the results table."""
        audits = list(audits)
        logger.debug("Rendering %d audit(s) to the terminal", len(audits))
        self.console.print(self.build_table(audits))

    def __repr__(self) -> str:
        """Return string representation."""
        return "TerminalRenderer()"
