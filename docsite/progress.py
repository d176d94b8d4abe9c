"""Progress reporting for batch builds."""

from __future__ import annotations

import sys
import typing as typ

from tqdm import tqdm

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .builder import ErrorRecord


class ProgressReporter(typ.Protocol):
    """Receive progress notifications from :class:`~docsite.builder.DocsBuilder`."""

    def start(self, total: int, label: str) -> None:
        """Begin a phase covering ``total`` steps."""
        ...

    def advance(self) -> None:
        """Record one finished step."""
        ...

    def finish(self) -> None:
        """Close the current phase."""
        ...

    def report_errors(self, errors: cabc.Sequence[ErrorRecord]) -> None:
        """Show the errors collected during the build."""
        ...


class NullProgress:
    """Progress reporter that stays silent."""

    def start(self, total: int, label: str) -> None:
        """Ignore the phase start."""

    def advance(self) -> None:
        """Ignore the step."""

    def finish(self) -> None:
        """Ignore the phase end."""

    def report_errors(self, errors: cabc.Sequence[ErrorRecord]) -> None:
        """Ignore the errors."""


class ConsoleProgress:
    """Draw a ``tqdm`` progress bar and print an error summary."""

    def __init__(self, stream: typ.TextIO | None = None) -> None:
        self.stream = stream or sys.stderr
        self._bar: tqdm | None = None

    def start(self, total: int, label: str) -> None:
        """Open a progress bar of ``total`` steps."""
        self.finish()
        self._bar = tqdm(total=total, desc=label, unit="doc", file=self.stream)

    def advance(self) -> None:
        """Advance the bar by one step."""
        if self._bar is not None:
            self._bar.update(1)

    def finish(self) -> None:
        """Close the bar if one is open."""
        if self._bar is not None:
            self._bar.close()
            self._bar = None

    def report_errors(self, errors: cabc.Sequence[ErrorRecord]) -> None:
        """Print one line per error record."""
        if not errors:
            return
        print(f"{len(errors)} error(s):", file=self.stream)
        for record in errors:
            print(f"  {record.source}: [{record.kind}] {record.message}", file=self.stream)


__all__ = ["ConsoleProgress", "NullProgress", "ProgressReporter"]
