from __future__ import annotations
import time
from typing import Optional, TextIO

import typer
from tqdm import tqdm

from .config import ProgressMode

SPINNER_GLYPHS = ("|", "/", "-", "\\")


class SilentProgress:
    """Summary-only mode: nothing per item."""

    def note(self, message: str) -> None:
        pass

    def advance(self, processed: int) -> None:
        pass

    def close(self) -> None:
        pass


class BarProgress(SilentProgress):
    def __init__(self, total: int, file: Optional[TextIO] = None):
        self.total = total
        self.bar = tqdm(total=total, desc="Normalize", unit="obj", file=file)
        self._file = file

    def note(self, message: str) -> None:
        # keep the bar intact
        tqdm.write(message, file=self._file)

    def advance(self, processed: int) -> None:
        self.bar.update(1)

    def close(self) -> None:
        self.bar.close()
        # same stream tqdm drew on
        typer.echo("", err=self._file is None, file=self._file)


class SpinnerProgress(SilentProgress):
    """
    Single overwritten status line: glyph, processed count, elapsed, rate.
    No total and no ETA, so no counting pass is needed.
    """

    def __init__(self, file: Optional[TextIO] = None, clock=time.monotonic):
        self._file = file
        self._clock = clock
        self._started = clock()
        self._tick = 0
        self._width = 0

    def line(self, processed: int) -> str:
        elapsed = self._clock() - self._started
        rate = processed / elapsed if elapsed > 0 else float(processed)
        glyph = SPINNER_GLYPHS[self._tick % len(SPINNER_GLYPHS)]
        return f"{glyph} Processed: {processed} | Elapsed: {elapsed:.1f}s | Rate: {rate:.1f}/s"

    def _draw(self, text: str) -> None:
        pad = max(self._width - len(text), 0)
        typer.echo("\r" + text + " " * pad, nl=False, err=self._file is None, file=self._file)
        self._width = len(text)

    def note(self, message: str) -> None:
        if self._width:
            self._draw("")
            typer.echo("\r", nl=False, err=self._file is None, file=self._file)
            self._width = 0
        typer.echo(message, file=self._file)

    def advance(self, processed: int) -> None:
        self._draw(self.line(processed))
        self._tick += 1

    def close(self) -> None:
        if self._width:
            typer.echo("", err=self._file is None, file=self._file)


def make_progress(mode: ProgressMode, total: Optional[int] = None, file: Optional[TextIO] = None):
    if mode == "bar":
        return BarProgress(total or 0, file=file)
    if mode == "spinner":
        return SpinnerProgress(file=file)
    return SilentProgress()
