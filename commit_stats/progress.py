"""Terminal progress rendering for long-running discovery and stats phases."""
import sys
import time
from typing import Optional, TextIO


def format_duration(seconds: float) -> str:
    """Format a duration as '42s', '3m 5s' or '1h 2m'."""
    if seconds < 60:
        return f"{round(seconds)}s"
    if seconds < 3600:
        return f"{int(seconds // 60)}m {round(seconds % 60)}s"
    return f"{int(seconds // 3600)}h {int((seconds % 3600) // 60)}m"


def render_bar(done: int, total: int, width: int = 40) -> str:
    """Render ``[=====>    ]`` for done/total units."""
    progress = min(1.0, done / total) if total > 0 else 1.0
    filled = round(progress * width)
    if progress < 1.0:
        head = ">" if filled < width else ""
        return "[" + "=" * filled + head + " " * (width - filled - len(head)) + "]"
    return "[" + "=" * width + "]"


class ProgressPrinter:
    """Progress observer that redraws one stderr line per phase.

    Instances are callable with ``(phase, done, total, info)`` and can be
    passed directly as the ``on_progress`` hook of discovery and aggregation.
    """

    def __init__(self, stream: Optional[TextIO] = None, width: int = 40):
        self.stream = stream if stream is not None else sys.stderr
        self.width = width
        self.phase: Optional[str] = None
        self.started = 0.0
        self.done = 0
        self.total = 0

    def __call__(self, phase: str, done: int, total: int, info: str = "") -> None:
        if phase != self.phase:
            self.close()
            self.phase = phase
            self.started = time.monotonic()
        self.done = done
        self.total = total
        self._render(info)

    def eta(self) -> float:
        if self.done <= 0:
            return 0.0
        elapsed = time.monotonic() - self.started
        return max(0.0, (self.total - self.done) * elapsed / self.done)

    def _render(self, info: str) -> None:
        percent = 100.0 * min(1.0, self.done / self.total) if self.total > 0 else 100.0
        line = (
            f"\r{self.phase}: {render_bar(self.done, self.total, self.width)} "
            f"{percent:5.1f}% | {self.done}/{self.total} | ETA: {format_duration(self.eta())}"
        )
        if info:
            line += f" | {info}"
        self.stream.write(line)
        self.stream.flush()

    def close(self, message: str = "") -> None:
        """Finish the current phase line, optionally with a summary message."""
        if self.phase is None:
            return
        elapsed = format_duration(time.monotonic() - self.started)
        suffix = f" | {message}" if message else ""
        self.stream.write(f"\r{self.phase}: done in {elapsed}{suffix}\033[K\n")
        self.stream.flush()
        self.phase = None
