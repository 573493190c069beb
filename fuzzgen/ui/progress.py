"""Terminal progress helpers with Rich-based rendering."""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock

from rich.console import Console
from rich.errors import LiveError
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)


@dataclass
class ProgressState:
    total: int
    success: int = 0
    failed: int = 0
    tokens: int = 0
    current_url: str | None = None


class ProgressReporter:
    """Render per-source progress on stderr and keep counters for the summary."""

    def __init__(self, enabled: bool = True, console: Console | None = None) -> None:
        self.enabled = enabled
        self._console = console
        self._progress: Progress | None = None
        self._task_id: TaskID | None = None
        self._lock = Lock()
        self.state: ProgressState | None = None
        self._label: str = "sources"

    def set_label(self, label: str) -> None:
        self._label = label

    def start(self, total: int) -> None:
        self.state = ProgressState(total=total)
        if not self.enabled:
            return
        if self._console is None:
            self._console = Console(stderr=True)
        if not self._console.is_terminal:
            # Non-interactive output stays silent
            self.enabled = False
            return
        self._progress = Progress(
            SpinnerColumn(style="cyan"),
            TextColumn("[bold blue]{task.fields[label]:<12}", justify="left"),
            BarColumn(bar_width=None, complete_style="green", finished_style="green"),
            TaskProgressColumn(show_speed=False),
            TimeElapsedColumn(),
            TextColumn("[green]✓{task.fields[success]:>3}", justify="right"),
            TextColumn("[red]✗{task.fields[failed]:>3}", justify="right"),
            TextColumn("[magenta]{task.fields[tokens]:>8} tokens", justify="right"),
            TextColumn("[dim]{task.fields[current_url]}", justify="left"),
            console=self._console,
            transient=True,
            expand=True,
        )
        try:
            self._progress.__enter__()
        except LiveError:
            self.enabled = False
            self._progress = None
            return
        self._task_id = self._progress.add_task(
            "fetch",
            total=total,
            label=self._label,
            success=0,
            failed=0,
            tokens=0,
            current_url="waiting…",
        )

    def advance(
        self,
        success: bool = False,
        failed: bool = False,
        tokens: int = 0,
        current_url: str | None = None,
    ) -> None:
        if not self.state:
            raise RuntimeError("ProgressReporter.start must be called before advance")
        with self._lock:
            if current_url:
                self.state.current_url = current_url
            if success:
                self.state.success += 1
            if failed:
                self.state.failed += 1
            self.state.tokens += tokens
            if self._progress is None or self._task_id is None:
                return
            display_url = self.state.current_url or ""
            if len(display_url) > 60:
                display_url = display_url[:57] + "..."
            self._progress.update(
                self._task_id,
                advance=1,
                success=self.state.success,
                failed=self.state.failed,
                tokens=self.state.tokens,
                current_url=display_url,
            )

    def close(self) -> None:
        if self._progress is not None:
            self._progress.__exit__(None, None, None)
            self._progress = None
        self._task_id = None


__all__ = ["ProgressReporter", "ProgressState"]
