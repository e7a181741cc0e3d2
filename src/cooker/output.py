"""Terminal presentation for prompts, summaries and pipeline progress."""

from __future__ import annotations

from typing import Protocol, Sequence

from rich.console import Console
from rich.markup import escape
from rich.status import Status
from rich.table import Table

__all__ = ["ConsoleReporter", "Reporter"]


class Reporter(Protocol):
    """Sink for everything cooker shows to the user."""

    def message(self, text: str) -> None: ...

    def label(self, text: str) -> None: ...

    def error(self, text: str) -> None: ...

    def summary(self, lines: Sequence[tuple[str, str]]) -> None: ...

    def started(self, step: str) -> None: ...

    def succeeded(self, step: str) -> None: ...

    def failed(self, step: str, reason: str) -> None: ...


class ConsoleReporter:
    """Render cooker output with :mod:`rich`."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self._status: Status | None = None

    def message(self, text: str) -> None:
        self.console.print(text)

    def label(self, text: str) -> None:
        self.console.print(f"[cyan]{text}[/cyan]")

    def error(self, text: str) -> None:
        self.console.print(f"[white on red]Error[/white on red][red] - [/red]{escape(text)}")

    def success(self, text: str) -> None:
        self.console.print(f"[black on green]{text}[/black on green]")

    def summary(self, lines: Sequence[tuple[str, str]]) -> None:
        table = Table.grid(padding=(0, 1))
        table.add_column(style="on blue")
        table.add_column(style="green")
        for label, value in lines:
            table.add_row(f"{label}:", escape(value))

        self.console.print()
        self.success("Your details will be:")
        self.console.print(table)
        self.console.print()

    def started(self, step: str) -> None:
        self._stop_status()
        self._status = self.console.status(step, spinner="dots")
        self._status.start()

    def succeeded(self, step: str) -> None:
        self._stop_status()
        self.console.print(f"[green]✔[/green] {step}")

    def failed(self, step: str, reason: str) -> None:
        self._stop_status()
        self.console.print(f"[red]✖[/red] {step}")
        self.error(reason)

    def banner(self) -> None:
        self.console.clear()
        self.console.print("[red]Palamut Cooker[/red]")
        self.console.print()
        self.console.print(":cat: Palamut Cooker!")
        self.console.print()
        self.console.print(" Cooks and serves 360-degree WordPress Theme Development Habitat.")
        self.console.print()

    def farewell(self, package_slug: str) -> None:
        self.console.print()
        self.console.print(":tada::tada::tada: Palamut is ready! :tada::tada::tada:")
        self.console.print()
        self.console.print(
            f"Please go to theme's folder ([green]cd {package_slug}[/green]) and run "
            "[green]npm run dev[/green] to start developing."
        )
        self.console.print()
        self.console.print("[red]" + "-" * 63 + "[/red]")

    def _stop_status(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None
