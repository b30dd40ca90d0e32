"""Host UI primitives — notifications, output channels, editor navigation."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from typing import Protocol, runtime_checkable

from rich.console import Console

logger = logging.getLogger(__name__)


@runtime_checkable
class OutputChannel(Protocol):
    """Append-only named text sink."""

    def append_line(self, text: str) -> None: ...

    def show(self) -> None: ...


@runtime_checkable
class Host(Protocol):
    """Protocol for the surface the scanner reports through."""

    def notify_info(self, message: str) -> None: ...

    def notify_error(self, message: str) -> None: ...

    def output_channel(self, name: str) -> OutputChannel: ...

    def open_at_line(self, path: str, line: int) -> None:
        """Open ``path`` in an editor with the cursor on 0-based ``line``."""
        ...


class ConsoleOutputChannel:
    """Buffers lines and prints them under a header on show()."""

    def __init__(self, name: str, console: Console) -> None:
        self.name = name
        self.lines: list[str] = []
        self._console = console

    def append_line(self, text: str) -> None:
        self.lines.append(text)

    def show(self) -> None:
        self._console.rule(f"[bold]{self.name}[/bold]")
        for line in self.lines:
            self._console.print(line, markup=False, highlight=False)
        self._console.rule()


class ConsoleHost:
    """Host backed by a Rich console and ``$EDITOR``."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)
        self._channels: dict[str, ConsoleOutputChannel] = {}

    def notify_info(self, message: str) -> None:
        self._console.print(f"[blue]i[/blue] {message}")

    def notify_error(self, message: str) -> None:
        logger.error(message)
        self._console.print(f"[red]✗[/red] {message}")

    def output_channel(self, name: str) -> ConsoleOutputChannel:
        if name not in self._channels:
            self._channels[name] = ConsoleOutputChannel(name, self._console)
        return self._channels[name]

    def open_at_line(self, path: str, line: int) -> None:
        if not os.path.isfile(path):
            raise FileNotFoundError(path)

        editor = os.environ.get("VISUAL") or os.environ.get("EDITOR")
        if not editor:
            self._console.print(f"{path}:{line + 1}")
            return

        # VS Code takes -g path:N; vi-style editors take +N
        cmd = shlex.split(editor)
        if os.path.basename(cmd[0]) in ("code", "codium"):
            cmd += ["-g", f"{path}:{line + 1}"]
        else:
            cmd += [f"+{line + 1}", path]
        subprocess.run(cmd, check=False)
