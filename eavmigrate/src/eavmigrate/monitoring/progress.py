"""Progress reporting for migration runs."""

from typing import Protocol

import typer


class ProgressSink(Protocol):
    """Observer of run progress. Has no effect on the outcome."""

    def start(self, total_steps: int) -> None:
        ...

    def advance(self) -> None:
        ...

    def finish(self) -> None:
        ...


class NullProgress:
    """Progress sink that ignores everything."""

    def start(self, total_steps: int) -> None:
        pass

    def advance(self) -> None:
        pass

    def finish(self) -> None:
        pass


class TyperProgress:
    """Renders a Typer progress bar on the terminal."""

    def __init__(self, label: str = "Migrating EAV structure"):
        self.label = label
        self._bar = None

    def start(self, total_steps: int) -> None:
        self._bar = typer.progressbar(length=total_steps, label=self.label)
        self._bar.__enter__()

    def advance(self) -> None:
        if self._bar is not None:
            self._bar.update(1)

    def finish(self) -> None:
        if self._bar is not None:
            self._bar.__exit__(None, None, None)
            self._bar = None
