"""
Retour de progression et notifications vers l'hôte.

Le moteur ne connaît que le protocole ProgressReporter ; l'hôte choisit
l'implémentation (barre tqdm en console, enregistrement en mémoire, ...).
"""

from dataclasses import dataclass, field
from typing import Callable, Literal, Optional, Protocol

from tqdm import tqdm

EventKind = Literal["report", "status", "status_end", "info", "warning", "error"]


class ProgressReporter(Protocol):
    """Puits de progression et de notifications utilisé par le moteur."""

    def report(self, message: str, increment: int = 0) -> None:
        """Met à jour le message et avance la progression (en pourcentage)."""
        ...

    def status(self, message: str) -> Callable[[], None]:
        """Affiche un statut transitoire ; la fonction retournée le retire."""
        ...

    def info(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class TqdmReporter:
    """
    Implémentation console : barre tqdm sur 100 et tqdm.write pour les messages.

    La barre est créée à la première progression et fermée à 100 %.
    """

    def __init__(self, desc: str = "Synchronisation", disable: bool = False):
        self.desc = desc
        self.disable = disable
        self._bar: Optional[tqdm] = None
        self._done = 0

    def _ensure_bar(self) -> tqdm:
        if self._bar is None:
            self._bar = tqdm(
                total=100,
                desc=self.desc,
                unit="%",
                ncols=100,
                bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]",
                disable=self.disable,
            )
        return self._bar

    def report(self, message: str, increment: int = 0) -> None:
        bar = self._ensure_bar()
        bar.set_postfix_str(message, refresh=False)
        step = min(increment, 100 - self._done)
        if step > 0:
            self._done += step
            bar.update(step)
        if self._done >= 100:
            self.close()

    def status(self, message: str) -> Callable[[], None]:
        tqdm.write(f"⏳ {message}")
        return lambda: None

    def info(self, message: str) -> None:
        tqdm.write(f"✅ {message}")

    def warning(self, message: str) -> None:
        tqdm.write(f"⚠️ {message}")

    def error(self, message: str) -> None:
        tqdm.write(f"❌ {message}")

    def close(self) -> None:
        self._done = 0
        if self._bar is not None:
            self._bar.close()
            self._bar = None


@dataclass
class ProgressEvent:
    kind: EventKind
    message: str
    increment: int = 0


@dataclass
class RecordingReporter:
    """
    Implémentation en mémoire : enregistre chaque événement.

    Example:
        >>> reporter = RecordingReporter()
        >>> reporter.report("en-US", 50)
        >>> reporter.total_progress
        50
    """

    events: list[ProgressEvent] = field(default_factory=list)
    active_statuses: list[str] = field(default_factory=list)

    def report(self, message: str, increment: int = 0) -> None:
        self.events.append(ProgressEvent("report", message, increment))

    def status(self, message: str) -> Callable[[], None]:
        self.events.append(ProgressEvent("status", message))
        self.active_statuses.append(message)

        def dispose() -> None:
            if message in self.active_statuses:
                self.active_statuses.remove(message)
                self.events.append(ProgressEvent("status_end", message))

        return dispose

    def info(self, message: str) -> None:
        self.events.append(ProgressEvent("info", message))

    def warning(self, message: str) -> None:
        self.events.append(ProgressEvent("warning", message))

    def error(self, message: str) -> None:
        self.events.append(ProgressEvent("error", message))

    def messages(self, kind: EventKind) -> list[str]:
        return [event.message for event in self.events if event.kind == kind]

    @property
    def total_progress(self) -> int:
        return sum(event.increment for event in self.events if event.kind == "report")
