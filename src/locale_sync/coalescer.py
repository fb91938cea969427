"""
Regroupement des sauvegardes de fichiers en une seule passe de traduction.

Chaque sauvegarde crée une tâche et relance un délai d'attente (debounce).
À l'expiration, toutes les tâches accumulées sont traitées ensemble sous
le verrou exclusif : une rafale de N sauvegardes coûte une seule passe.

États : IDLE -> ACCUMULATING -> DRAINING -> IDLE
"""

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

from .logger import get_logger

if TYPE_CHECKING:
    from .lock import ExclusiveLock
    from .locales.extractor import KeyExtractor
    from .progress import ProgressReporter

logger = get_logger(__name__)

DEFAULT_DEBOUNCE_DELAY = 0.5
REDRAIN_DELAY = 0.1

# Passe exécutée sous le verrou : (clés, racine du workspace) -> résultat
PassFunction = Callable[[list[str], Optional[Path]], Awaitable[Any]]


class CoalescerState(str, Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"
    DRAINING = "draining"


@dataclass(frozen=True)
class SavedDocument:
    """
    Document source sauvegardé par l'éditeur.

    Attributes:
        path: Chemin du fichier
        text: Contenu au moment de la sauvegarde
        workspace_root: Racine du workspace contenant le fichier (None = hors workspace)
    """

    path: Path
    text: str
    workspace_root: Optional[Path] = None

    @classmethod
    def from_file(cls, path: str | Path, workspace_root: Optional[str | Path] = None) -> "SavedDocument":
        path = Path(path)
        return cls(
            path=path,
            text=path.read_text(encoding="utf-8"),
            workspace_root=Path(workspace_root) if workspace_root is not None else None,
        )


@dataclass
class TranslationTask:
    document: SavedDocument
    future: asyncio.Future
    created_at: float = field(default_factory=time.monotonic)


class TaskCoalescer:
    """
    File de tâches avec debounce, drainée sous le verrou exclusif.

    Attributes:
        lock: Verrou partagé avec la synchronisation complète
        extractor: Extraction des clés et règles d'exclusion
        run_pass: Passe appelée avec l'union des clés des tâches drainées
        reporter: Statut "en attente" quand le verrou est occupé
        debounce_delay: Délai (s) relancé à chaque nouvelle tâche
        is_enabled: Le moteur est-il activé (False = aucune clé extraite)

    Example:
        >>> coalescer = TaskCoalescer(lock, extractor, engine.translate_new_keys)
        >>> await asyncio.gather(
        ...     coalescer.handle_file_saved(doc_a),
        ...     coalescer.handle_file_saved(doc_b),
        ... )  # une seule passe pour les deux fichiers
    """

    def __init__(
        self,
        lock: "ExclusiveLock",
        extractor: "KeyExtractor",
        run_pass: PassFunction,
        reporter: Optional["ProgressReporter"] = None,
        debounce_delay: float = DEFAULT_DEBOUNCE_DELAY,
        is_enabled: Callable[[], bool] = lambda: True,
    ):
        self.lock = lock
        self.extractor = extractor
        self.run_pass = run_pass
        self.reporter = reporter
        self.debounce_delay = debounce_delay
        self.is_enabled = is_enabled

        self._tasks: list[TranslationTask] = []
        self._pending_keys: dict[str, None] = {}
        self._timer: Optional[asyncio.TimerHandle] = None
        self._draining = False
        self._drain_task: Optional[asyncio.Task] = None
        self._idle = asyncio.Event()
        self._idle.set()

    # -----------------------------------
    # 🔹 Observabilité
    # -----------------------------------
    @property
    def state(self) -> CoalescerState:
        if self._draining:
            return CoalescerState.DRAINING
        if self._tasks:
            return CoalescerState.ACCUMULATING
        return CoalescerState.IDLE

    @property
    def queued_count(self) -> int:
        return len(self._tasks)

    @property
    def pending_keys(self) -> list[str]:
        """Clés en cours de traitement par le drainage courant."""
        return list(self._pending_keys)

    async def wait_idle(self) -> None:
        """Attend qu'aucune tâche ne soit en file ni en cours de drainage."""
        await self._idle.wait()

    # -----------------------------------
    # 🔹 Soumission
    # -----------------------------------
    def submit(self, document: SavedDocument) -> asyncio.Future:
        """
        Ajoute une tâche et relance le debounce.

        Returns:
            Future résolue avec le résultat de la passe qui traite la tâche
        """
        loop = asyncio.get_running_loop()
        task = TranslationTask(document, loop.create_future())
        self._tasks.append(task)
        self._idle.clear()
        logger.debug(f"📥 Tâche ajoutée : {document.path} ({len(self._tasks)} en file)")

        if not self._draining:
            self._restart_timer(self.debounce_delay)
        return task.future

    async def handle_file_saved(self, document: SavedDocument) -> Any:
        """Soumet le document et attend la fin de la passe qui le traite."""
        return await self.submit(document)

    def _restart_timer(self, delay: float) -> None:
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(delay, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        if self._draining:
            # Le drainage en cours relancera une passe à sa fin
            return
        self._drain_task = asyncio.get_running_loop().create_task(self._drain())

    # -----------------------------------
    # 🔹 Drainage
    # -----------------------------------
    async def _drain(self) -> None:
        tasks, self._tasks = self._tasks, []
        if not tasks:
            self._settle()
            return

        self._draining = True
        self._pending_keys = {}
        dispose: Optional[Callable[[], None]] = None
        if self.lock.is_locked() and self.reporter is not None:
            dispose = self.reporter.status(
                "Traduction en attente : une synchronisation est en cours"
            )

        async def body() -> Any:
            if dispose is not None:
                dispose()
            keys = self._collect_keys(tasks)
            self._pending_keys = dict.fromkeys(keys)
            workspace = next(
                (t.document.workspace_root for t in tasks if t.document.workspace_root),
                None,
            )
            logger.info(f"🔄 {len(tasks)} tâche(s) regroupée(s), {len(keys)} clé(s)")
            return await self.run_pass(keys, workspace)

        try:
            result = await self.lock.run_exclusive(body)
        except Exception as e:
            logger.error(f"❌ Échec de la passe de traduction : {e}")
            for task in tasks:
                if not task.future.done():
                    task.future.set_exception(e)
        else:
            for task in tasks:
                if not task.future.done():
                    task.future.set_result(result)
        finally:
            if dispose is not None:
                dispose()
            self._draining = False
            self._pending_keys = {}

        self._settle()

    def _settle(self) -> None:
        if self._tasks:
            self._restart_timer(REDRAIN_DELAY)
        else:
            self._idle.set()

    def _collect_keys(self, tasks: list[TranslationTask]) -> list[str]:
        """Union des clés des documents, dans l'ordre d'apparition."""
        if not self.is_enabled():
            logger.debug("Traduction désactivée : aucune clé extraite")
            return []

        keys: dict[str, None] = {}
        for task in tasks:
            document = task.document
            try:
                if self.extractor.should_ignore_path(str(document.path)):
                    logger.debug(f"Chemin ignoré : {document.path}")
                    continue
                for key in self.extractor.extract_keys(document.text):
                    if not self.extractor.should_ignore_key(key):
                        keys.setdefault(key, None)
            except Exception as e:
                logger.warning(f"⚠️ Extraction des clés impossible pour {document.path} : {e}")
        return list(keys)
