"""
Synchronisation des fichiers de langue d'un projet JS/TS via LLM.

locale-sync maintient des fichiers JSON {clé: texte} par langue pour du
code qui appelle intl.t("…") ou t("…"). La langue de base (zh-CN par
défaut) utilise la clé comme texte ; les autres langues sont traduites
par un LLM compatible OpenAI.

Le processus :
1. À la sauvegarde d'un fichier, les clés sont extraites et regroupées
   (debounce) avec celles des autres sauvegardes récentes
2. Les nouvelles clés sont ajoutées au fichier de base
3. Les textes manquants sont traduits par lots bornés en caractères,
   avec cache persistant et validation de chaque réponse
4. Les tables fusionnées sont réécrites sur disque

Fonctionnalités principales :
- Une seule passe pour une rafale de sauvegardes
- Verrou exclusif partagé entre mode auto et synchronisation complète
- Cache persistant des traductions (évite les retraductions)
- Repli texte par texte, puis sur le texte source : aucune clé perdue
- Conversion déterministe zh-CN -> zh-TW / zh-HK sans appel distant
- Nettoyage des clés inutilisées

Organisation du package :
- engine.py / context.py : moteur et état de session
- coalescer.py : regroupement des sauvegardes
- orchestrator.py : synchronisation complète depuis la langue de base
- translation/ : traduction par lots, parsing des réponses, variantes
- checks/ : validation des réponses du modèle
- locales/ : fichiers de langue, extraction et nettoyage des clés
- cache.py, lock.py, segment.py, llm.py : briques de base

Usage minimal :
    >>> from locale_sync import SyncContext, SyncSettings, TranslationEngine
    >>>
    >>> # Requiert LOCALE_SYNC_API_KEY dans .env
    >>> settings = SyncSettings.load(".locale-sync.json")
    >>> async with SyncContext(settings, ".") as context:
    ...     engine = TranslationEngine(context)
    ...     result = await engine.sync_from_baseline()

Version: 0.1.0
"""

from .cache import TranslationCache
from .coalescer import CoalescerState, SavedDocument, TaskCoalescer
from .config import I18nLibrary, SyncSettings, TranslationMode
from .context import SyncContext
from .engine import TranslationEngine
from .errors import (
    ConfigurationError,
    LocaleSyncError,
    RemoteCallError,
    StorageError,
    ValidationError,
    ValidationMismatch,
)
from .llm import LLM
from .lock import ExclusiveLock
from .locales import KeyExtractor, LocaleStore, is_invalid_value
from .orchestrator import SyncOrchestrator, SyncResult
from .progress import ProgressReporter, RecordingReporter, TqdmReporter
from .segment import Batch, BatchItem, Segmentator
from .translation.translator import BatchTranslator

# Version du package
__version__ = "0.1.0"

# Exports publics
__all__ = [
    # Version
    "__version__",
    # Moteur
    "TranslationEngine",
    "SyncContext",
    "SyncSettings",
    "TranslationMode",
    "I18nLibrary",
    # Composants
    "ExclusiveLock",
    "TranslationCache",
    "Segmentator",
    "Batch",
    "BatchItem",
    "BatchTranslator",
    "TaskCoalescer",
    "CoalescerState",
    "SavedDocument",
    "SyncOrchestrator",
    "SyncResult",
    "LLM",
    # Fichiers de langue
    "LocaleStore",
    "KeyExtractor",
    "is_invalid_value",
    # Progression
    "ProgressReporter",
    "TqdmReporter",
    "RecordingReporter",
    # Erreurs
    "LocaleSyncError",
    "ValidationError",
    "ConfigurationError",
    "RemoteCallError",
    "ValidationMismatch",
    "StorageError",
]
