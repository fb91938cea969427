"""
Configuration du logging pour locale-sync.

Tous les modules obtiennent leur logger via get_logger(__name__), ce qui
garantit une configuration homogène :
- sortie console compatible avec la barre de progression tqdm ;
- fichiers regroupés par session dans <base>/run_YYYYMMDD_HHMMSS/ ;
- création différée des fichiers (aucun fichier vide si rien n'est loggé) ;
- journaux dédiés par requête au traducteur (llm_0001_....log).

Le répertoire de base vaut "logs" et peut être changé via la variable
d'environnement LOCALE_SYNC_LOG_DIR.
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from tqdm import tqdm

from .config import Logger_Level

LOG_DIR_ENV = "LOCALE_SYNC_LOG_DIR"
DEFAULT_LOG_FILENAME = "locale_sync.log"


# ============================================================
# 🔹 Gestionnaire de session de logs
# ============================================================


class LogSession:
    """
    Singleton regroupant les journaux d'une session hôte.

    Le répertoire run_YYYYMMDD_HHMMSS/ est calculé au premier accès et créé
    seulement quand un fichier y est réellement écrit.
    """

    _instance: Optional["LogSession"] = None
    _session_dir: Optional[Path] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if LogSession._session_dir is not None:
            return

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        base_dir = Path(os.getenv(LOG_DIR_ENV, "logs"))
        LogSession._session_dir = base_dir / f"run_{timestamp}"

    @classmethod
    def get_session_dir(cls) -> Path:
        """Retourne le répertoire de la session en cours."""
        if cls._session_dir is None:
            cls()
        assert cls._session_dir is not None
        return cls._session_dir

    @classmethod
    def reset(cls):
        """Oublie la session courante (utile pour les tests)."""
        cls._instance = None
        cls._session_dir = None


# ============================================================
# 🔹 Handlers de logging
# ============================================================


class TqdmLoggingHandler(logging.Handler):
    """Handler console qui écrit via tqdm.write() sans casser la barre."""

    def emit(self, record):
        try:
            msg = self.format(record)
            tqdm.write(msg, file=sys.stderr)
        except Exception:
            self.handleError(record)


class LazyFileHandler(logging.FileHandler):
    """
    Handler fichier ouvert (et créé, dossier parent compris) au premier message.

    Repose sur FileHandler(delay=True) : aucun fichier vide si rien n'est loggé.
    """

    def __init__(
        self,
        filename: str | Path,
        mode: str = "a",
        encoding: str = "utf-8",
        level: int = logging.NOTSET,
    ):
        self.filename = Path(filename)
        super().__init__(self.filename, mode=mode, encoding=encoding, delay=True)
        self.setLevel(level)

    def _open(self):
        self.filename.parent.mkdir(parents=True, exist_ok=True)
        return super()._open()


# ============================================================
# 🔹 Configuration des loggers
# ============================================================


def setup_logger(
    name: str,
    log_dir: Optional[str | Path] = None,
    level: int = Logger_Level.level,
    console_level: int = Logger_Level.console_level,
    file_level: int = Logger_Level.file_level,
    log_filename: str = DEFAULT_LOG_FILENAME,
) -> logging.Logger:
    """
    Configure un logger avec sortie console et fichier de session.

    Args:
        name: Nom du logger (généralement __name__ du module)
        log_dir: Répertoire des fichiers (None = répertoire de session)
        level: Niveau global du logger
        console_level: Niveau de la sortie console
        file_level: Niveau du fichier
        log_filename: Nom du fichier de log

    Returns:
        Logger configuré (les handlers ne sont ajoutés qu'une fois)

    Example:
        >>> logger = setup_logger(__name__)
        >>> logger.info("Synchronisation démarrée")
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    session_dir = LogSession.get_session_dir() if log_dir is None else Path(log_dir)

    file_handler = LazyFileHandler(filename=session_dir / log_filename)
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger


def get_logger(name: str, log_filename: Optional[str] = None) -> logging.Logger:
    """
    Récupère un logger existant ou le configure avec les valeurs par défaut.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger = get_logger(__name__, "remote.log")
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        return setup_logger(name, log_filename=log_filename or DEFAULT_LOG_FILENAME)
    return logger


def get_session_log_path(filename: str) -> Path:
    """
    Chemin d'un fichier dans le répertoire de session (dossier créé au besoin).

    Example:
        >>> get_session_log_path("llm_0001.log")
        PosixPath('logs/run_20251023_143022/llm_0001.log')
    """
    session_dir = LogSession.get_session_dir()
    session_dir.mkdir(parents=True, exist_ok=True)
    return session_dir / filename
