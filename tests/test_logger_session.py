"""
Tests pour le système de logging avec sessions et création lazy.
"""

import logging
from pathlib import Path

from locale_sync.logger import (
    LazyFileHandler,
    LogSession,
    get_logger,
    get_session_log_path,
    setup_logger,
)


def make_record(message):
    return logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg=message,
        args=(),
        exc_info=None,
    )


def test_log_session_singleton():
    """LogSession est un singleton."""
    assert LogSession() is LogSession()
    assert LogSession.get_session_dir() == LogSession.get_session_dir()


def test_session_dir_uses_environment_base(tmp_path):
    """Le répertoire de base vient de LOCALE_SYNC_LOG_DIR (cf. conftest)."""
    session_dir = LogSession.get_session_dir()

    assert session_dir.name.startswith("run_")
    assert session_dir.parent == tmp_path / "logs"
    # Rien n'est créé tant qu'aucun fichier n'est écrit
    assert not session_dir.exists()


def test_lazy_file_handler_creates_file_only_on_emit(tmp_path):
    """LazyFileHandler ne crée le fichier (et son dossier) qu'au premier log."""
    log_file = tmp_path / "nested" / "lazy.log"
    handler = LazyFileHandler(log_file, mode="w")
    handler.setFormatter(logging.Formatter("%(message)s"))

    assert not log_file.exists(), "Le fichier ne doit pas exister avant le premier log"

    handler.emit(make_record("Premier message"))
    handler.close()

    assert log_file.read_text(encoding="utf-8").strip() == "Premier message"


def test_setup_logger_uses_session_dir():
    logger = setup_logger("test.module", log_filename="test_setup.log")

    # Console + fichier
    assert len(logger.handlers) == 2
    file_handler = logger.handlers[1]
    assert isinstance(file_handler, LazyFileHandler)
    assert file_handler.filename == LogSession.get_session_dir() / "test_setup.log"


def test_setup_logger_with_explicit_dir(tmp_path):
    logger = setup_logger("test.explicit_dir", log_dir=tmp_path)

    assert logger.handlers[1].filename == Path(tmp_path) / "locale_sync.log"


def test_get_session_log_path_creates_dir():
    path = get_session_log_path("llm_0001.log")

    assert path == LogSession.get_session_dir() / "llm_0001.log"
    assert path.parent.is_dir()
    assert not path.exists()


def test_get_logger_with_custom_filename():
    logger = get_logger("test.custom", log_filename="custom.log")

    assert logger.handlers[1].filename.name == "custom.log"


def test_setup_logger_avoids_duplicate_handlers():
    logger1 = setup_logger("test.duplicate")
    logger2 = setup_logger("test.duplicate")

    assert logger1 is logger2
    assert len(logger1.handlers) == 2


def test_log_session_reset(tmp_path, monkeypatch):
    """Après reset(), la session suit la nouvelle base."""
    LogSession.get_session_dir()
    monkeypatch.setenv("LOCALE_SYNC_LOG_DIR", str(tmp_path / "other"))

    LogSession.reset()

    assert LogSession.get_session_dir().parent == tmp_path / "other"
