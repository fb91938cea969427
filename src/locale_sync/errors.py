"""
Exceptions spécifiques à locale-sync.

Ce module définit la hiérarchie d'erreurs utilisée par le moteur de
synchronisation. La politique de propagation est la suivante :

- ValidationError : entrée malformée, fatale pour l'appel, jamais retentée
- RemoteCallError : échec réseau/API, absorbée par le BatchTranslator
- ValidationMismatch : réponse suspecte (placeholder perdu, écho), déclenche
  le fallback ligne par ligne sans jamais remonter à l'utilisateur
- StorageError : lecture/écriture d'un fichier de langue impossible
- ConfigurationError : erreur structurelle (workspace absent, langue de base
  non configurée...), signalée avant tout appel distant
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from pathlib import Path
    from .checks.base import CheckResult


class LocaleSyncError(Exception):
    """Classe de base de toutes les erreurs du package."""


class ValidationError(LocaleSyncError, ValueError):
    """Entrée invalide (ex: nombre de clés différent du nombre de textes)."""


class ConfigurationError(LocaleSyncError):
    """Configuration ou environnement inutilisable pour une passe de synchro."""


class RemoteCallError(LocaleSyncError):
    """
    Échec de l'appel au traducteur distant.

    Attributes:
        attempts: Nombre de tentatives effectuées avant l'abandon
    """

    def __init__(self, message: str, attempts: int = 1):
        self.attempts = attempts
        super().__init__(message)


class ValidationMismatch(LocaleSyncError):
    """
    Réponse du traducteur rejetée par le pipeline de validation.

    Attributes:
        result: CheckResult du premier check en échec
    """

    def __init__(self, result: "CheckResult"):
        self.result = result
        super().__init__(f"{result.check_name}: {result.error_message}")

    def __repr__(self) -> str:
        return f"ValidationMismatch(check={self.result.check_name})"


class StorageError(LocaleSyncError):
    """
    Lecture ou écriture d'un fichier impossible.

    Attributes:
        path: Fichier concerné (None pour une erreur agrégée)
    """

    def __init__(self, message: str, path: Optional["Path"] = None):
        self.path = path
        super().__init__(message)
