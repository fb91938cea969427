"""
Accès aux fichiers de langue et au code source du workspace.

- store.py : lecture/écriture des tables {clé: texte}
- extractor.py : extraction des clés depuis les appels intl.t / t
- cleaner.py : détection des clés inutilisées
"""

from .cleaner import find_unused_keys
from .extractor import KeyExtractor
from .store import LocaleStore, find_missing_keys, is_invalid_value

__all__ = [
    "LocaleStore",
    "KeyExtractor",
    "find_missing_keys",
    "find_unused_keys",
    "is_invalid_value",
]
