"""
Traduction des textes manquants.

Organisation du module :
- parser.py : parsing et nettoyage des réponses numérotées, placeholders
- variants.py : conversions déterministes (chinois simplifié -> traditionnel)
- translator.py : BatchTranslator (cache, lots, validation, repli)

Usage :
    >>> from locale_sync.translation.translator import BatchTranslator
    >>> from locale_sync.translation import extract_placeholders
    >>> extract_placeholders("{{x}}开始时间")
    ['{{x}}']

BatchTranslator n'est pas réexporté ici : checks/ dépend de parser.py et
translator.py dépend de checks/.
"""

from .parser import (
    PLACEHOLDER_PATTERN,
    QUOTE_CHARS,
    clean_line,
    extract_placeholders,
    is_multiline,
    parse_numbered_response,
    strip_wrapping_quotes,
)
from .variants import DEFAULT_CONVERTERS, find_converter

__all__ = [
    "PLACEHOLDER_PATTERN",
    "QUOTE_CHARS",
    "clean_line",
    "extract_placeholders",
    "is_multiline",
    "parse_numbered_response",
    "strip_wrapping_quotes",
    "DEFAULT_CONVERTERS",
    "find_converter",
]
