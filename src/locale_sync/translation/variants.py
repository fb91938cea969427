"""
Conversions déterministes entre variantes d'écriture.

Pour certaines paires de langues (chinois simplifié -> traditionnel), une
conversion caractère par caractère suffit : pas d'appel réseau, pas de
cache. Ces conversions remplacent le traducteur distant pour la paire.
"""

from typing import Callable, Optional

import zhconv

from ..logger import get_logger
from .parser import PLACEHOLDER_PATTERN

logger = get_logger(__name__)

Converter = Callable[[str], str]


def convert_outside_placeholders(text: str, locale: str) -> str:
    """
    Convertit le texte sans toucher aux placeholders ({名称}, {{x}}...).

    Example:
        >>> convert_outside_placeholders("{名称}汉字", "zh-tw")
        '{名称}漢字'
    """
    parts: list[str] = []
    last = 0
    for match in PLACEHOLDER_PATTERN.finditer(text):
        parts.append(zhconv.convert(text[last:match.start()], locale))
        parts.append(match.group())
        last = match.end()
    parts.append(zhconv.convert(text[last:], locale))
    return "".join(parts)


def to_traditional_taiwan(text: str) -> str:
    return convert_outside_placeholders(text, "zh-tw")


def to_traditional_hong_kong(text: str) -> str:
    return convert_outside_placeholders(text, "zh-hk")


# (langue source, langue cible) -> conversion
DEFAULT_CONVERTERS: dict[tuple[str, str], Converter] = {
    ("zh-CN", "zh-TW"): to_traditional_taiwan,
    ("zh-CN", "zh-HK"): to_traditional_hong_kong,
}


def find_converter(
    source_lang: str,
    target_lang: str,
    converters: Optional[dict[tuple[str, str], Converter]] = None,
) -> Optional[Converter]:
    """
    Retourne la conversion déterministe d'une paire, ou None.

    Example:
        >>> find_converter("zh-CN", "zh-TW")("简体")
        '簡體'
        >>> find_converter("zh-CN", "en-US") is None
        True
    """
    table = DEFAULT_CONVERTERS if converters is None else converters
    return table.get((source_lang, target_lang))


def convert_safely(converter: Converter, text: str) -> str:
    """Applique la conversion ; en cas d'erreur, retourne le texte source."""
    try:
        return converter(text)
    except Exception as e:
        logger.warning(f"⚠️ Conversion de variante échouée pour {text!r} : {e}")
        return text
