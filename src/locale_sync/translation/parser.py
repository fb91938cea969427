"""
Parsing et nettoyage des réponses du traducteur.
"""

import re
from typing import Optional

# Placeholders à conserver tels quels : {{x}}, {slot0}, {name}...
PLACEHOLDER_PATTERN = re.compile(r"\{\{[^{}]+\}\}|\{[^{}]+\}")

# Préfixe de numérotation : "1. ", "1、", "1)", "１．"...
NUMBERING_PATTERN = re.compile(r"^\s*(\d+)\s*[.．、)）]\s*")

# Guillemets ASCII et CJK
QUOTE_CHARS = "\"'“”‘’「」『』"

# Ouvrant -> fermant
QUOTE_PAIRS = {'"': '"', "'": "'", "“": "”", "‘": "’", "「": "」", "『": "』"}


def extract_placeholders(text: str) -> list[str]:
    """
    Liste les placeholders d'un texte, dans l'ordre d'apparition.

    Example:
        >>> extract_placeholders("{{x}}开始时间必须大于等于{slot0}")
        ['{{x}}', '{slot0}']
    """
    return PLACEHOLDER_PATTERN.findall(text)


def strip_numbering(line: str) -> str:
    return NUMBERING_PATTERN.sub("", line, count=1)


def strip_wrapping_quotes(text: str) -> str:
    """
    Retire les paires de guillemets qui englobent tout le texte, de manière répétée.

    Une paire n'est retirée que si le premier et le dernier caractère se
    correspondent et que l'intérieur ne contient aucun de ces deux glyphes :
    les guillemets internes ou isolés sont conservés.

    Example:
        >>> strip_wrapping_quotes('"「Hello」"')
        'Hello'
        >>> strip_wrapping_quotes('Click "OK"')
        'Click "OK"'
        >>> strip_wrapping_quotes("「保存」按钮")
        '「保存」按钮'
    """
    text = text.strip()
    while len(text) >= 2 and QUOTE_PAIRS.get(text[0]) == text[-1]:
        opening, closing = text[0], text[-1]
        inner = text[1:-1]
        if opening in inner or closing in inner:
            break
        text = inner.strip()
    return text


def is_multiline(text: str) -> bool:
    """Texte qui occuperait plusieurs lignes d'un lot numéroté."""
    return "\n" in text or "\r" in text


def clean_line(line: str) -> str:
    """Numérotation retirée, guillemets englobants retirés, espaces retirés."""
    return strip_wrapping_quotes(strip_numbering(line.strip()))


def parse_numbered_response(response: str, expected_count: int) -> list[Optional[str]]:
    """
    Associe chaque ligne de la réponse à sa position dans le lot.

    Les lignes numérotées sont rangées selon leur numéro (1 = première
    position). Si le modèle a abandonné toute numérotation, les lignes non
    vides sont prises dans l'ordre. Les positions sans ligne valent None.

    Args:
        response: Sortie brute du traducteur
        expected_count: Nombre de lignes envoyées

    Returns:
        Liste de longueur expected_count : ligne brute (non nettoyée) ou None

    Example:
        >>> parse_numbered_response("1. Hello\\n2. World", 2)
        ['1. Hello', '2. World']
        >>> parse_numbered_response("1. Hello", 2)
        ['1. Hello', None]
    """
    lines = [line for line in response.strip().splitlines() if line.strip()]
    result: list[Optional[str]] = [None] * expected_count

    numbered: dict[int, str] = {}
    for line in lines:
        match = NUMBERING_PATTERN.match(line)
        if match is None:
            continue
        number = int(match.group(1))
        if 1 <= number <= expected_count and number not in numbered:
            numbered[number] = line

    if numbered:
        for number, line in numbered.items():
            result[number - 1] = line
        return result

    for index, line in enumerate(lines[:expected_count]):
        result[index] = line
    return result
