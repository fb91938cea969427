"""
Segmentation des textes à traduire en lots bornés en caractères.

Un lot est envoyé au traducteur en une seule requête, sous forme de lignes
numérotées :

    1. 你好
    2. 开始时间必须大于等于{slot0}

La taille d'un lot est bornée par un budget de caractères (et non par un
nombre d'éléments) : les lots restent denses quelle que soit la longueur
des textes, tout en respectant la limite de charge utile de l'API.
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator

from .errors import ValidationError
from .logger import get_logger

logger = get_logger(__name__)

# Budget par défaut d'un lot, en caractères
DEFAULT_CHAR_LIMIT = 1800


@dataclass(frozen=True)
class BatchItem:
    """Un couple (clé de traduction, texte source)."""

    key: str
    text: str


@dataclass
class Batch:
    """
    Lot ordonné d'éléments envoyés ensemble au traducteur.

    Attributes:
        index: Numéro séquentiel du lot (commence à 0)
        items: Éléments du lot, dans l'ordre d'insertion
    """

    index: int
    items: list[BatchItem] = field(default_factory=list)

    @staticmethod
    def format_line(position: int, text: str) -> str:
        """Ligne numérotée (position commençant à 1)."""
        return f"{position}. {text}"

    def lines(self) -> list[str]:
        return [
            self.format_line(position, item.text)
            for position, item in enumerate(self.items, start=1)
        ]

    @property
    def char_count(self) -> int:
        """Longueur du bloc numéroté, sauts de ligne compris."""
        lines = self.lines()
        return sum(len(line) for line in lines) + max(len(lines) - 1, 0)

    @property
    def keys(self) -> list[str]:
        return [item.key for item in self.items]

    @property
    def texts(self) -> list[str]:
        return [item.text for item in self.items]

    def __len__(self) -> int:
        return len(self.items)

    def __str__(self) -> str:
        """Bloc envoyé au traducteur : "1. texte\\n2. texte..."."""
        return "\n".join(self.lines())


class Segmentator:
    """
    Regroupe les éléments en lots dont le bloc numéroté tient dans le budget.

    L'ordre des éléments est conservé. Un élément qui dépasse à lui seul le
    budget part seul dans son propre lot (jamais découpé ni abandonné).

    Example:
        >>> items = [BatchItem("a", "x" * 10), BatchItem("b", "y" * 10)]
        >>> [len(b) for b in Segmentator(items, char_limit=15)]
        [1, 1]
    """

    def __init__(
        self, items: Iterable[BatchItem], char_limit: int = DEFAULT_CHAR_LIMIT
    ) -> None:
        if char_limit < 1:
            raise ValidationError(f"char_limit doit être positif (reçu {char_limit})")
        self.items = list(items)
        self.char_limit = char_limit

    def get_all_batches(self) -> Iterator[Batch]:
        """Génère les lots à la demande, dans l'ordre des éléments."""
        current = Batch(index=0)
        current_size = 0

        for item in self.items:
            position = len(current.items) + 1
            line_size = len(Batch.format_line(position, item.text))
            # Un saut de ligne sépare chaque ligne de la précédente
            added = line_size + (1 if current.items else 0)

            if current.items and current_size + added > self.char_limit:
                yield current
                current = Batch(index=current.index + 1)
                current_size = 0
                line_size = len(Batch.format_line(1, item.text))
                added = line_size

            if not current.items and line_size > self.char_limit:
                logger.debug(
                    f"📏 Élément {item.key!r} plus long que le budget "
                    f"({line_size} > {self.char_limit}), envoyé seul"
                )

            current.items.append(item)
            current_size += added

        if current.items:
            yield current

    def __iter__(self) -> Iterator[Batch]:
        return self.get_all_batches()
