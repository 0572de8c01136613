"""Texture categories and resolution of external category identifiers."""

import json
import re
from enum import IntEnum
from pathlib import Path
from typing import Dict, Optional, Union

from ..utils.logging import get_logger

logger = get_logger(__name__)


class Category(IntEnum):
    """The eighteen elemental categories that select a palette."""

    NORMAL = 0
    FIGHTING = 1
    FLYING = 2
    POISON = 3
    GROUND = 4
    ROCK = 5
    BUG = 6
    GHOST = 7
    STEEL = 8
    FIRE = 9
    WATER = 10
    GRASS = 11
    ELECTRIC = 12
    PSYCHIC = 13
    ICE = 14
    DRAGON = 15
    DARK = 16
    FAIRY = 17

    @property
    def display_name(self) -> str:
        return self.name.capitalize()


DEFAULT_CATEGORY = Category.NORMAL

CategoryId = Union[Category, int, str]

BUNDLE_PATTERN = re.compile(r"^pm(\d{4})_\d{2}(_\d{2})?$", re.IGNORECASE)


def lookup_category(value: CategoryId) -> Optional[Category]:
    """Look up a category by enum, integer id or (case-insensitive) name.

    Returns:
        The matching category, or None when the id is unknown
    """
    if isinstance(value, Category):
        return value

    if isinstance(value, bool):
        return None

    if isinstance(value, int):
        try:
            return Category(value)
        except ValueError:
            return None

    if isinstance(value, str):
        text = value.strip()
        if text.lstrip("-").isdigit():
            return lookup_category(int(text))
        return Category.__members__.get(text.upper())

    return None


def resolve_category(
    value: Optional[CategoryId], default: Category = DEFAULT_CATEGORY
) -> Category:
    """Resolve an external category id, falling back to ``default``.

    Unknown ids are not an error: a warning is logged and the default returned.
    """
    category = lookup_category(value) if value is not None else None
    if category is None:
        logger.warning(
            f"Unknown category {value!r}, using {default.display_name} instead"
        )
        return default
    return category


def monsno_from_bundle(bundle_name: str) -> Optional[int]:
    """Extract the creature number from a ``pm####_##[_##]`` bundle name."""
    match = BUNDLE_PATTERN.match(Path(bundle_name).name)
    if not match:
        return None
    return int(match.group(1))


class MonsterTable:
    """Maps creature numbers to their primary category.

    Loaded from a personal-data table of the form
    ``{"Personal": [{"monsno": 1, "type1": 11, ...}, ...]}``.
    """

    def __init__(self, categories: Optional[Dict[int, int]] = None):
        self._categories: Dict[int, int] = dict(categories or {})

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "MonsterTable":
        """Load a personal table from JSON.

        Entries with ``monsno`` 0 are placeholders and are skipped. When a
        creature has several forms the first entry wins.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file does not contain a ``Personal`` list
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Personal table not found at: {path}")

        logger.info(f"Loading creature data from: {path}")
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        entries = data.get("Personal") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise ValueError(f"Invalid personal table format in {path}")

        categories: Dict[int, int] = {}
        for entry in entries:
            monsno = int(entry.get("monsno", 0))
            if monsno <= 0 or monsno in categories:
                continue
            categories[monsno] = int(entry.get("type1", DEFAULT_CATEGORY))

        logger.info(f"Loaded data for {len(categories)} creatures")
        return cls(categories)

    def __len__(self) -> int:
        return len(self._categories)

    def __contains__(self, monsno: int) -> bool:
        return monsno in self._categories

    def category_for(self, monsno: int) -> Category:
        """Get the primary category of a creature, default when unknown."""
        if monsno not in self._categories:
            logger.warning(f"No category data for creature {monsno}")
            return DEFAULT_CATEGORY
        return resolve_category(self._categories[monsno])

    def category_for_bundle(self, bundle_name: str) -> Category:
        """Get the category for a bundle name such as ``pm0025_00_00``."""
        monsno = monsno_from_bundle(bundle_name)
        if monsno is None:
            logger.warning(f"Cannot read creature number from bundle '{bundle_name}'")
            return DEFAULT_CATEGORY
        return self.category_for(monsno)
