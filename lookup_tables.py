"""
Static Lookup Tables

The word list, the cryptic abbreviation dictionary and the eight indicator
category lists. All three are read once from the data directory and are
read-only afterwards. They travel together in one immutable LookupTables
context that is handed to the engine, so tests can build fixture tables
directly.

Data layout:
    data/wordlist.txt           one word per line
    data/abbreviations.yaml     key -> list of meanings
    data/indicators/<id>.yaml   sub-category label -> list of phrases
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

# Indicator categories, in display order
INDICATOR_CATEGORIES = (
    'anagrams', 'hidden', 'insertion', 'deletion',
    'reversal', 'first', 'last', 'edge',
)

WORDLIST_FILE = 'wordlist.txt'
ABBREVIATIONS_FILE = 'abbreviations.yaml'
INDICATORS_DIR = 'indicators'


class TablesNotReady(Exception):
    """A table the analysis needs has not finished loading"""

    def __init__(self, table: str):
        super().__init__(f"The {table} is still loading")
        self.table = table


IndicatorCategory = Mapping[str, Tuple[str, ...]]


@dataclass(frozen=True)
class LookupTables:
    """Immutable context holding every static table (None = not loaded yet)"""

    wordlist: Optional[FrozenSet[str]] = None
    abbreviations: Optional[Mapping[str, Tuple[str, ...]]] = None
    indicators: Optional[Mapping[str, IndicatorCategory]] = None

    @classmethod
    def build(cls, wordlist=None, abbreviations=None, indicators=None) -> 'LookupTables':
        """Build a context from plain Python collections (used by tests and loaders)"""
        return cls(
            wordlist=frozenset(w.lower() for w in wordlist) if wordlist is not None else None,
            abbreviations=_freeze_abbreviations(abbreviations) if abbreviations is not None else None,
            indicators=_freeze_indicators(indicators) if indicators is not None else None,
        )

    @property
    def is_loaded(self) -> bool:
        return None not in (self.wordlist, self.abbreviations, self.indicators)

    def lookup_abbreviation(self, fragment: str) -> Optional[Tuple[str, ...]]:
        """Meanings for an exact (case-insensitive) abbreviation key, or None"""
        if self.abbreviations is None:
            raise TablesNotReady('abbreviation dictionary')
        return self.abbreviations.get(fragment.lower())

    def lookup_indicator_category(self, category_id: str) -> Optional[IndicatorCategory]:
        """Sub-category -> phrases for one of the eight categories, or None"""
        if self.indicators is None:
            raise TablesNotReady('indicator lists')
        if category_id not in INDICATOR_CATEGORIES:
            return None
        return self.indicators.get(category_id)


def _freeze_abbreviations(raw: Mapping) -> Mapping[str, Tuple[str, ...]]:
    table = {}
    for key, meanings in raw.items():
        if isinstance(meanings, (list, tuple)):
            values = tuple(str(m) for m in meanings)
        else:
            values = (str(meanings),)
        table[str(key).lower()] = values
    return MappingProxyType(table)


def _freeze_category(raw: Mapping) -> IndicatorCategory:
    return MappingProxyType({
        str(label): tuple(str(p) for p in phrases)
        for label, phrases in raw.items()
        if isinstance(phrases, (list, tuple))
    })


def _freeze_indicators(raw: Mapping) -> Mapping[str, IndicatorCategory]:
    return MappingProxyType({
        category: _freeze_category(sections)
        for category, sections in raw.items()
    })


# ============================================================================
# Loaders
# ============================================================================

def load_wordlist(path) -> FrozenSet[str]:
    """Read a newline-delimited word list: trimmed, lowercased, deduplicated"""
    words = set()
    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            word = line.strip().lower()
            if word:
                words.add(word)
    logger.info("Loaded wordlist: %d words", len(words))
    return frozenset(words)


def load_abbreviations(path) -> Mapping[str, Tuple[str, ...]]:
    with open(path, 'r', encoding='utf-8') as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected a mapping of abbreviations")

    table = _freeze_abbreviations(raw)
    logger.info("Abbreviations: %d entries", len(table))
    return table


def load_indicators(directory) -> Mapping[str, IndicatorCategory]:
    """
    Read one YAML file per indicator category

    A category whose file is missing or malformed is logged and left out,
    the rest still load.
    """
    directory = Path(directory)
    categories: Dict[str, IndicatorCategory] = {}

    for category in INDICATOR_CATEGORIES:
        path = directory / f"{category}.yaml"
        try:
            with open(path, 'r', encoding='utf-8') as f:
                raw = yaml.safe_load(f) or {}
            if not isinstance(raw, dict):
                raise ValueError("expected a mapping of sub-categories")
            categories[category] = _freeze_category(raw)
        except (OSError, yaml.YAMLError, ValueError) as e:
            logger.error("Error loading %s indicators from %s: %s", category, path, e)

    logger.info("Indicator lists: %d of %d categories", len(categories), len(INDICATOR_CATEGORIES))
    return MappingProxyType(categories)


async def _load_or_none(name: str, loader, path):
    try:
        return await asyncio.to_thread(loader, path)
    except (OSError, yaml.YAMLError, ValueError) as e:
        logger.error("Error loading %s from %s: %s", name, path, e)
        return None


async def load_tables(data_dir) -> LookupTables:
    """
    Load all three tables concurrently without blocking the event loop

    A source that fails to load stays None, so the analyses that need it keep
    reporting "loading" instead of an empty result.
    """
    data_dir = Path(data_dir)
    wordlist, abbreviations, indicators = await asyncio.gather(
        _load_or_none('wordlist', load_wordlist, data_dir / WORDLIST_FILE),
        _load_or_none('abbreviations', load_abbreviations, data_dir / ABBREVIATIONS_FILE),
        _load_or_none('indicators', load_indicators, data_dir / INDICATORS_DIR),
    )
    return LookupTables(wordlist=wordlist, abbreviations=abbreviations, indicators=indicators)


def format_section_title(label: str) -> str:
    """'first_letters' -> 'First Letters'"""
    return ' '.join(part[:1].upper() + part[1:] for part in label.replace('_', ' ').split())


def indicator_sections(category: IndicatorCategory) -> List[Tuple[str, Tuple[str, ...]]]:
    return [(format_section_title(label), phrases) for label, phrases in category.items()]
