"""
Navigation State Machine

Tracks the active mode (primary nav) and submode (secondary nav), and routes
the current fragment to the analysis they select.

Modes come in two shapes:
- SimpleMode: no secondary nav (Def, Syn, Abbr)
- CompositeMode: an ordered list of submodes; picking the mode always lands
  on its first submode (Anagram, Starts, Ends, Center, Indicators)
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from anagram_engine import AnagramEngine
from dictionary_client import format_definitions
from lookup_tables import INDICATOR_CATEGORIES, LookupTables, TablesNotReady, indicator_sections
from pattern_search import PATTERN_SERVICES, service_url
from positional_matcher import PositionalMatcher
from results import (
    ListResult, NoSelection, NotReady, PatternQuery, Pending, Result,
    SectionsResult, TextResult,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Submode:
    id: str
    label: str


@dataclass(frozen=True)
class SimpleMode:
    id: str
    label: str


@dataclass(frozen=True)
class CompositeMode:
    id: str
    label: str
    submodes: Tuple[Submode, ...]

    @property
    def first_submode(self) -> str:
        return self.submodes[0].id

    def has_submode(self, submode_id: str) -> bool:
        return any(s.id == submode_id for s in self.submodes)


Mode = Union[SimpleMode, CompositeMode]

WORDLIST = Submode('wordlist', 'Wordlist')
ONELOOK = Submode('onelook', 'OneLook')
NUTRIMATIC = Submode('nutrimatic', 'Nutrimatic')

DEFAULT_MODE = 'definition'

MODES: Tuple[Mode, ...] = (
    SimpleMode('definition', 'Def'),
    SimpleMode('synonyms', 'Syn'),
    SimpleMode('abbreviations', 'Abbr'),
    CompositeMode('anagram', 'Anagram', (WORDLIST, NUTRIMATIC, ONELOOK)),
    CompositeMode('starts', 'Starts', (WORDLIST, ONELOOK, NUTRIMATIC)),
    CompositeMode('ends', 'Ends', (WORDLIST, ONELOOK, NUTRIMATIC)),
    CompositeMode('center', 'Center', (WORDLIST, ONELOOK, NUTRIMATIC)),
    CompositeMode('indicators', 'Indicators', tuple(
        Submode(category, category.capitalize()) for category in INDICATOR_CATEGORIES
    )),
)

# Query grammar shared by the pattern-search services
PATTERN_FORMATS = {
    'anagram': '<{}>',
    'starts': '{}*',
    'ends': '*{}',
    'center': 'A<{}>A',
}

# Modes answered from the dictionary cache
DICTIONARY_MODES = ('definition', 'synonyms')
POSITIONAL_MODES = ('starts', 'ends', 'center')

POSITION_PHRASES = {
    'starts': 'starting with',
    'ends': 'ending with',
    'center': 'containing',
}


def format_pattern(mode_id: str, fragment: str) -> str:
    """Pattern string handed to an external pattern-search service"""
    if mode_id not in PATTERN_FORMATS:
        raise ValueError(f"Mode '{mode_id}' has no search pattern")
    return PATTERN_FORMATS[mode_id].format(fragment)


def mode_config(modes=MODES) -> list:
    """Mode configuration as plain data for the front end"""
    config = []
    for mode in modes:
        entry = {'id': mode.id, 'label': mode.label, 'submodes': []}
        if isinstance(mode, CompositeMode):
            entry['submodes'] = [{'id': s.id, 'label': s.label} for s in mode.submodes]
        config.append(entry)
    return config


class NavigationStateMachine:
    """Active (mode, submode) plus routing of a fragment to its analysis"""

    def __init__(self, modes: Tuple[Mode, ...] = MODES, default_mode: str = DEFAULT_MODE,
                 anagram_engine: Optional[AnagramEngine] = None,
                 matcher: Optional[PositionalMatcher] = None):
        self._modes: Dict[str, Mode] = {mode.id: mode for mode in modes}
        if default_mode not in self._modes:
            raise ValueError(f"Default mode '{default_mode}' is not configured")

        self.default_mode = default_mode
        self.anagram_engine = anagram_engine or AnagramEngine()
        self.matcher = matcher or PositionalMatcher()

        self.mode: str = default_mode
        self.submode: Optional[str] = None
        self.select_mode(default_mode)

    @property
    def modes(self) -> Tuple[Mode, ...]:
        return tuple(self._modes.values())

    @property
    def active(self) -> Mode:
        return self._modes[self.mode]

    def state(self) -> Tuple[str, Optional[str]]:
        return self.mode, self.submode

    def select_mode(self, mode_id: str) -> bool:
        """
        Switch primary mode

        Composite modes reset to their first submode, simple modes clear it.
        Unknown ids are ignored. Returns True if the id was accepted.
        """
        mode = self._modes.get(mode_id)
        if mode is None:
            logger.debug("Ignoring unknown mode %r", mode_id)
            return False

        self.mode = mode.id
        if isinstance(mode, CompositeMode):
            self.submode = mode.first_submode
        else:
            self.submode = None
        return True

    def select_submode(self, submode_id: str) -> bool:
        mode = self.active
        if not isinstance(mode, CompositeMode):
            logger.debug("Ignoring submode %r: mode '%s' has none", submode_id, mode.id)
            return False
        if not mode.has_submode(submode_id):
            logger.debug("Ignoring unknown submode %r for mode '%s'", submode_id, mode.id)
            return False

        self.submode = submode_id
        return True

    # ========================================================================
    # Dispatch
    # ========================================================================

    def lookup_key(self, fragment: str, headword: str = '') -> Optional[str]:
        """
        The word the dictionary cache must hold for the current mode, or None
        if the mode does not use the dictionary

        The default dictionary view falls back to the headword when nothing is
        selected.
        """
        if self.mode not in DICTIONARY_MODES:
            return None
        if not fragment and self.mode == self.default_mode:
            return headword or None
        return fragment or None

    def dispatch(self, fragment: str, tables: LookupTables, cache, headword: str = '') -> Result:
        """
        Run the analysis selected by (mode, submode) on the fragment

        Args:
            fragment: currently selected letters
            tables: loaded (or still loading) static tables
            cache: FragmentDataCache for definitions and synonyms
            headword: full word, used by the default view when nothing is selected

        Returns:
            One result variant. Dictionary data not cached yet gives Pending;
            the caller is responsible for starting the fetch.
        """
        if not fragment and self.mode != self.default_mode:
            return NoSelection()

        try:
            if self.mode in DICTIONARY_MODES:
                return self._dictionary_result(self.lookup_key(fragment, headword), cache)
            if self.mode == 'abbreviations':
                return self._abbreviation_result(fragment, tables)
            if self.mode == 'indicators':
                return self._indicator_result(tables)
            if self.submode in PATTERN_SERVICES:
                return self._pattern_query(fragment)
            if self.mode == 'anagram':
                return self._anagram_result(fragment, tables)
            if self.mode in POSITIONAL_MODES:
                return self._positional_result(fragment, tables)
        except TablesNotReady as e:
            return NotReady(f"Loading {e.table}...")

        return TextResult('Select a filter to see results')

    def _dictionary_result(self, key: Optional[str], cache) -> Result:
        if key is None:
            return NoSelection()

        data = cache.peek(key)
        if data is None:
            return Pending(f"Loading {self.mode}...")

        if self.mode == 'definition':
            if not data.definitions:
                return TextResult(f'No definition found for "{key}"')
            return ListResult(tuple(format_definitions(data.definitions)))

        if not data.synonyms:
            return TextResult(f'No synonyms found for "{key}"')
        return ListResult(tuple(data.synonyms))

    def _abbreviation_result(self, fragment: str, tables: LookupTables) -> Result:
        meanings = tables.lookup_abbreviation(fragment)
        if not meanings:
            return TextResult(f'No cryptic abbreviations found for "{fragment.upper()}"')
        return ListResult(tuple(meanings))

    def _indicator_result(self, tables: LookupTables) -> Result:
        category = tables.lookup_indicator_category(self.submode)
        if not category:
            return TextResult(f'No {self.submode} indicators found')
        return SectionsResult(tuple(indicator_sections(category)))

    def _pattern_query(self, fragment: str) -> Result:
        pattern = format_pattern(self.mode, fragment)
        return PatternQuery(service=self.submode, pattern=pattern,
                            url=service_url(self.submode, pattern))

    def _anagram_result(self, fragment: str, tables: LookupTables) -> Result:
        anagrams = self.anagram_engine.find_in_wordlist(fragment, tables.wordlist)
        if not anagrams:
            return TextResult(f'No valid anagrams found for "{fragment}"')
        return ListResult(tuple(anagrams))

    def _positional_result(self, fragment: str, tables: LookupTables) -> Result:
        match = self.matcher.search(self.mode, fragment, tables.wordlist)
        phrase = POSITION_PHRASES[self.mode]
        if self.mode == 'center':
            where = f"'{fragment}' in the middle"
        else:
            where = f"'{fragment}'"

        if not match.words:
            return TextResult(f"No words found {phrase} {where}")

        heading = f"Found {match.total_count} words {phrase} {where}"
        if match.truncated:
            heading += f" (showing first {len(match.words)})"

        return ListResult(
            items=tuple(f"{word} ({len(word)})" for word in match.words),
            heading=heading,
            total_count=match.total_count,
            truncated=match.truncated,
        )
