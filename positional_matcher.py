"""
Positional Matcher

Searches the word list for words where the fragment sits at the start, at the
end, or strictly inside. Matches are ranked shortest first, then
alphabetically, and cut down to a display limit while keeping the true count.
"""

import logging
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional

from lookup_tables import TablesNotReady

logger = logging.getLogger(__name__)

MAX_RESULTS = 200

RULES = ('starts', 'ends', 'center')


class MatchResult(NamedTuple):
    words: List[str]
    total_count: int
    truncated: bool


def matches_start(fragment: str, word: str) -> bool:
    return len(word) > len(fragment) and word.startswith(fragment)


def matches_end(fragment: str, word: str) -> bool:
    return len(word) > len(fragment) and word.endswith(fragment)


def matches_center(fragment: str, word: str, even_padding: bool = True) -> bool:
    """
    Fragment occurs strictly inside the word, touching neither edge

    Only the first occurrence is considered. With even_padding the word must
    also leave the same number of spare letters on both sides in total,
    i.e. the length difference has to be even.
    """
    n, m = len(word), len(fragment)
    if n <= m:
        return False
    if even_padding and (n - m) % 2 != 0:
        return False

    index = word.find(fragment)
    if index <= 0:
        return False
    return index + m < n


class PositionalMatcher:
    """Start / end / center substring search over a word list"""

    def __init__(self, limit: int = MAX_RESULTS, even_padding: bool = True):
        self.limit = limit
        self.even_padding = even_padding

    def starts(self, fragment: str, wordlist: Optional[Iterable[str]]) -> MatchResult:
        return self.search('starts', fragment, wordlist)

    def ends(self, fragment: str, wordlist: Optional[Iterable[str]]) -> MatchResult:
        return self.search('ends', fragment, wordlist)

    def center(self, fragment: str, wordlist: Optional[Iterable[str]]) -> MatchResult:
        return self.search('center', fragment, wordlist)

    def search(self, rule: str, fragment: str, wordlist: Optional[Iterable[str]]) -> MatchResult:
        """
        Run one positional rule over the word list

        Args:
            rule: 'starts', 'ends' or 'center'
            fragment: letters to look for
            wordlist: loaded word list, or None while it is still loading

        Returns:
            MatchResult with at most `limit` ranked words, the full match
            count and whether anything was cut off
        """
        if wordlist is None:
            raise TablesNotReady('wordlist')

        predicate = self._predicate(rule)
        fragment = fragment.lower()

        matches = sorted(
            (word for word in wordlist if predicate(fragment, word)),
            key=lambda w: (len(w), w)
        )

        total = len(matches)
        truncated = total > self.limit
        if truncated:
            logger.debug("%s '%s': %d matches, keeping first %d", rule, fragment, total, self.limit)

        return MatchResult(words=matches[:self.limit], total_count=total, truncated=truncated)

    def _predicate(self, rule: str) -> Callable[[str, str], bool]:
        predicates: Dict[str, Callable[[str, str], bool]] = {
            'starts': matches_start,
            'ends': matches_end,
            'center': lambda f, w: matches_center(f, w, even_padding=self.even_padding),
        }
        if rule not in predicates:
            raise ValueError(f"Unknown positional rule: {rule}")
        return predicates[rule]
