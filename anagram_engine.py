"""
Anagram Engine

Generates every distinct arrangement of a fragment's letters and keeps the
ones that are real words. Repeated letters collapse duplicate arrangements,
so "aab" gives three anagrams rather than six.
"""

import logging
from typing import Iterable, List, Optional, Set

from lookup_tables import TablesNotReady

logger = logging.getLogger(__name__)

# Above this length, generating every permutation costs more than scanning
# the word list (9! = 362,880 arrangements before deduplication)
MAX_GENERATED_LENGTH = 8


class AnagramEngine:
    """Multiset permutations of a fragment, filtered against a word list"""

    def __init__(self, max_generated_length: int = MAX_GENERATED_LENGTH):
        self.max_generated_length = max_generated_length

    def generate(self, fragment: str) -> Set[str]:
        """
        Every distinct permutation of the fragment's letters

        Each position in turn leads, followed by every distinct permutation
        of the letters left once that one occurrence is removed. A letter
        value already used as the lead at this level is skipped, since it can
        only reproduce arrangements already in the set.
        """
        if len(fragment) <= 1:
            return {fragment}

        result = set()
        leads_seen = set()
        for i, char in enumerate(fragment):
            if char in leads_seen:
                continue
            leads_seen.add(char)

            remaining = fragment[:i] + fragment[i + 1:]
            for tail in self.generate(remaining):
                result.add(char + tail)

        return result

    def filter_against_wordlist(self, anagrams: Iterable[str],
                                wordlist: Optional[Set[str]]) -> List[str]:
        """
        Keep the anagrams that appear in the word list (case-insensitive)

        Results are sorted alphabetically so the same fragment always renders
        the same way.
        """
        if wordlist is None:
            raise TablesNotReady('wordlist')

        return sorted({a for a in anagrams if a.lower() in wordlist})

    def find_in_wordlist(self, fragment: str, wordlist: Optional[Set[str]]) -> List[str]:
        """
        Words in the list that are anagrams of the fragment

        Short fragments go through generate + filter. Long ones compare
        sorted-letter signatures against the word list instead, which finds
        exactly the same words.
        """
        if wordlist is None:
            raise TablesNotReady('wordlist')

        fragment = fragment.lower()
        if len(fragment) <= self.max_generated_length:
            return self.filter_against_wordlist(self.generate(fragment), wordlist)

        logger.debug("Signature scan for %d-letter fragment '%s'", len(fragment), fragment)
        signature = sorted(fragment)
        return sorted(
            word for word in wordlist
            if len(word) == len(fragment) and sorted(word) == signature
        )
