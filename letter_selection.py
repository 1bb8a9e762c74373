"""
Letter Selection Model

Owns the headword being analyzed and the set of selected letter positions.
The fragment is always built in the headword's left-to-right order, no matter
which order the letters were clicked in.
"""

import logging
from typing import FrozenSet, List, Optional

logger = logging.getLogger(__name__)


class LetterSelectionModel:
    """Headword plus a selected subset of its letter indices"""

    def __init__(self, word: Optional[str] = None):
        self._word = ''
        self._selected = set()
        self.set_word(word)

    @property
    def word(self) -> str:
        return self._word

    @property
    def selection(self) -> FrozenSet[int]:
        return frozenset(self._selected)

    def letters(self) -> List[str]:
        return list(self._word)

    def set_word(self, word: Optional[str]):
        """Replace the headword and select every letter of it"""
        self._word = (word or '').strip().lower()
        self.select_all()

    def toggle(self, index) -> bool:
        """
        Flip membership of one letter index

        Stale UI can send indices from a previous headword, so anything that
        is not an in-range integer is ignored.

        Returns True if the selection changed
        """
        if isinstance(index, bool) or not isinstance(index, int):
            logger.debug("Ignoring non-integer letter index %r", index)
            return False
        if not 0 <= index < len(self._word):
            logger.debug("Ignoring out-of-range letter index %d for '%s'", index, self._word)
            return False

        if index in self._selected:
            self._selected.remove(index)
        else:
            self._selected.add(index)
        return True

    def select_all(self):
        self._selected = set(range(len(self._word)))

    def clear(self):
        self._selected = set()

    def fragment(self) -> str:
        return ''.join(self._word[i] for i in sorted(self._selected))

    def is_full_word(self) -> bool:
        return len(self._selected) == len(self._word)
