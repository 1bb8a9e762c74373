"""
Wordplay analysis session

One user's view: the headword and letter selection, the active mode, and
the dictionary lookups issued for them. Must be driven from a single asyncio
event loop.

Every change to the selection or navigation bumps a request token. A lookup
remembers the token it was issued under; when it fails after the user has
moved on, the failure is dropped instead of replacing what is on screen.
Successful lookups land in the shared cache under their own fragment, so a
late answer for an old fragment can never show up for the current one.
"""

import asyncio
import logging
from typing import Callable, Optional, Tuple

from dictionary_client import DictionaryError
from letter_selection import LetterSelectionModel
from lookup_tables import LookupTables
from navigation import NavigationStateMachine
from results import ErrorMessage, Pending, Result

logger = logging.getLogger(__name__)

DEFAULT_WORD = 'example'


class WordplaySession:
    """Selection + navigation + dictionary lookups for one user"""

    def __init__(self, tables_source: Callable[[], LookupTables], cache,
                 word: Optional[str] = DEFAULT_WORD,
                 navigation: Optional[NavigationStateMachine] = None):
        self._tables_source = tables_source
        self._cache = cache
        self.selection = LetterSelectionModel(word)
        self.navigation = navigation or NavigationStateMachine()

        self._token = 0
        self._task: Optional[asyncio.Task] = None
        self._failure: Optional[Tuple[int, str]] = None

        self.refresh()

    @property
    def token(self) -> int:
        return self._token

    @property
    def fragment(self) -> str:
        return self.selection.fragment()

    # ========================================================================
    # State changes
    # ========================================================================

    def set_word(self, word: Optional[str]):
        self.selection.set_word(word)
        self._changed()

    def toggle(self, index) -> bool:
        changed = self.selection.toggle(index)
        if changed:
            self._changed()
        return changed

    def select_all(self):
        self.selection.select_all()
        self._changed()

    def clear_selection(self):
        self.selection.clear()
        self._changed()

    def select_mode(self, mode_id: str) -> bool:
        accepted = self.navigation.select_mode(mode_id)
        if accepted:
            self._changed()
        return accepted

    def select_submode(self, submode_id: str) -> bool:
        accepted = self.navigation.select_submode(submode_id)
        if accepted:
            self._changed()
        return accepted

    def retry(self):
        """Forget a transient failure and look the fragment up again"""
        self._failure = None
        self.refresh()

    def _changed(self):
        self._token += 1
        self._failure = None
        self.refresh()

    # ========================================================================
    # Lookups
    # ========================================================================

    def refresh(self):
        """Start the dictionary lookup the current view needs, if any"""
        if self._failure is not None:
            return

        key = self.navigation.lookup_key(self.fragment, self.selection.word)
        if key is None or self._cache.peek(key) is not None:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; lookup for '%s' deferred", key)
            return

        self._task = loop.create_task(self._resolve(self._token, key))

    async def _resolve(self, token: int, key: str):
        try:
            await self._cache.get(key)
        except DictionaryError as e:
            if token != self._token:
                logger.debug("Dropping stale failure for '%s' (token %d, now %d)", key, token, self._token)
                return
            self._failure = (token, str(e))

    async def wait_for_lookup(self, timeout: Optional[float] = None):
        """Wait (up to timeout seconds) for the most recent lookup to settle"""
        task = self._task
        if task is None or task.done():
            return
        await asyncio.wait({task}, timeout=timeout)

    def result(self) -> Result:
        if self._failure is not None and self._failure[0] == self._token:
            return ErrorMessage(self._failure[1])

        result = self.navigation.dispatch(
            self.fragment, self._tables_source(), self._cache, headword=self.selection.word
        )
        if isinstance(result, Pending) and (self._task is None or self._task.done()):
            # No loop was running when the view changed
            self.refresh()
        return result

    def state(self) -> dict:
        mode, submode = self.navigation.state()
        return {
            'word': self.selection.word,
            'letters': self.selection.letters(),
            'selection': sorted(self.selection.selection),
            'fragment': self.fragment,
            'mode': mode,
            'submode': submode,
            'loading': self._cache.is_loading,
        }
