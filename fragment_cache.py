"""
Fragment Data Cache

Memoizes dictionary lookups per fragment for the life of the process. Runs on
a single asyncio event loop: the in-flight map is updated before the first
await, so callers asking for the same fragment in the same tick share one
request instead of racing.
"""

import asyncio
import logging
from typing import Dict, Optional

from dictionary_client import DictionaryError, WordData, WordNotFound, strip_xref_markup

logger = logging.getLogger(__name__)

# Stored for words the dictionary does not know, so they are never refetched
NOT_FOUND = WordData(definitions=(), synonyms=())


def _strip_markup(data: WordData) -> WordData:
    return data._replace(definitions=tuple(
        d._replace(text=strip_xref_markup(d.text)) for d in data.definitions
    ))


def _retrieve_exception(future: asyncio.Future):
    # Every waiter may have gone away; mark the failure as seen
    if not future.cancelled():
        future.exception()


class FragmentDataCache:
    """Grow-only, single-flight cache of WordData keyed by fragment"""

    def __init__(self, client):
        self._client = client
        self._entries: Dict[str, WordData] = {}
        self._inflight: Dict[str, asyncio.Future] = {}
        self._loading = 0
        self.fetch_count = 0

    @property
    def is_loading(self) -> bool:
        """True while any dictionary fetch is in flight"""
        return self._loading > 0

    def __contains__(self, fragment: str) -> bool:
        return fragment in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def peek(self, fragment: str) -> Optional[WordData]:
        """Stored entry (possibly NOT_FOUND) or None if never fetched"""
        return self._entries.get(fragment)

    def is_pending(self, fragment: str) -> bool:
        return fragment in self._inflight

    async def get(self, fragment: str) -> WordData:
        """
        Cached entry, or the result of the one fetch for this fragment

        Raises:
            DictionaryError: the fetch failed; nothing is cached, so the next
                call tries again
        """
        entry = self._entries.get(fragment)
        if entry is not None:
            return entry

        future = self._inflight.get(fragment)
        if future is None:
            future = asyncio.ensure_future(self._fetch(fragment))
            future.add_done_callback(_retrieve_exception)
            self._inflight[fragment] = future
        else:
            logger.debug("Joining in-flight lookup for '%s'", fragment)

        # shield: one impatient waiter being cancelled must not cancel the
        # fetch the other waiters share
        return await asyncio.shield(future)

    async def _fetch(self, fragment: str) -> WordData:
        self._loading += 1
        self.fetch_count += 1
        try:
            try:
                data = _strip_markup(await self._client.lookup(fragment))
            except WordNotFound:
                logger.info("No dictionary entry for '%s'", fragment)
                data = NOT_FOUND
            self._entries[fragment] = data
            return data
        except DictionaryError as e:
            logger.warning("Dictionary lookup for '%s' failed: %s", fragment, e)
            raise
        finally:
            self._loading -= 1
            self._inflight.pop(fragment, None)
