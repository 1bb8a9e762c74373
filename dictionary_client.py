"""
Wordnik Dictionary Client

Fetches definitions and synonyms for a word. "Word not found" is a normal
outcome and is reported with its own exception so callers can cache it;
anything else that goes wrong (network, auth, bad JSON) is a DictionaryError
and is worth retrying later.
"""

import asyncio
import logging
import os
import re
from typing import List, NamedTuple, Optional, Tuple
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

WORDNIK_BASE_URL = 'https://api.wordnik.com/v4/word.json'
DEFINITION_LIMIT = 5
SYNONYM_LIMIT = 10
REQUEST_TIMEOUT = 15

FETCH_FAILED_MESSAGE = 'Failed to fetch word data. Please check your API key.'

_XREF_TAG = re.compile(r'</?xref>')


class Definition(NamedTuple):
    part_of_speech: str
    text: str


class WordData(NamedTuple):
    definitions: Tuple[Definition, ...]
    synonyms: Tuple[str, ...]

    @property
    def is_empty(self) -> bool:
        return not self.definitions and not self.synonyms


class WordNotFound(Exception):
    """The dictionary has no entry for the word"""

    def __init__(self, word: str):
        super().__init__(f"No dictionary entry for '{word}'")
        self.word = word


class DictionaryError(Exception):
    """Transient dictionary failure (network, auth, parse); never cached"""


def strip_xref_markup(text: Optional[str]) -> str:
    return _XREF_TAG.sub('', text) if text else ''


def parse_definitions(payload) -> Tuple[Definition, ...]:
    if not isinstance(payload, list):
        return ()
    return tuple(
        Definition(
            part_of_speech=entry.get('partOfSpeech') or 'unknown',
            text=strip_xref_markup(entry.get('text') or 'No definition available'),
        )
        for entry in payload
        if isinstance(entry, dict)
    )


def parse_synonyms(payload) -> Tuple[str, ...]:
    """Pull the synonym word list out of a relatedWords response"""
    if not isinstance(payload, list):
        return ()
    for relation in payload:
        if isinstance(relation, dict) and relation.get('relationshipType') == 'synonym':
            return tuple(relation.get('words') or ())
    return ()


class DictionaryClient:
    """Wordnik definitions + related words"""

    def __init__(self, api_key: Optional[str] = None, base_url: str = WORDNIK_BASE_URL):
        self.api_key = api_key or os.environ.get('WORDNIK_API_KEY')
        self.base_url = base_url
        self.session = requests.Session()

    async def lookup(self, word: str) -> WordData:
        """Fetch without blocking the event loop"""
        return await asyncio.to_thread(self.fetch, word)

    def fetch(self, word: str) -> WordData:
        """
        Fetch definitions and synonyms for one word

        A 404 from relatedWords only means there are no synonyms; the
        definitions already fetched are kept.

        Raises:
            WordNotFound: the definitions endpoint answered 404
            DictionaryError: any other failure
        """
        if not self.api_key:
            logger.warning("Wordnik: No WORDNIK_API_KEY set")
            raise DictionaryError(FETCH_FAILED_MESSAGE)

        definitions = parse_definitions(self._get_json(word, 'definitions', {
            'limit': DEFINITION_LIMIT,
        }))
        try:
            related = self._get_json(word, 'relatedWords', {
                'relationshipTypes': 'synonym',
                'limitPerRelationshipType': SYNONYM_LIMIT,
            })
        except WordNotFound:
            logger.info("No related words for '%s'", word)
            related = []
        synonyms = parse_synonyms(related)

        if not definitions:
            logger.warning("No definitions found for word: %s", word)

        return WordData(definitions=definitions, synonyms=synonyms)

    def _get_json(self, word: str, resource: str, params: dict):
        url = f"{self.base_url}/{quote(word, safe='')}/{resource}"
        try:
            response = self.session.get(
                url,
                params=dict(params, api_key=self.api_key),
                timeout=REQUEST_TIMEOUT
            )
        except requests.exceptions.Timeout:
            logger.error("Wordnik timeout fetching %s for '%s'", resource, word)
            raise DictionaryError(FETCH_FAILED_MESSAGE)
        except requests.exceptions.RequestException as e:
            logger.error("Wordnik request error for '%s': %s", word, e)
            raise DictionaryError(FETCH_FAILED_MESSAGE) from e

        if response.status_code == 404:
            raise WordNotFound(word)
        if response.status_code != 200:
            logger.error("Wordnik error: Status %s - %s", response.status_code, response.text[:200])
            raise DictionaryError(FETCH_FAILED_MESSAGE)

        try:
            return response.json()
        except ValueError as e:
            logger.error("Wordnik JSON parse error for '%s': %s", word, e)
            raise DictionaryError(FETCH_FAILED_MESSAGE) from e


def format_definitions(definitions: List[Definition]) -> List[str]:
    return [f"({d.part_of_speech}) {d.text}" for d in definitions]
