"""Shared test fixtures. Fixture tables and a fake dictionary stand in for the data files and Wordnik."""
from unittest.mock import patch

import pytest

from dictionary_client import Definition, DictionaryError, WordData, WordNotFound
from fragment_cache import FragmentDataCache
from lookup_tables import LookupTables


WORDS = [
    'act', 'at', 'bat', 'cat', 'cats', 'coat', 'coats', 'example', 'exam',
    'ample', 'maple', 'read', 'react', 'return', 'tree', 'tea', 'eat', 'ate',
    'eta', 'sample', 'examples',
]

ABBREVIATIONS = {
    'ex': ['former partner', 'old flame'],
    'st': ['street', 'saint'],
    'c': 'about',
}

INDICATORS = {
    'anagrams': {
        'disorder': ['confused', 'jumbled'],
        'first_damage': ['broken'],
    },
    'hidden': {
        'containment': ['in', 'within'],
    },
}

DICTIONARY = {
    'example': WordData(
        definitions=(Definition('noun', 'A representative <xref>instance</xref>.'),),
        synonyms=('instance', 'sample'),
    ),
    'exam': WordData(
        definitions=(Definition('noun', 'An examination.'),),
        synonyms=(),
    ),
    'cat': WordData(definitions=(Definition('noun', 'A small feline.'),), synonyms=('feline',)),
    'dog': WordData(definitions=(Definition('noun', 'A canine.'),), synonyms=('hound',)),
}


class FakeDictionary:
    """
    Stands in for DictionaryClient

    Records every lookup. A word listed in `gates` waits on that asyncio.Event
    before answering, so tests can hold a response back.
    """

    def __init__(self, entries=None, failures=()):
        self.entries = dict(DICTIONARY if entries is None else entries)
        self.failures = set(failures)
        self.gates = {}
        self.calls = []

    async def lookup(self, word):
        self.calls.append(word)
        gate = self.gates.get(word)
        if gate is not None:
            await gate.wait()
        if word in self.failures:
            raise DictionaryError('Failed to fetch word data. Please check your API key.')
        if word in self.entries:
            return self.entries[word]
        raise WordNotFound(word)


@pytest.fixture
def tables():
    return LookupTables.build(wordlist=WORDS, abbreviations=ABBREVIATIONS, indicators=INDICATORS)


@pytest.fixture
def fake_dictionary():
    return FakeDictionary()


@pytest.fixture
def cache(fake_dictionary):
    return FragmentDataCache(fake_dictionary)


@pytest.fixture
def app(tables, cache):
    import wordplay_app

    wordplay_app.app.config['TESTING'] = True
    wordplay_app.app.config['SECRET_KEY'] = 'test-secret'
    wordplay_app.sessions.clear()

    with patch('wordplay_app.get_tables', return_value=tables), \
            patch('wordplay_app.lookup_cache', cache), \
            patch('wordplay_app.RESULT_WAIT_SECONDS', 2):
        yield wordplay_app.app

    wordplay_app.sessions.clear()


@pytest.fixture
def client(app):
    return app.test_client()
