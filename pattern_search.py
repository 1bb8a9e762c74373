"""
External pattern-search services

OneLook (results fetched through the Datamuse API) and Nutrimatic (linked by
query URL). Both take a single pattern string such as 'ca*' or '<tca>'.
"""

import logging
from typing import Dict, List, Optional
from urllib.parse import quote, urlencode

import requests

logger = logging.getLogger(__name__)

DATAMUSE_URL = 'https://api.datamuse.com/words'
ONELOOK_URL = 'https://www.onelook.com/'
NUTRIMATIC_URL = 'https://nutrimatic.org/2024/'

MAX_RESULTS = 200
REQUEST_TIMEOUT = 15


class PatternSearchError(Exception):
    """The pattern-search service could not be reached or answered badly"""


def onelook_url(pattern: str) -> str:
    return f"{ONELOOK_URL}?{urlencode({'w': pattern, 'scwo': 1, 'ssbp': 1})}"


def nutrimatic_url(pattern: str) -> str:
    return f"{NUTRIMATIC_URL}?q={quote(pattern, safe='')}"


# service id -> (label, query URL builder)
PATTERN_SERVICES = {
    'onelook': ('OneLook', onelook_url),
    'nutrimatic': ('Nutrimatic', nutrimatic_url),
}


def service_url(service: str, pattern: str) -> str:
    _, build_url = PATTERN_SERVICES[service]
    return build_url(pattern)


class DatamuseClient:
    """Spelled-like search against Datamuse, the API behind OneLook"""

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()

    def search(self, pattern: str, max_results: int = MAX_RESULTS) -> List[Dict]:
        """
        Words matching a spelling pattern

        Returns:
            List of {'word', 'length', 'score'} dicts in Datamuse's order
        """
        if not pattern:
            return []

        try:
            response = self.session.get(
                DATAMUSE_URL,
                params={'sp': pattern, 'max': max_results, 'scwo': 1, 'ssbp': 1},
                timeout=REQUEST_TIMEOUT
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout:
            logger.error("Datamuse timeout for pattern '%s'", pattern)
            raise PatternSearchError('Failed to fetch results')
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error("Datamuse error for pattern '%s': %s", pattern, e)
            raise PatternSearchError('Failed to fetch results') from e

        return [
            {'word': item['word'], 'length': len(item['word']), 'score': item.get('score')}
            for item in data
            if isinstance(item, dict) and item.get('word')
        ]
