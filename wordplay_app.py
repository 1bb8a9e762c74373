"""
Wordplaying - Cryptic Wordplay Explorer Backend
===============================================

Flask JSON API around the fragment analysis engine:
- Letter selection on a headword
- Definitions and synonyms (Wordnik, cached per fragment)
- Cryptic abbreviations and indicator lists
- Anagram and start / end / center word-list search
- Pattern hand-off to OneLook and Nutrimatic

Run with: python wordplay_app.py
"""

import asyncio
import os
import secrets
import threading
import uuid
from collections import OrderedDict

from flask import Flask, jsonify, request, session
from flask_cors import CORS

from dictionary_client import DictionaryClient
from fragment_cache import FragmentDataCache
from lookup_tables import LookupTables, TablesNotReady, indicator_sections, load_tables
from navigation import mode_config
from pattern_search import DatamuseClient, PatternSearchError
from results import PatternQuery
from wordplay_session import WordplaySession

app = Flask(__name__)
app.secret_key = os.environ.get('SECRET_KEY') or secrets.token_hex(32)

# Session configuration
app.config['SESSION_COOKIE_HTTPONLY'] = True
app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'
CORS(app)

DATA_DIR = os.environ.get('WORDPLAY_DATA_DIR', os.path.join(os.path.dirname(__file__), 'data'))
DEFAULT_WORD = os.environ.get('WORDPLAY_DEFAULT_WORD', 'example')
RESULT_WAIT_SECONDS = float(os.environ.get('WORDPLAY_RESULT_WAIT', '5'))
MAX_SESSIONS = 1000


class BackgroundLoop:
    """
    One asyncio event loop running in a daemon thread

    Sessions and the lookup cache are only ever touched from this loop.
    Request threads hand work over and wait for the answer.
    """

    def __init__(self):
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self.loop.run_forever,
                                        name='wordplay-loop', daemon=True)
        self._thread.start()

    def submit(self, coro):
        return asyncio.run_coroutine_threadsafe(coro, self.loop)

    def run(self, coro, timeout=None):
        return self.submit(coro).result(timeout)

    def call(self, fn, *args, timeout=None):
        """Run a plain function on the loop thread"""
        async def _call():
            return fn(*args)
        return self.run(_call(), timeout)


runner = BackgroundLoop()
dictionary = DictionaryClient()
lookup_cache = FragmentDataCache(dictionary)
pattern_client = DatamuseClient()
tables = LookupTables()
sessions = OrderedDict()


def get_tables() -> LookupTables:
    return tables


async def _load_tables():
    global tables
    tables = await load_tables(DATA_DIR)
    app.logger.info("Tables loaded from %s (complete: %s)", DATA_DIR, tables.is_loaded)


def init_tables():
    """Start loading the static tables; analyses report 'loading' until done"""
    return runner.submit(_load_tables())


def _checkout_session(sid):
    """Find or create the session for sid. Runs on the loop thread only."""
    wordplay = sessions.get(sid) if sid else None
    if wordplay is not None:
        sessions.move_to_end(sid)
        return sid, wordplay

    sid = uuid.uuid4().hex
    wordplay = WordplaySession(lambda: get_tables(), lookup_cache, DEFAULT_WORD)
    sessions[sid] = wordplay
    while len(sessions) > MAX_SESSIONS:
        sessions.popitem(last=False)
    return sid, wordplay


def get_session() -> WordplaySession:
    """The caller's analysis session, created on first use"""
    sid, wordplay = runner.call(_checkout_session, session.get('sid'))
    session['sid'] = sid
    return wordplay


def _headword_from_request() -> str:
    """?word=cathedral, or the bare ?cathedral form"""
    word = request.args.get('word')
    if word is None and request.args:
        word = next(iter(request.args))
    return (word or DEFAULT_WORD).strip().lower()


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


async def _settle(wordplay, wait):
    wordplay.refresh()
    await wordplay.wait_for_lookup(timeout=wait)
    return wordplay.result(), wordplay.state()


def _result_payload(result) -> dict:
    """Serialize a result; OneLook hand-offs also carry the Datamuse matches"""
    data = result.to_dict()
    if isinstance(result, PatternQuery) and result.service == 'onelook':
        # Blocking; runs on the request thread
        try:
            data['matches'] = pattern_client.search(result.pattern)
        except PatternSearchError as e:
            app.logger.error("OneLook matches failed for %s: %s", result.pattern, e)
            data['matches'] = []
            data['error'] = str(e)
    return data


# ============================================================================
# SESSION ROUTES (Letter selection & navigation)
# ============================================================================

@app.route('/api/word')
def start_word():
    """Start analyzing a headword (all letters selected)"""
    wordplay = get_session()
    runner.call(wordplay.set_word, _headword_from_request())
    return jsonify(runner.call(wordplay.state))


@app.route('/api/state')
def get_state():
    """Current headword, selection, fragment and navigation"""
    wordplay = get_session()
    return jsonify(runner.call(wordplay.state))


@app.route('/api/modes')
def get_modes():
    """Primary and secondary navigation configuration"""
    return jsonify({'modes': mode_config()})


@app.route('/api/selection/toggle', methods=['POST'])
def toggle_letter():
    """Toggle one letter; stray indices are ignored"""
    wordplay = get_session()
    runner.call(wordplay.toggle, _json_body().get('index'))
    return jsonify(runner.call(wordplay.state))


@app.route('/api/selection/all', methods=['POST'])
def select_all_letters():
    wordplay = get_session()
    runner.call(wordplay.select_all)
    return jsonify(runner.call(wordplay.state))


@app.route('/api/selection/clear', methods=['POST'])
def clear_letters():
    wordplay = get_session()
    runner.call(wordplay.clear_selection)
    return jsonify(runner.call(wordplay.state))


@app.route('/api/mode', methods=['POST'])
def select_mode():
    """Select a primary mode; unknown ids leave the state unchanged"""
    wordplay = get_session()
    runner.call(wordplay.select_mode, _json_body().get('mode'))
    return jsonify(runner.call(wordplay.state))


@app.route('/api/submode', methods=['POST'])
def select_submode():
    wordplay = get_session()
    runner.call(wordplay.select_submode, _json_body().get('submode'))
    return jsonify(runner.call(wordplay.state))


@app.route('/api/result')
def get_result():
    """
    Result for the current fragment and mode

    Waits briefly for a dictionary lookup; if it is still running the result
    is 'pending' and the client polls again.
    """
    wordplay = get_session()
    result, state = runner.run(_settle(wordplay, RESULT_WAIT_SECONDS),
                               timeout=RESULT_WAIT_SECONDS + 5)
    return jsonify({'state': state, 'result': _result_payload(result)})


@app.route('/api/result/retry', methods=['POST'])
def retry_result():
    """Retry after a dictionary failure"""
    wordplay = get_session()
    runner.call(wordplay.retry)
    result, state = runner.run(_settle(wordplay, RESULT_WAIT_SECONDS),
                               timeout=RESULT_WAIT_SECONDS + 5)
    return jsonify({'state': state, 'result': _result_payload(result)})


# ============================================================================
# TABLE ROUTES (Indicators tab & abbreviations)
# ============================================================================

@app.route('/api/indicators/<category>')
def get_indicators(category):
    """Indicator phrases for one category, grouped by sub-category"""
    try:
        indicators = get_tables().lookup_indicator_category(category)
    except TablesNotReady as e:
        return jsonify({'error': str(e)}), 503

    if not indicators:
        return jsonify({'error': f'No {category} indicators found'}), 404

    return jsonify({
        'category': category,
        'sections': [
            {'title': title, 'items': list(items)}
            for title, items in indicator_sections(indicators)
        ]
    })


@app.route('/api/abbreviations/<fragment>')
def get_abbreviations(fragment):
    try:
        meanings = get_tables().lookup_abbreviation(fragment)
    except TablesNotReady as e:
        return jsonify({'error': str(e)}), 503

    if not meanings:
        return jsonify({'error': f'No cryptic abbreviations found for "{fragment.upper()}"'}), 404

    return jsonify({'fragment': fragment.lower(), 'meanings': list(meanings)})


@app.route('/api/status')
def get_status():
    """Which tables are loaded and how much is cached"""
    current = get_tables()
    return jsonify({
        'tables': {
            'wordlist': current.wordlist is not None,
            'abbreviations': current.abbreviations is not None,
            'indicators': current.indicators is not None,
        },
        'cached_words': len(lookup_cache),
        'loading': lookup_cache.is_loading,
        'sessions': len(sessions),
    })


# ============================================================================
# PATTERN SEARCH
# ============================================================================

@app.route('/api/pattern-search')
def pattern_search():
    """OneLook-style results for a pattern like 'ca*' (via Datamuse)"""
    pattern = request.args.get('pattern', '').strip()
    if not pattern:
        return jsonify({'error': 'No pattern provided'}), 400

    try:
        results = pattern_client.search(pattern)
    except PatternSearchError as e:
        app.logger.error("Pattern search failed for %s: %s", pattern, e)
        return jsonify({'error': str(e)}), 502

    return jsonify({'pattern': pattern, 'count': len(results), 'results': results})


# Start loading tables when running with gunicorn (production)
# This runs on module import, before any requests
init_tables()


if __name__ == '__main__':
    print("\n" + "="*70)
    print("WORDPLAYING - CRYPTIC WORDPLAY EXPLORER")
    print("="*70)
    print("\nServer starting...")
    print(f"Data directory: {DATA_DIR}")
    print("API: http://localhost:5000/api/word?word=" + DEFAULT_WORD)
    if not dictionary.api_key:
        print("\nWORDNIK_API_KEY is not set - definitions and synonyms will fail")
    print("\nPress Ctrl+C to stop\n")

    app.run(debug=True, port=5000, use_reloader=False)
