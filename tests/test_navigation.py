"""Tests for mode/submode transitions and dispatch."""
import asyncio

import pytest

from lookup_tables import LookupTables
from navigation import (
    MODES, CompositeMode, NavigationStateMachine, SimpleMode, format_pattern, mode_config,
)
from results import (
    ListResult, NoSelection, NotReady, PatternQuery, Pending, SectionsResult, TextResult,
)


# ============================================================================
# Transitions
# ============================================================================

class TestTransitions:
    def test_starts_in_default_mode(self):
        nav = NavigationStateMachine()
        assert nav.state() == ('definition', None)

    def test_every_composite_mode_resets_to_first_submode(self):
        nav = NavigationStateMachine()
        for mode in MODES:
            if isinstance(mode, CompositeMode):
                nav.select_mode(mode.id)
                nav.select_submode(mode.submodes[-1].id)
                nav.select_mode('definition')
                nav.select_mode(mode.id)
                assert nav.submode == mode.submodes[0].id

    def test_reselecting_composite_mode_resets_submode(self):
        nav = NavigationStateMachine()
        nav.select_mode('indicators')
        nav.select_submode('reversal')
        nav.select_mode('indicators')
        assert nav.submode == 'anagrams'

    def test_simple_mode_clears_submode(self):
        nav = NavigationStateMachine()
        nav.select_mode('starts')
        assert nav.submode == 'wordlist'
        nav.select_mode('synonyms')
        assert nav.state() == ('synonyms', None)

    def test_select_submode(self):
        nav = NavigationStateMachine()
        nav.select_mode('anagram')
        assert nav.select_submode('onelook') is True
        assert nav.state() == ('anagram', 'onelook')

    def test_unknown_mode_is_ignored(self):
        nav = NavigationStateMachine()
        nav.select_mode('starts')
        assert nav.select_mode('wordplay') is False
        assert nav.select_mode(None) is False
        assert nav.state() == ('starts', 'wordlist')

    def test_submode_ignored_in_simple_mode(self):
        nav = NavigationStateMachine()
        assert nav.select_submode('wordlist') is False
        assert nav.state() == ('definition', None)

    def test_unknown_submode_is_ignored(self):
        nav = NavigationStateMachine()
        nav.select_mode('indicators')
        assert nav.select_submode('onelook') is False
        assert nav.submode == 'anagrams'

    def test_bad_default_mode(self):
        with pytest.raises(ValueError):
            NavigationStateMachine(default_mode='missing')

    def test_custom_modes(self):
        modes = (SimpleMode('definition', 'Def'), SimpleMode('other', 'Other'))
        nav = NavigationStateMachine(modes=modes)
        assert nav.select_mode('anagram') is False
        assert nav.select_mode('other') is True


class TestPatterns:
    @pytest.mark.parametrize('mode,expected', [
        ('anagram', '<cat>'),
        ('starts', 'cat*'),
        ('ends', '*cat'),
        ('center', 'A<cat>A'),
    ])
    def test_format_pattern(self, mode, expected):
        assert format_pattern(mode, 'cat') == expected

    def test_mode_without_pattern(self):
        with pytest.raises(ValueError):
            format_pattern('definition', 'cat')

    def test_mode_config(self):
        config = {entry['id']: entry for entry in mode_config()}
        assert config['definition']['submodes'] == []
        assert [s['id'] for s in config['indicators']['submodes']][:2] == ['anagrams', 'hidden']


# ============================================================================
# Dispatch
# ============================================================================

class TestDispatch:
    def test_empty_fragment_short_circuits_every_other_mode(self, tables, cache):
        nav = NavigationStateMachine()
        for mode in MODES:
            if mode.id == 'definition':
                continue
            nav.select_mode(mode.id)
            assert isinstance(nav.dispatch('', tables, cache, headword='cat'), NoSelection)

    def test_default_view_falls_back_to_headword(self, tables, cache):
        asyncio.run(cache.get('example'))
        nav = NavigationStateMachine()
        result = nav.dispatch('', tables, cache, headword='example')
        assert result == ListResult(('(noun) A representative instance.',))

    def test_dictionary_pending_until_cached(self, tables, cache):
        nav = NavigationStateMachine()
        assert isinstance(nav.dispatch('exam', tables, cache), Pending)
        assert nav.lookup_key('exam') == 'exam'

    def test_definition_and_synonyms(self, tables, cache):
        asyncio.run(cache.get('cat'))
        nav = NavigationStateMachine()
        assert nav.dispatch('cat', tables, cache) == ListResult(('(noun) A small feline.',))
        nav.select_mode('synonyms')
        assert nav.dispatch('cat', tables, cache) == ListResult(('feline',))

    def test_not_found_definition(self, tables, cache):
        asyncio.run(cache.get('zzz'))
        nav = NavigationStateMachine()
        assert nav.dispatch('zzz', tables, cache) == TextResult('No definition found for "zzz"')

    def test_no_synonyms(self, tables, cache):
        asyncio.run(cache.get('exam'))
        nav = NavigationStateMachine()
        nav.select_mode('synonyms')
        assert nav.dispatch('exam', tables, cache) == TextResult('No synonyms found for "exam"')

    def test_lookup_key_only_for_dictionary_modes(self):
        nav = NavigationStateMachine()
        nav.select_mode('anagram')
        assert nav.lookup_key('cat') is None

    def test_abbreviations(self, tables, cache):
        nav = NavigationStateMachine()
        nav.select_mode('abbreviations')
        assert nav.dispatch('ex', tables, cache) == ListResult(('former partner', 'old flame'))
        assert nav.dispatch('xq', tables, cache) == \
            TextResult('No cryptic abbreviations found for "XQ"')

    def test_anagram_wordlist(self, tables, cache):
        nav = NavigationStateMachine()
        nav.select_mode('anagram')
        assert nav.dispatch('tac', tables, cache) == ListResult(('act', 'cat'))
        assert nav.dispatch('xyz', tables, cache) == \
            TextResult('No valid anagrams found for "xyz"')

    @pytest.mark.parametrize('mode,submode,pattern,host', [
        ('anagram', 'nutrimatic', '<cat>', 'nutrimatic.org'),
        ('starts', 'onelook', 'cat*', 'onelook.com'),
        ('ends', 'nutrimatic', '*cat', 'nutrimatic.org'),
        ('center', 'onelook', 'A<cat>A', 'onelook.com'),
    ])
    def test_external_pattern_hand_off(self, tables, cache, mode, submode, pattern, host):
        nav = NavigationStateMachine()
        nav.select_mode(mode)
        nav.select_submode(submode)
        result = nav.dispatch('cat', tables, cache)
        assert isinstance(result, PatternQuery)
        assert result.service == submode
        assert result.pattern == pattern
        assert host in result.url

    def test_starts_wordlist(self, tables, cache):
        nav = NavigationStateMachine()
        nav.select_mode('starts')
        result = nav.dispatch('ex', tables, cache)
        assert result.items == ('exam (4)', 'example (7)', 'examples (8)')
        assert result.heading == "Found 3 words starting with 'ex'"
        assert result.truncated is False

    def test_center_wordlist(self, tables, cache):
        nav = NavigationStateMachine()
        nav.select_mode('center')
        result = nav.dispatch('at', tables, cache)
        assert result.items == ('cats (4)',)
        assert 'in the middle' in result.heading

    def test_positional_no_matches(self, tables, cache):
        nav = NavigationStateMachine()
        nav.select_mode('ends')
        assert nav.dispatch('qq', tables, cache) == TextResult("No words found ending with 'qq'")

    def test_positional_truncation_heading(self, cache):
        big = LookupTables.build(wordlist=[f"re{i:03d}" for i in range(250)])
        nav = NavigationStateMachine()
        nav.select_mode('starts')
        result = nav.dispatch('re', big, cache)
        assert len(result.items) == 200
        assert result.total_count == 250
        assert result.heading.endswith('(showing first 200)')

    def test_indicators(self, tables, cache):
        nav = NavigationStateMachine()
        nav.select_mode('indicators')
        result = nav.dispatch('cat', tables, cache)
        assert isinstance(result, SectionsResult)
        assert result.sections[0] == ('Disorder', ('confused', 'jumbled'))

    def test_indicator_category_missing(self, tables, cache):
        nav = NavigationStateMachine()
        nav.select_mode('indicators')
        nav.select_submode('edge')
        assert nav.dispatch('cat', tables, cache) == TextResult('No edge indicators found')

    @pytest.mark.parametrize('mode', ['anagram', 'starts', 'ends', 'center', 'abbreviations', 'indicators'])
    def test_unloaded_tables_report_loading(self, cache, mode):
        nav = NavigationStateMachine()
        nav.select_mode(mode)
        result = nav.dispatch('cat', LookupTables(), cache)
        assert isinstance(result, NotReady)
        assert result.message.startswith('Loading')

    def test_external_hand_off_needs_no_tables(self, cache):
        nav = NavigationStateMachine()
        nav.select_mode('starts')
        nav.select_submode('onelook')
        assert isinstance(nav.dispatch('cat', LookupTables(), cache), PatternQuery)
