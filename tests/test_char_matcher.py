"""
Character matcher: normalization, incremental updates and the shared
charset cache. Raw brightness comes from a fixed table so results do not
depend on installed fonts.
"""

import unittest

from ascii_art.char_matcher import (
    DEGENERATE_BRIGHTNESS,
    CachedBrightness,
    CharsetBrightnessCache,
    EmptyCharsetError,
    MatcherState,
    SubImgCharMatcher,
    charset_key,
    normalize,
)


RAW = {
    'x': 0.05,
    'a': 0.1,
    'b': 0.3,
    'c': 0.5,
    'm': 0.5,
    'e': 0.7,
    'd': 0.9,
    'y': 0.95,
}


class FakeGlyphs:
    """Raw brightness lookup that records every query."""

    def __init__(self, values=None):
        self.values = dict(values or RAW)
        self.calls = []

    def brightness(self, char):
        self.calls.append(char)
        return self.values[char]


class TestNormalization(unittest.TestCase):

    def setUp(self):
        self.glyphs = FakeGlyphs()

    def make(self, chars, cache=None):
        return SubImgCharMatcher(chars, glyphs=self.glyphs, cache=cache)

    def test_endpoints(self):
        matcher = self.make("abcd")
        self.assertEqual(matcher.normalized_brightness('a'), 0.0)
        self.assertEqual(matcher.normalized_brightness('d'), 1.0)
        self.assertAlmostEqual(matcher.normalized_brightness('b'), 0.25)
        self.assertAlmostEqual(matcher.normalized_brightness('c'), 0.5)

    def test_degenerate_single_char(self):
        matcher = self.make("c")
        matcher.initialize_brightness_map()
        self.assertEqual(matcher.normalized_brightness('c'), DEGENERATE_BRIGHTNESS)
        self.assertEqual(matcher.get_char_by_image_brightness(0.0), 'c')
        self.assertEqual(matcher.get_char_by_image_brightness(1.0), 'c')

    def test_degenerate_equal_brightness(self):
        matcher = self.make("cm")
        self.assertEqual(matcher.normalized_brightness('c'), DEGENERATE_BRIGHTNESS)
        self.assertEqual(matcher.normalized_brightness('m'), DEGENERATE_BRIGHTNESS)

    def test_normalize_guard(self):
        self.assertEqual(normalize(0.3, 0.3, 0.3), DEGENERATE_BRIGHTNESS)
        self.assertAlmostEqual(normalize(0.3, 0.1, 0.5), 0.5)

    def test_duplicates_are_ignored(self):
        matcher = self.make("aabbd")
        self.assertEqual(matcher.get_charset(), ['a', 'b', 'd'])

    def test_rejects_multi_char_strings(self):
        matcher = self.make("ad")
        with self.assertRaises(ValueError):
            matcher.add_char("ab")


class TestMatching(unittest.TestCase):

    def setUp(self):
        self.glyphs = FakeGlyphs()

    def test_nearest_character(self):
        matcher = SubImgCharMatcher("abcd", glyphs=self.glyphs)
        matcher.initialize_brightness_map()
        self.assertEqual(matcher.get_char_by_image_brightness(0.26), 'b')
        self.assertEqual(matcher.get_char_by_image_brightness(0.9), 'd')
        self.assertEqual(matcher.get_char_by_image_brightness(0.0), 'a')

    def test_tie_prefers_smaller_code_point_for_equal_brightness(self):
        matcher = SubImgCharMatcher("amcd", glyphs=self.glyphs)
        matcher.initialize_brightness_map()
        self.assertEqual(matcher.get_char_by_image_brightness(0.5), 'c')

    def test_tie_prefers_smaller_code_point_for_equal_distance(self):
        matcher = SubImgCharMatcher("da", glyphs=self.glyphs)
        matcher.initialize_brightness_map()
        self.assertEqual(matcher.get_char_by_image_brightness(0.5), 'a')

    def test_empty_charset(self):
        matcher = SubImgCharMatcher("", glyphs=self.glyphs)
        with self.assertRaises(EmptyCharsetError):
            matcher.get_char_by_image_brightness(0.5)

    def test_empty_after_removals(self):
        matcher = SubImgCharMatcher("ab", glyphs=self.glyphs)
        matcher.remove_char('a')
        matcher.remove_char('b')
        matcher.initialize_brightness_map()
        self.assertEqual(len(matcher), 0)
        with self.assertRaises(EmptyCharsetError):
            matcher.get_char_by_image_brightness(0.5)

    def test_lookup_resolves_pending_additions(self):
        matcher = SubImgCharMatcher("ad", glyphs=self.glyphs)
        matcher.add_char('b')
        self.assertEqual(matcher.get_char_by_image_brightness(0.25), 'b')
        self.assertIs(matcher.state, MatcherState.CLEAN)

    def test_charset_is_sorted(self):
        matcher = SubImgCharMatcher("dcab", glyphs=self.glyphs)
        self.assertEqual(matcher.get_charset(), ['a', 'b', 'c', 'd'])


class TestIncrementalUpdates(unittest.TestCase):

    def setUp(self):
        self.glyphs = FakeGlyphs()
        self.matcher = SubImgCharMatcher("abd", glyphs=self.glyphs)

    def snapshot(self, chars):
        return {c: self.matcher.normalized_brightness(c) for c in chars}

    def test_starts_clean(self):
        self.assertIs(self.matcher.state, MatcherState.CLEAN)

    def test_add_inside_extremes_is_partial(self):
        before = self.snapshot("abd")
        self.matcher.add_char('c')

        self.assertIs(self.matcher.state, MatcherState.DIRTY_PARTIAL)
        self.assertIn('c', self.matcher)

        self.matcher.initialize_brightness_map()
        self.assertIs(self.matcher.state, MatcherState.CLEAN)
        self.assertAlmostEqual(self.matcher.normalized_brightness('c'), 0.5)
        self.assertEqual(self.snapshot("abd"), before)

    def test_add_new_minimum_renormalizes_everything(self):
        self.matcher.add_char('x')
        self.assertIs(self.matcher.state, MatcherState.DIRTY_EXTREMES)

        self.matcher.initialize_brightness_map()
        self.assertEqual(self.matcher.normalized_brightness('x'), 0.0)
        self.assertEqual(self.matcher.normalized_brightness('d'), 1.0)
        self.assertAlmostEqual(self.matcher.normalized_brightness('a'), 0.05 / 0.85)

    def test_add_new_maximum_renormalizes_everything(self):
        self.matcher.add_char('y')
        self.assertIs(self.matcher.state, MatcherState.DIRTY_EXTREMES)

        self.matcher.initialize_brightness_map()
        self.assertEqual(self.matcher.normalized_brightness('y'), 1.0)
        self.assertEqual(self.matcher.normalized_brightness('a'), 0.0)

    def test_extreme_change_absorbs_partial(self):
        self.matcher.add_char('c')
        self.matcher.add_char('y')
        self.assertIs(self.matcher.state, MatcherState.DIRTY_EXTREMES)

        self.matcher.initialize_brightness_map()
        self.assertAlmostEqual(self.matcher.normalized_brightness('c'), 0.4 / 0.85)

    def test_add_existing_is_noop(self):
        calls = len(self.glyphs.calls)
        self.matcher.add_char('b')
        self.assertIs(self.matcher.state, MatcherState.CLEAN)
        self.assertEqual(len(self.glyphs.calls), calls)

    def test_remove_inside_extremes_keeps_others(self):
        before = self.snapshot("ad")
        self.matcher.remove_char('b')

        self.assertIs(self.matcher.state, MatcherState.CLEAN)
        self.assertNotIn('b', self.matcher)
        self.assertEqual(self.snapshot("ad"), before)

    def test_remove_extreme_is_lazy(self):
        self.matcher.remove_char('d')
        self.assertIs(self.matcher.state, MatcherState.DIRTY_EXTREMES)

        self.matcher.initialize_brightness_map()
        self.assertEqual(self.matcher.normalized_brightness('a'), 0.0)
        self.assertEqual(self.matcher.normalized_brightness('b'), 1.0)

    def test_remove_absent_is_noop(self):
        self.matcher.remove_char('z')
        self.assertIs(self.matcher.state, MatcherState.CLEAN)
        self.assertEqual(self.matcher.get_charset(), ['a', 'b', 'd'])

    def test_remove_pending_char_returns_to_clean(self):
        self.matcher.add_char('c')
        self.matcher.remove_char('c')
        self.assertIs(self.matcher.state, MatcherState.CLEAN)

    def test_add_remove_round_trip(self):
        before = self.snapshot("abd")
        for char in ('c', 'x', 'y'):
            self.matcher.add_char(char)
            self.matcher.remove_char(char)
            self.matcher.initialize_brightness_map()

            self.assertEqual(self.matcher.get_charset(), ['a', 'b', 'd'], char)
            for c, value in before.items():
                self.assertAlmostEqual(self.matcher.normalized_brightness(c), value, msg=char)


class TestCharsetCache(unittest.TestCase):

    def setUp(self):
        self.glyphs = FakeGlyphs()
        self.cache = CharsetBrightnessCache()

    def test_key_is_order_independent(self):
        self.assertEqual(charset_key("cab"), "abc")
        self.assertEqual(charset_key(["b", "a", "b"]), "ab")
        self.assertEqual(charset_key(set("dcba")), charset_key("abcd"))

    def test_construction_publishes(self):
        SubImgCharMatcher("dba", glyphs=self.glyphs, cache=self.cache)
        self.assertIn("abd", self.cache)
        self.assertEqual(len(self.cache), 1)

    def test_matchers_agree_for_same_content(self):
        first = SubImgCharMatcher("abcde", glyphs=self.glyphs, cache=self.cache)
        second = SubImgCharMatcher(["e", "d", "c", "b", "a"], glyphs=FakeGlyphs(), cache=self.cache)
        first.initialize_brightness_map()
        second.initialize_brightness_map()

        for char in "abcde":
            self.assertEqual(
                first.normalized_brightness(char), second.normalized_brightness(char), char
            )

    def test_content_match_is_copied_verbatim(self):
        self.cache.put("abcd", CachedBrightness((0.0, 0.1, 0.2, 1.0), 0.1, 0.9))

        matcher = SubImgCharMatcher("abd", glyphs=self.glyphs, cache=self.cache)
        matcher.add_char('c')
        matcher.initialize_brightness_map()

        self.assertEqual(matcher.normalized_brightness('b'), 0.1)
        self.assertEqual(matcher.normalized_brightness('c'), 0.2)

    def test_partial_update_is_published(self):
        matcher = SubImgCharMatcher("ad", glyphs=self.glyphs, cache=self.cache)
        matcher.add_char('b')
        matcher.initialize_brightness_map()

        entry = self.cache.get("abd")
        self.assertIsNotNone(entry)
        self.assertEqual(entry.normalized[0], 0.0)
        self.assertAlmostEqual(entry.normalized[1], 0.25)
        self.assertEqual(entry.normalized[2], 1.0)

    def test_cache_hit_restores_extremes(self):
        SubImgCharMatcher("abd", glyphs=self.glyphs, cache=self.cache)

        matcher = SubImgCharMatcher("abdx", glyphs=self.glyphs, cache=self.cache)
        matcher.remove_char('x')
        matcher.initialize_brightness_map()

        # Extremes come back from the cache entry, so a non-extreme add stays partial
        matcher.add_char('c')
        self.assertIs(matcher.state, MatcherState.DIRTY_PARTIAL)
        matcher.initialize_brightness_map()
        self.assertAlmostEqual(matcher.normalized_brightness('c'), 0.5)

    def test_private_cache_by_default(self):
        first = SubImgCharMatcher("ab", glyphs=self.glyphs)
        second = SubImgCharMatcher("ab", glyphs=self.glyphs)
        self.assertIsNot(first.cache, second.cache)

    def test_clear(self):
        SubImgCharMatcher("ab", glyphs=self.glyphs, cache=self.cache)
        self.cache.clear()
        self.assertEqual(len(self.cache), 0)


if __name__ == '__main__':
    unittest.main()
