"""Tests for the feature vocabulary rule table."""
import pytest

from baby_face_predictor.data.constants import FeatureCategory
from baby_face_predictor.services.features.vocabulary import (
    FALLBACK_CATALOG,
    RULES,
    VOCABULARY,
    infer_skin_tone_from_ethnicity,
    match_category,
    parse_description,
)

SKIN = FeatureCategory.SKIN_TONE
EYES = FeatureCategory.EYE_COLOR
HAIR = FeatureCategory.HAIR_COLOR
FACE = FeatureCategory.FACE_SHAPE


class TestRuleTable:
    """The rule table itself."""

    def test_one_rule_per_vocabulary_value(self):
        """Should build exactly one rule per vocabulary value, in vocabulary order."""
        for category, values in VOCABULARY.items():
            assert tuple(rule.value for rule in RULES[category]) == values

    @pytest.mark.parametrize("category", list(FeatureCategory))
    def test_specific_values_come_before_their_suffixes(self, category):
        """Should list 'dark brown' before 'brown' and similar pairs."""
        values = VOCABULARY[category]
        for value in values:
            for other in values:
                if other != value and (other.endswith(" " + value) or other.endswith("-" + value)):
                    assert values.index(other) < values.index(value)

    @pytest.mark.parametrize(
        ("category", "value"),
        [(category, value) for category, values in VOCABULARY.items() for value in values],
    )
    def test_every_rule_matches_its_own_anchored_phrase(self, category, value):
        """Should resolve '<value> <anchor>' to the rule's own value."""
        anchor = {SKIN: "skin", EYES: "eyes", HAIR: "hair", FACE: "face"}[category]
        assert match_category(f"the child has {value} {anchor}.", category) == value


class TestMatchCategory:
    """Anchored and loose matching."""

    @pytest.mark.parametrize(
        ("text", "category", "expected"),
        [
            ("olive skin with warm undertones", SKIN, "olive"),
            ("a fair complexion", SKIN, "fair"),
            ("skin tone is tan", SKIN, "tan"),
            ("medium-light skin", SKIN, "medium-light"),
            ("dark brown skin and brown eyes", SKIN, "dark brown"),
            ("eyes are light blue", EYES, "light blue"),
            ("hazel eyes", EYES, "hazel"),
            ("dark brown eyes", EYES, "dark brown"),
            ("grey eyes and blonde hair", EYES, "grey"),
            ("strawberry blonde hair", HAIR, "strawberry blonde"),
            ("long dark brown hair", HAIR, "dark brown"),
            ("hair is black and curly", HAIR, "black"),
            ("face shape is heart", FACE, "heart"),
            ("a square face with a strong jaw", FACE, "square"),
        ],
    )
    def test_anchored_matches(self, text, category, expected):
        """Should prefer the value written next to the category's anchor word."""
        assert match_category(text, category) == expected

    def test_eye_anchor_does_not_resolve_skin(self):
        """Should never read 'brown eyes' as a brown skin tone."""
        assert match_category("brown eyes and a warm complexion", SKIN) is None

    def test_hair_anchor_does_not_resolve_face_shape(self):
        """Should never read 'long hair' as a long face."""
        assert match_category("long hair down to the shoulders", FACE) is None

    def test_loose_match_without_anchor(self):
        """Should fall back to the value anywhere in the text."""
        assert match_category("overall quite pale, with freckles", SKIN) == "pale"

    def test_words_are_bounded(self):
        """Should not match a value inside a longer word."""
        assert match_category("a redhead with a reddish beard", HAIR) is None
        assert match_category("tanned after the holidays", SKIN) is None

    def test_hyphenated_value_is_not_split(self):
        """Should not find 'light' inside 'medium-light'."""
        assert match_category("medium-light", SKIN) == "medium-light"

    @pytest.mark.parametrize("text", ["dark brown eyes", "light brown hair", "dark blue eyes"])
    def test_other_category_phrase_does_not_resolve_skin(self, text):
        """Should not read a skin tone out of the first word of an eye or hair color."""
        assert match_category(f"a smiling woman with {text}", SKIN) is None

    def test_eye_phrase_falls_through_to_ethnicity(self):
        parsed = parse_description("A Caucasian woman with dark brown eyes and blonde hair, oval face.")
        assert parsed == {SKIN: "light", EYES: "dark brown", HAIR: "blonde", FACE: "oval"}

    def test_skin_words_outside_other_phrases_still_match(self):
        """Should still find a loose skin value elsewhere in the text."""
        text = "light brown hair, dark brown eyes, quite pale overall"
        assert match_category(text, SKIN) == "pale"


class TestEthnicity:
    """Ethnicity keywords as the last resort for skin tone."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("a woman of african descent", "dark"),
            ("a black man smiling", "dark"),
            ("caucasian man", "light"),
            ("european features", "light"),
            ("east asian woman", "medium"),
            ("hispanic man", "medium"),
            ("latina woman", "medium"),
            ("middle eastern features", "olive"),
            ("mixed heritage", "medium"),
            ("biracial child", "medium"),
        ],
    )
    def test_ethnicity_rules(self, text, expected):
        """Should infer one skin tone per ethnicity rule."""
        assert infer_skin_tone_from_ethnicity(text) == expected

    def test_black_hair_is_not_an_ethnicity(self):
        """Should not infer a skin tone from 'black hair'."""
        assert infer_skin_tone_from_ethnicity("she has black hair") is None

    def test_parse_uses_ethnicity_only_without_skin_match(self):
        """Should use the explicit skin tone when one is present."""
        parsed = parse_description("A Caucasian man with olive skin")
        assert parsed[SKIN] == "olive"
        parsed = parse_description("An African woman with black hair")
        assert parsed[SKIN] == "dark"
        assert parsed[HAIR] == "black"


class TestParseDescription:
    def test_parses_every_category(self):
        """Should resolve all four categories from a typical answer."""
        parsed = parse_description(
            "The person has Olive skin. Their eyes are hazel and they have long "
            "dark brown hair. The face shape is oval."
        )
        assert parsed == {SKIN: "olive", EYES: "hazel", HAIR: "dark brown", FACE: "oval"}

    def test_unresolved_categories_are_none(self):
        """Should leave categories without a match as None."""
        parsed = parse_description("A smiling person standing in a park.")
        assert all(value is None for value in parsed.values())


def test_fallback_catalog_values_are_in_vocabulary():
    """Should only contain values the rule table can also produce."""
    assert len(FALLBACK_CATALOG) == 4
    for entry in FALLBACK_CATALOG:
        for category, value in entry.items():
            assert value in VOCABULARY[category]
