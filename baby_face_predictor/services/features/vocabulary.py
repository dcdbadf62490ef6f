# baby_face_predictor/services/features/vocabulary.py
"""
Ordered rule tables that turn free-text vision output into categorical
facial attributes.

Order inside each table is significant: more specific values come before
the shorter values they contain ("dark brown" before "brown", "light blue"
before "blue"), because the first matching rule wins.
"""
import re
from dataclasses import dataclass, field

from baby_face_predictor.data.constants import FeatureCategory

SKIN_TONES: tuple[str, ...] = (
    "very light", "medium-light", "dark brown",
    "light", "fair", "pale", "medium", "olive", "tan",
    "brown", "dark", "deep", "black", "ebony",
)
EYE_COLORS: tuple[str, ...] = (
    "dark brown", "light brown", "hazel-brown", "green-hazel", "blue-green",
    "light blue", "dark blue",
    "brown", "hazel", "green", "blue", "amber", "gray", "grey",
)
HAIR_COLORS: tuple[str, ...] = (
    "jet black", "dark brown", "light brown", "strawberry blonde", "light blonde", "dirty blonde",
    "black", "brown", "auburn", "red", "blonde", "gray", "grey", "white", "silver",
)
FACE_SHAPES: tuple[str, ...] = (
    "rectangular", "triangular",
    "round", "oval", "square", "heart", "diamond", "long", "angular",
)

ANCHORS: dict[FeatureCategory, tuple[str, ...]] = {
    FeatureCategory.SKIN_TONE: ("skin", "complexion", "tone", "ethnicity"),
    FeatureCategory.EYE_COLOR: ("eye", "eyes"),
    FeatureCategory.HAIR_COLOR: ("hair",),
    FeatureCategory.FACE_SHAPE: ("face", "shape", "facial"),
}

VOCABULARY: dict[FeatureCategory, tuple[str, ...]] = {
    FeatureCategory.SKIN_TONE: SKIN_TONES,
    FeatureCategory.EYE_COLOR: EYE_COLORS,
    FeatureCategory.HAIR_COLOR: HAIR_COLORS,
    FeatureCategory.FACE_SHAPE: FACE_SHAPES,
}


def _term(value: str) -> str:
    return r"\s+".join(re.escape(part) for part in value.split())


def _alternation(words: tuple[str, ...]) -> str:
    return "|".join(_term(w) for w in words)


@dataclass(frozen=True)
class FeatureRule:
    """
    One (pattern, category) rule.

    `anchored` matches the value right next to one of the category's anchor
    words ("olive skin", "eyes are hazel"). `loose` matches the value
    anywhere, unless it is immediately followed by another category's anchor
    ("brown eyes" never resolves a skin tone).
    """
    category: FeatureCategory
    value: str
    anchored: re.Pattern = field(repr=False)
    loose: re.Pattern = field(repr=False)


def _build_rules(category: FeatureCategory) -> tuple[FeatureRule, ...]:
    own = _alternation(ANCHORS[category])
    foreign = _alternation(
        tuple(a for cat, anchors in ANCHORS.items() if cat is not category for a in anchors)
    )
    rules = []
    for value in VOCABULARY[category]:
        term = _term(value)
        anchored = re.compile(
            rf"(?<![\w-]){term}(?:[\s-]+)(?:{own})\b"
            rf"|\b(?:{own})\s+(?:(?:is|are|of)\s+)?{term}(?![\w-])"
        )
        loose = re.compile(rf"(?<![\w-]){term}(?![\w-])(?!\s+(?:{foreign})\b)")
        rules.append(FeatureRule(category=category, value=value, anchored=anchored, loose=loose))
    return tuple(rules)


RULES: dict[FeatureCategory, tuple[FeatureRule, ...]] = {
    category: _build_rules(category) for category in FeatureCategory
}


def _build_foreign_phrase(category: FeatureCategory) -> re.Pattern:
    # Longest first, so "dark brown eyes" is claimed whole before "dark" can match
    values = sorted({v for words in VOCABULARY.values() for v in words}, key=len, reverse=True)
    foreign = _alternation(
        tuple(a for cat, anchors in ANCHORS.items() if cat is not category for a in anchors)
    )
    return re.compile(rf"(?<![\w-])(?:{_alternation(tuple(values))})[\s-]+(?:{foreign})\b")


# Phrases owned by another category ("dark brown eyes" for skin tone).
# They are blanked out before the loose pass.
FOREIGN_PHRASES: dict[FeatureCategory, re.Pattern] = {
    category: _build_foreign_phrase(category) for category in FeatureCategory
}

# Ethnicity keywords used only when no skin tone word was found.
ETHNICITY_RULES: tuple[tuple[re.Pattern, str], ...] = (
    (re.compile(r"\bafrican\b"), "dark"),
    (re.compile(r"\bblack\b(?!\s+(?:hair|eyes?)\b)"), "dark"),
    (re.compile(r"\bcaucasian\b|\beuropean\b"), "light"),
    (re.compile(r"\basian\b"), "medium"),
    (re.compile(r"\bhispanic\b|\blatino\b|\blatina\b"), "medium"),
    (re.compile(r"\bmiddle\s+eastern\b"), "olive"),
    (re.compile(r"\bmixed\b|\bbiracial\b"), "medium"),
)

# Plausible combinations used when the vision model gives nothing usable.
FALLBACK_CATALOG: tuple[dict[FeatureCategory, str], ...] = (
    {
        FeatureCategory.SKIN_TONE: "light",
        FeatureCategory.EYE_COLOR: "blue",
        FeatureCategory.HAIR_COLOR: "blonde",
        FeatureCategory.FACE_SHAPE: "oval",
    },
    {
        FeatureCategory.SKIN_TONE: "medium",
        FeatureCategory.EYE_COLOR: "brown",
        FeatureCategory.HAIR_COLOR: "brown",
        FeatureCategory.FACE_SHAPE: "round",
    },
    {
        FeatureCategory.SKIN_TONE: "olive",
        FeatureCategory.EYE_COLOR: "hazel",
        FeatureCategory.HAIR_COLOR: "dark brown",
        FeatureCategory.FACE_SHAPE: "heart",
    },
    {
        FeatureCategory.SKIN_TONE: "dark",
        FeatureCategory.EYE_COLOR: "dark brown",
        FeatureCategory.HAIR_COLOR: "black",
        FeatureCategory.FACE_SHAPE: "angular",
    },
)


def match_category(text: str, category: FeatureCategory) -> str | None:
    """Returns the first vocabulary value of `category` found in lower-cased `text`."""
    rules = RULES[category]
    for rule in rules:
        if rule.anchored.search(text):
            return rule.value
    unclaimed = FOREIGN_PHRASES[category].sub(lambda m: " " * len(m.group()), text)
    for rule in rules:
        if rule.loose.search(unclaimed):
            return rule.value
    return None


def infer_skin_tone_from_ethnicity(text: str) -> str | None:
    for pattern, tone in ETHNICITY_RULES:
        if pattern.search(text):
            return tone
    return None


def parse_description(description: str) -> dict[FeatureCategory, str | None]:
    """
    Scans a free-text description for every category. Values are None
    where nothing in the text matched.
    """
    text = description.lower()
    parsed = {category: match_category(text, category) for category in FeatureCategory}
    if parsed[FeatureCategory.SKIN_TONE] is None:
        parsed[FeatureCategory.SKIN_TONE] = infer_skin_tone_from_ethnicity(text)
    return parsed
