# baby_face_predictor/services/baby_name_generator.py
"""
Proposes a baby name by combining the parents' names.

Several combination strategies are tried in order and the first one that
produces a name of reasonable length wins.
"""
import math
from collections.abc import Callable

from baby_face_predictor.dto.generation import BabyName

DEFAULT_PARENT1_NAME = "parent"
DEFAULT_PARENT2_NAME = "partner"
MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 12
_VOWELS = "aeiouy"


def _blend(name1: str, name2: str) -> BabyName:
    # Kevin + Kelly -> Kevly
    first_part = name1[: math.ceil(len(name1) / 2)]
    second_part = name2[len(name2) // 2:]
    return BabyName(
        name=(first_part + second_part).capitalize(),
        explanation=f"Blending {name1.capitalize()} and {name2.capitalize()}",
    )


def _find_overlap(name1: str, name2: str) -> str:
    longest = ""
    for i in range(len(name1)):
        for j in range(len(name2)):
            k = 0
            while i + k < len(name1) and j + k < len(name2) and name1[i + k] == name2[j + k]:
                k += 1
            if k > len(longest):
                longest = name1[i:i + k]
    return longest


def _portmanteau(name1: str, name2: str) -> BabyName:
    overlap = _find_overlap(name1, name2)
    if len(overlap) >= 2:
        before = name1[: name1.index(overlap)]
        after = name2[name2.index(overlap) + len(overlap):]
        return BabyName(
            name=(before + overlap + after).capitalize(),
            explanation=f"A portmanteau of {name1.capitalize()} and {name2.capitalize()}",
        )

    split1 = math.floor(len(name1) * 0.6)
    split2 = math.floor(len(name2) * 0.4)
    return BabyName(
        name=(name1[:split1] + name2[split2:]).capitalize(),
        explanation=f"A creative fusion of {name1.capitalize()} and {name2.capitalize()}",
    )


def split_syllables(word: str) -> list[str]:
    """Rough vowel-group split: a new syllable starts at each vowel group."""
    syllables: list[str] = []
    current = ""
    last_was_vowel = False
    for i, char in enumerate(word):
        is_vowel = char.lower() in _VOWELS
        current += char
        if is_vowel and not last_was_vowel and i > 0:
            syllables.append(current[:-1])
            current = char
        last_was_vowel = is_vowel
    if current:
        syllables.append(current)
    return syllables or [word]


def _syllable_blend(name1: str, name2: str) -> BabyName:
    syllables1 = split_syllables(name1)
    syllables2 = split_syllables(name2)
    first = syllables1[: math.ceil(len(syllables1) / 2)]
    last = syllables2[len(syllables2) // 2:]
    return BabyName(
        name="".join(first + last).capitalize(),
        explanation=f"Combining syllables from {name1.capitalize()} and {name2.capitalize()}",
    )


def _prefix_suffix(name1: str, name2: str) -> BabyName:
    combinations = [
        name1[:2] + name2[-3:],
        name1[:3] + name2[-2:],
        name2[:2] + name1[-3:],
        name2[:3] + name1[-2:],
    ]
    balanced = sorted(
        (combo for combo in combinations if 4 <= len(combo) <= 8),
        key=lambda combo: abs(len(combo) - 6),
    )
    best = balanced[0] if balanced else combinations[0]
    return BabyName(
        name=best.capitalize(),
        explanation=f"Combining elements from {name1.capitalize()} and {name2.capitalize()}",
    )


STRATEGIES: tuple[Callable[[str, str], BabyName], ...] = (
    _blend,
    _portmanteau,
    _syllable_blend,
    _prefix_suffix,
)


def generate_baby_name(name1: str | None = None, name2: str | None = None) -> BabyName:
    parent1 = (name1 or "").strip().lower() or DEFAULT_PARENT1_NAME
    parent2 = (name2 or "").strip().lower() or DEFAULT_PARENT2_NAME

    if parent1 == parent2:
        return BabyName(
            name=parent1.capitalize(),
            explanation=f"Named after both parents: {parent1.capitalize()}",
        )

    for strategy in STRATEGIES:
        candidate = strategy(parent1, parent2)
        if MIN_NAME_LENGTH <= len(candidate.name) <= MAX_NAME_LENGTH:
            return candidate

    return BabyName(
        name=(parent1[:2] + parent2[:3]).capitalize(),
        explanation=f"A creative blend of {parent1.capitalize()} and {parent2.capitalize()}",
    )


def generate_multiple_baby_names(
    name1: str | None = None, name2: str | None = None, count: int = 3
) -> list[BabyName]:
    if not name1 or not name2:
        return [generate_baby_name(name1, name2)]

    names = [generate_baby_name(name1, name2)]
    if count > 1:
        names.append(generate_baby_name(name2, name1))
    if count > 2:
        first, second = name1.strip(), name2.strip()
        names.append(
            BabyName(
                name=(first[:1] + second[1:3] + first[-2:]).capitalize(),
                explanation=f"A unique blend inspired by {first.capitalize()} and {second.capitalize()}",
            )
        )

    unique: list[BabyName] = []
    seen: set[str] = set()
    for candidate in names:
        key = candidate.name.lower()
        if key not in seen:
            seen.add(key)
            unique.append(candidate)
    return unique[:count]
