# baby_face_predictor/services/features/blender.py
import math
import random

import structlog

from baby_face_predictor.data.settings import BlendingConfig, settings
from baby_face_predictor.dto.facial_features import BlendedFeatures, ParentFeatures

logger = structlog.get_logger(__name__)

SKIN_TONE_ORDINALS: dict[str, int] = {
    "very light": 1,
    "pale": 1,
    "light": 2,
    "fair": 2,
    "medium-light": 3,
    "medium": 4,
    "olive": 4,
    "tan": 5,
    "brown": 6,
    "dark brown": 7,
    "dark": 8,
    "deep": 8,
    "black": 9,
    "ebony": 9,
}
CANONICAL_SKIN_TONES: dict[int, str] = {
    1: "very light",
    2: "light",
    3: "medium-light",
    4: "medium",
    5: "tan",
    6: "brown",
    7: "dark brown",
    8: "dark",
    9: "black",
}
UNKNOWN_SKIN_TONE_ORDINAL = 4

DARK_HAIR_COLORS = frozenset({"black", "jet black", "dark brown"})
SOFT_FACE_SHAPES = frozenset({"round", "oval", "heart"})


def skin_tone_ordinal(label: str) -> int:
    return SKIN_TONE_ORDINALS.get(label, UNKNOWN_SKIN_TONE_ORDINAL)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class FeatureBlender:
    """
    Heuristic combination of two parents' features, weighted by the
    requested similarity (0 = like parent 1, 100 = like parent 2).

    Dominance rules are tuned to look plausible, they are not a genetic
    model. The only source of nondeterminism is the injected `rng`.
    """

    def __init__(self, config: BlendingConfig | None = None, rng: random.Random | None = None) -> None:
        self._config = config or settings.blending
        self._rng = rng or random.Random()

    def blend(self, parent1: ParentFeatures, parent2: ParentFeatures, similarity: int) -> BlendedFeatures:
        ratio = similarity / 100
        blended = BlendedFeatures(
            skin_tone=self.blend_skin_tone(parent1.skin_tone, parent2.skin_tone, ratio),
            eye_color=self.blend_eye_color(parent1.eye_color, parent2.eye_color, ratio),
            hair_color=self.blend_hair_color(parent1.hair_color, parent2.hair_color, ratio),
            face_shape=self.blend_face_shape(parent1.face_shape, parent2.face_shape, ratio),
        )
        logger.info(
            "Blended parent features",
            similarity=similarity,
            skin_tone=blended.skin_tone,
            eye_color=blended.eye_color,
            hair_color=blended.hair_color,
            face_shape=blended.face_shape,
        )
        return blended

    def blend_skin_tone(self, tone1: str, tone2: str, ratio: float) -> str:
        if tone1 == tone2:
            return tone1
        ordinal1, ordinal2 = skin_tone_ordinal(tone1), skin_tone_ordinal(tone2)
        blended = _round_half_up(ordinal1 * (1 - ratio) + ordinal2 * ratio)
        # Keep the parent's own wording when the blend lands on its ordinal.
        closer_first = ((tone2, ordinal2), (tone1, ordinal1)) if ratio > 0.5 else ((tone1, ordinal1), (tone2, ordinal2))
        for label, ordinal in closer_first:
            if blended == ordinal:
                return label
        return CANONICAL_SKIN_TONES[blended]

    def blend_eye_color(self, eye1: str, eye2: str, ratio: float) -> str:
        if eye1 == eye2:
            return eye1
        if ("brown" in eye1 or "brown" in eye2) and self._rng.random() > self._config.eye_dominance_threshold:
            return eye1 if "brown" in eye1 else eye2
        if ratio < self._config.lower_band:
            return eye1
        if ratio > self._config.upper_band:
            return eye2
        return f"{eye1}-{eye2} mixed"

    def blend_hair_color(self, hair1: str, hair2: str, ratio: float) -> str:
        if hair1 == hair2:
            return hair1
        hair1_dark = hair1 in DARK_HAIR_COLORS
        hair2_dark = hair2 in DARK_HAIR_COLORS
        if hair1_dark != hair2_dark and self._rng.random() > self._config.hair_dominance_threshold:
            return hair1 if hair1_dark else hair2
        if ratio < self._config.lower_band:
            return hair1
        if ratio > self._config.upper_band:
            return hair2
        if hair1_dark or hair2_dark:
            return hair1 if hair1_dark else hair2
        return hair1

    def blend_face_shape(self, shape1: str, shape2: str, ratio: float) -> str:
        if shape1 == shape2:
            return shape1
        soft1, soft2 = shape1 in SOFT_FACE_SHAPES, shape2 in SOFT_FACE_SHAPES
        # Babies read softer, so a soft shape beats any other shape
        if soft1 != soft2:
            return shape1 if soft1 else shape2
        return shape1 if ratio < 0.5 else shape2
