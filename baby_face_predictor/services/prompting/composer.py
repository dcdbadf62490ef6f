# baby_face_predictor/services/prompting/composer.py
import structlog

from baby_face_predictor.dto.facial_features import BlendedFeatures
from baby_face_predictor.dto.generation import GenerationRequest

from .baby_portrait import (
    COLOR_EMPHASIS,
    COMPOSITION,
    PROMPT_BABY_PORTRAIT,
    describe_age,
    describe_gender,
    emphasize_skin_tone,
)

logger = structlog.get_logger(__name__)


def describe_similarity(similarity: int, parent1_name: str | None = None, parent2_name: str | None = None) -> str:
    p1 = parent1_name or "parent 1"
    p2 = parent2_name or "parent 2"

    if similarity <= 20:
        return f"strongly resembling {p1}, dominant {p1} features, minimal traits from {p2}"
    if similarity <= 40:
        return f"primarily resembling {p1}, with {p1}'s dominant features and subtle {p2} characteristics"
    if similarity <= 60:
        return f"balanced blend of both parents, equal mix of {p1} and {p2} features"
    if similarity <= 80:
        return f"primarily resembling {p2}, with {p2}'s dominant features and subtle {p1} characteristics"
    return f"strongly resembling {p2}, dominant {p2} features, minimal traits from {p1}"


def compose_prompt(request: GenerationRequest, blended: BlendedFeatures) -> str:
    """
    Builds the text-to-image prompt for one request. Pure: the same request
    and blended features always give the same prompt.
    """
    replacements = {
        "{{COMPOSITION}}": COMPOSITION,
        "{{COLOR_EMPHASIS}}": COLOR_EMPHASIS,
        "{{AGE_DESCRIPTION}}": describe_age(request.age),
        "{{GENDER_DESCRIPTION}}": describe_gender(request.gender.value),
        "{{SKIN_TONE}}": emphasize_skin_tone(blended.skin_tone),
        "{{EYE_COLOR}}": blended.eye_color,
        "{{HAIR_COLOR}}": blended.hair_color,
        "{{FACE_SHAPE}}": blended.face_shape,
        "{{RESEMBLANCE}}": describe_similarity(
            request.similarity, request.parent1_name, request.parent2_name
        ),
    }
    prompt = PROMPT_BABY_PORTRAIT
    for placeholder, value in replacements.items():
        prompt = prompt.replace(placeholder, value)

    logger.debug("Composed generation prompt", prompt=prompt)
    return prompt
