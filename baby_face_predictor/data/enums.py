from enum import Enum


class AiFeature(str, Enum):
    """Enumeration of external AI features used by the pipeline."""

    VISION_ANALYSIS = "vision"
    IMAGE_GENERATION = "generation"
