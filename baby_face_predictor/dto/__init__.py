from .facial_features import BlendedFeatures, ParentFeatures
from .generation import BabyName, GenerationRequest, GenerationResult

__all__ = [
    "BabyName",
    "BlendedFeatures",
    "GenerationRequest",
    "GenerationResult",
    "ParentFeatures",
]
