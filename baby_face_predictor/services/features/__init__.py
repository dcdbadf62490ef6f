# baby_face_predictor/services/features/__init__.py
from .blender import FeatureBlender
from .extractor import PARENT_ANALYSIS_PROMPT, FeatureExtractor
from .vocabulary import parse_description

__all__ = [
    "PARENT_ANALYSIS_PROMPT",
    "FeatureBlender",
    "FeatureExtractor",
    "parse_description",
]
