# baby_face_predictor/data/constants.py
from enum import Enum


class Gender(str, Enum):
    """Requested gender bracket of the predicted child."""
    MALE = "male"
    FEMALE = "female"
    RANDOM = "random"


class FeatureCategory(str, Enum):
    """Categorical facial attributes extracted from a parent photo."""
    SKIN_TONE = "skin_tone"
    EYE_COLOR = "eye_color"
    HAIR_COLOR = "hair_color"
    FACE_SHAPE = "face_shape"


MIN_SIMILARITY = 0
MAX_SIMILARITY = 100
MIN_AGE = 1
MAX_AGE = 5
DEFAULT_AGE = 2
