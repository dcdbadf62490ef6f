# baby_face_predictor/dto/facial_features.py

from pydantic import BaseModel, ConfigDict, Field


class ParentFeatures(BaseModel):
    """Categorical facial attributes of one parent photo."""
    model_config = ConfigDict(frozen=True)

    skin_tone: str = Field(description="e.g., 'fair', 'olive', 'dark brown'")
    eye_color: str = Field(description="e.g., 'blue', 'dark brown', 'hazel'")
    hair_color: str = Field(description="e.g., 'blonde', 'jet black', 'auburn'")
    face_shape: str = Field(description="e.g., 'oval', 'square', 'heart'")
    # Kept for diagnostics only; nothing downstream reads it.
    raw_description: str = ""


class BlendedFeatures(BaseModel):
    """The child's resolved attributes after similarity-weighted blending."""
    model_config = ConfigDict(frozen=True)

    skin_tone: str
    eye_color: str
    hair_color: str
    face_shape: str
