# baby_face_predictor/dto/generation.py
import re
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from baby_face_predictor.data.constants import (
    MAX_AGE,
    MAX_SIMILARITY,
    MIN_AGE,
    MIN_SIMILARITY,
    Gender,
)

_IMAGE_DATA_URL_RE = re.compile(r"^data:image/(jpeg|jpg|png|webp);base64,")


class GenerationRequest(BaseModel):
    """
    Caller-supplied parameters for one prediction. Immutable for the
    duration of a pipeline run. Wire names are camelCase.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    parent_image_1: str = Field(alias="parentImage1")
    parent_image_2: str = Field(alias="parentImage2")
    similarity: Annotated[int, Field(ge=MIN_SIMILARITY, le=MAX_SIMILARITY, strict=True)] = 50
    age: Annotated[int, Field(ge=MIN_AGE, le=MAX_AGE, strict=True)] = 2
    gender: Gender = Gender.RANDOM
    parent1_name: str | None = Field(default=None, alias="parent1Name")
    parent2_name: str | None = Field(default=None, alias="parent2Name")

    @field_validator("parent_image_1", "parent_image_2")
    @classmethod
    def _check_image_data_url(cls, value: str) -> str:
        if not _IMAGE_DATA_URL_RE.match(value):
            raise ValueError("expected a base64 image data URL (jpeg, png or webp)")
        return value


class BabyName(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    explanation: str


class GenerationResult(BaseModel):
    """
    Output envelope of a pipeline run. Created once, returned once.
    Callers branch on `success`, never on exceptions.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    success: bool
    image_url: str | None = Field(default=None, alias="imageUrl")
    baby_name: BabyName | None = Field(default=None, alias="babyName")
    error: str | None = None
    processing_time: int = Field(default=0, alias="processingTime")

    @field_validator("image_url")
    @classmethod
    def _check_absolute_url(cls, value: str | None) -> str | None:
        if value is not None and not value.startswith("http"):
            raise ValueError("image_url must be an absolute http(s) URL")
        return value

    def to_response_json(self) -> dict:
        """Serializes the result with the camelCase wire names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
