"""Shared fakes for the pipeline tests. No test talks to a real provider."""
import asyncio
from typing import Any

import pytest

from baby_face_predictor.data.settings import GenerationModelConfig
from baby_face_predictor.dto.generation import GenerationRequest

PARENT1_IMAGE = "data:image/jpeg;base64,cGFyZW50LW9uZQ=="
PARENT2_IMAGE = "data:image/png;base64,cGFyZW50LXR3bw=="

PARENT1_DESCRIPTION = (
    "The person has olive skin with warm undertones. Their eyes are hazel and "
    "they have long dark brown hair, slightly wavy. The face shape is oval."
)
PARENT2_DESCRIPTION = (
    "This man has dark skin, brown eyes and short black hair. "
    "He has a square face with a strong jaw."
)


class SleepRecorder:
    """Drop-in for asyncio.sleep that returns at once and remembers the delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeVision:
    """
    Vision describer answering from a script. Each entry is either a text
    answer or an exception to raise. `by_image` answers per image instead.
    """

    def __init__(self, script: list[Any] | None = None, by_image: dict[str, str] | None = None) -> None:
        self.script = list(script or [])
        self.by_image = by_image or {}
        self.calls: list[tuple[str, str]] = []

    async def describe(self, image: str, prompt: str) -> str:
        self.calls.append((image, prompt))
        if self.by_image:
            return self.by_image[image]
        answer = self.script.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        return answer


class FakeGenerationClient:
    """Replicate-shaped client; each `run` consumes one scripted output or exception."""

    def __init__(self, outputs: list[Any] | None = None, account_error: Exception | None = None) -> None:
        self.outputs = list(outputs or [])
        self.account_error = account_error
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def run(self, model_ref: str, input: dict[str, Any]) -> Any:
        self.calls.append((model_ref, input))
        output = self.outputs.pop(0)
        if isinstance(output, BaseException):
            raise output
        if output == "hang":
            await asyncio.sleep(10)
        return output

    async def account(self) -> dict[str, Any]:
        if self.account_error:
            raise self.account_error
        return {"username": "tester"}


class FixedRandom:
    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def no_sleep() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def models() -> list[GenerationModelConfig]:
    return [
        GenerationModelConfig(
            name="Primary",
            model="owner/primary:v1",
            prompt_template="RAW photo, {{PROMPT}}",
            negative_prompt="cartoon",
            params={"width": 768},
        ),
        GenerationModelConfig(name="Fallback 1", model="owner/fallback-one:v2"),
        GenerationModelConfig(name="Fallback 2", model="owner/fallback-two"),
    ]


def make_request(**overrides: Any) -> GenerationRequest:
    payload: dict[str, Any] = {
        "parentImage1": PARENT1_IMAGE,
        "parentImage2": PARENT2_IMAGE,
        "similarity": 50,
        "age": 2,
        "gender": "random",
        "parent1Name": "Alex",
        "parent2Name": "Sam",
    }
    payload.update(overrides)
    return GenerationRequest.model_validate(payload)
