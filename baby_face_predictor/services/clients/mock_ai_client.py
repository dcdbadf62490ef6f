# baby_face_predictor/services/clients/mock_ai_client.py
from __future__ import annotations
import asyncio
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

# llava streams its answer token by token
_MOCK_VISION_TOKENS = [
    "The person has ", "medium skin ", "tone with a warm undertone. ",
    "Their eyes are ", "brown ", "and the hair is ", "dark brown hair, ", "wavy. ",
    "The face shape is ", "oval ", "with soft cheekbones.",
]
_MOCK_IMAGE_URL = "https://replicate.delivery/mock/baby-portrait.png"


class MockAIClient:
    """
    Stand-in for the Replicate client when running locally without
    credentials. Vision calls answer with a canned description and
    generation calls with a canned image URL.
    """

    def __init__(self, delay_s: float = 0.5, **_kwargs: Any) -> None:
        self._delay_s = delay_s

    async def run(self, model_ref: str, input: dict[str, Any]) -> Any:
        await asyncio.sleep(self._delay_s)
        if "image" in input:
            logger.info("MOCK Vision: returning canned description", model=model_ref)
            return list(_MOCK_VISION_TOKENS)
        logger.info("MOCK Images: returning canned image URL", model=model_ref, prompt=input.get("prompt", "")[:80])
        return [_MOCK_IMAGE_URL]

    async def account(self) -> dict[str, Any]:
        return {"type": "user", "username": "mock"}
