# File: baby_face_predictor/services/llm_invokers/vision_service.py
import time
from typing import Any

import structlog
from openai import AsyncOpenAI

from baby_face_predictor.data.enums import AiFeature
from baby_face_predictor.data.settings import settings
from baby_face_predictor.services.clients import factory as ai_client_factory

logger = structlog.get_logger(__name__)


class VisionService:
    """
    Sends one parent photo to a vision-description model and returns its
    free-text answer. The answer is treated as unreliable text; no schema
    is assumed.

    Works with either a Replicate-style client exposing `run(model, input)`
    (llava streams its answer as a list of tokens) or an OpenAI-compatible
    chat client.
    """

    def __init__(self, client: Any | None = None, model: str | None = None) -> None:
        if client is None:
            client, default_model = ai_client_factory.get_ai_client_and_model(
                feature=AiFeature.VISION_ANALYSIS
            )
            model = model or default_model
        model = model or settings.vision.model
        self.vision_client = client
        self.vision_model = model

    async def describe(self, image: str, prompt: str) -> str:
        log = logger.bind(model=self.vision_model)
        started = time.monotonic()

        if isinstance(self.vision_client, AsyncOpenAI):
            response = await self.vision_client.chat.completions.create(
                model=self.vision_model,
                messages=[
                    {"role": "user", "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": image}},
                    ]}
                ],
                max_tokens=512,
                temperature=0,
            )
            text = response.choices[0].message.content or ""
        else:
            output = await self.vision_client.run(
                self.vision_model, {"image": image, "prompt": prompt}
            )
            text = _join_output(output)

        duration_ms = int((time.monotonic() - started) * 1000)
        log.info("Received vision description", duration_ms=duration_ms, response=text[:300])
        return text


def _join_output(output: Any) -> str:
    if output is None:
        return ""
    if isinstance(output, (list, tuple)):
        return "".join(str(token) for token in output)
    return str(output)
