# baby_face_predictor/services/pipelines/baby_prediction.py
import asyncio
import time
from collections.abc import Callable
from typing import Any

import structlog

from baby_face_predictor.data.enums import AiFeature
from baby_face_predictor.data.settings import settings
from baby_face_predictor.dto.generation import BabyName, GenerationRequest, GenerationResult
from baby_face_predictor.services.baby_name_generator import generate_baby_name
from baby_face_predictor.services.clients import factory as ai_client_factory
from baby_face_predictor.services.features import FeatureBlender, FeatureExtractor
from baby_face_predictor.services.generation_errors import user_message
from baby_face_predictor.services.image_generation_service import ModelInvoker
from baby_face_predictor.services.llm_invokers import VisionService
from baby_face_predictor.services.prompting import compose_prompt

logger = structlog.get_logger(__name__)


class BabyPredictionPipeline:
    """
    Full prediction for one request: analyze both parents, blend their
    features, compose a prompt and walk the generation models.

    `run()` always answers with a GenerationResult; failures are reported in
    its `error` field, never raised. Only cancellation propagates.
    """

    def __init__(
        self,
        extractor: FeatureExtractor,
        invoker: ModelInvoker,
        *,
        blender: FeatureBlender | None = None,
        name_generator: Callable[[str | None, str | None], BabyName] = generate_baby_name,
        timeout_s: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.extractor = extractor
        self.invoker = invoker
        self.blender = blender or FeatureBlender()
        self.name_generator = name_generator
        self.timeout_s = timeout_s if timeout_s is not None else settings.generation.pipeline_timeout_s
        self._clock = clock

    async def run(self, request: GenerationRequest) -> GenerationResult:
        start_time = self._clock()
        log = logger.bind(
            similarity=request.similarity,
            age=request.age,
            gender=request.gender.value,
        )
        log.info("Baby prediction started")

        try:
            image_url, baby_name = await asyncio.wait_for(
                self._predict(request, log), timeout=self.timeout_s
            )
        except asyncio.TimeoutError:
            log.error("Baby prediction timed out", timeout_s=self.timeout_s)
            return self._failure(
                f"Generation timed out after {self.timeout_s:g} seconds. Please try again.", start_time
            )
        except Exception as e:
            log.exception("Baby prediction failed")
            return self._failure(user_message(e), start_time)

        processing_time = self._elapsed_ms(start_time)
        log.info("Baby prediction succeeded", processing_time_ms=processing_time)
        return GenerationResult(
            success=True,
            image_url=image_url,
            baby_name=baby_name,
            processing_time=processing_time,
        )

    async def _predict(self, request: GenerationRequest, log: Any) -> tuple[str, BabyName]:
        parent1, parent2 = await asyncio.gather(
            self.extractor.extract_features(request.parent_image_1),
            self.extractor.extract_features(request.parent_image_2),
        )
        log.info(
            "Parent features extracted",
            parent1=parent1.model_dump(exclude={"raw_description"}),
            parent2=parent2.model_dump(exclude={"raw_description"}),
        )

        blended = self.blender.blend(parent1, parent2, request.similarity)
        prompt = compose_prompt(request, blended)
        image_url = await self.invoker.generate(prompt)
        baby_name = self.name_generator(request.parent1_name, request.parent2_name)
        return image_url, baby_name

    def _elapsed_ms(self, start_time: float) -> int:
        return int((self._clock() - start_time) * 1000)

    def _failure(self, error: str, start_time: float) -> GenerationResult:
        return GenerationResult(success=False, error=error, processing_time=self._elapsed_ms(start_time))


def create_pipeline(generation_client: Any | None = None) -> BabyPredictionPipeline:
    """Wires the pipeline from settings."""
    if generation_client is None:
        generation_client, _ = ai_client_factory.get_ai_client_and_model(
            feature=AiFeature.IMAGE_GENERATION
        )
    vision = VisionService()
    return BabyPredictionPipeline(
        extractor=FeatureExtractor(vision),
        invoker=ModelInvoker(generation_client),
    )
