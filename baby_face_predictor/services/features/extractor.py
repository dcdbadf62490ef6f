# baby_face_predictor/services/features/extractor.py
import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Protocol

import structlog
from tenacity import wait_exponential

from baby_face_predictor.data.constants import FeatureCategory
from baby_face_predictor.data.settings import VisionConfig, settings
from baby_face_predictor.dto.facial_features import ParentFeatures
from baby_face_predictor.services.features.vocabulary import (
    FALLBACK_CATALOG,
    parse_description,
)
from baby_face_predictor.services.utils.retry import backoff_retrying

logger = structlog.get_logger(__name__)

PARENT_ANALYSIS_PROMPT = (
    "Analyze this person's physical features for genetic inheritance. Describe: "
    "1) Skin tone and ethnicity (be specific: light/fair/olive/medium/brown/dark/black, "
    "African/Caucasian/Asian/Hispanic/Latino/Mixed), "
    "2) Eye color (brown/blue/green/hazel/amber), "
    "3) Hair color and texture (black/brown/blonde/red/gray, straight/wavy/curly), "
    "4) Face shape (round/oval/square/heart/long/angular), "
    "5) Other distinctive features that a child might inherit."
)
_RAW_DESCRIPTION_LIMIT = 300
_FALLBACK_DESCRIPTION = "fallback features - vision analysis unavailable"


class Describer(Protocol):
    async def describe(self, image: str, prompt: str) -> str: ...


class FeatureExtractor:
    """
    Turns one parent photo into a fully populated ParentFeatures.

    extract_features() never raises: failed or inconclusive analyses end in
    an entry of the fallback catalog, picked by a coarse time-based index so
    that repeated failures don't always produce the same baby.
    """

    def __init__(
        self,
        vision: Describer,
        config: VisionConfig | None = None,
        *,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._vision = vision
        self._config = config or settings.vision
        self._clock = clock
        self._sleep = sleep

    async def extract_features(self, image: str) -> ParentFeatures:
        try:
            return await self._extract(image)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Vision analysis failed, using fallback features")
            return self._fallback_features()

    async def _extract(self, image: str) -> ParentFeatures:
        extra_retry_used = False
        while True:
            description = await self._describe_with_retries(image)
            parsed = parse_description(description)

            inconclusive = (
                parsed[FeatureCategory.SKIN_TONE] is None
                and parsed[FeatureCategory.EYE_COLOR] is None
            )
            if inconclusive and not extra_retry_used:
                extra_retry_used = True
                logger.warning("Analysis returned unclear results, retrying once")
                await self._sleep(self._config.inconclusive_retry_delay_s)
                continue

            return self._resolve(parsed, description)

    async def _describe_with_retries(self, image: str) -> str:
        log = logger.bind(model_timeout_s=self._config.timeout_s)
        description = ""
        async for attempt in backoff_retrying(
            attempts=self._config.max_retries + 1,
            wait=wait_exponential(multiplier=self._config.backoff_base_s),
            is_retryable=lambda _exc: True,
            sleep=self._sleep,
            log=log,
        ):
            with attempt:
                log.info("Analyzing parent features", attempt=attempt.retry_state.attempt_number)
                description = await asyncio.wait_for(
                    self._vision.describe(image, PARENT_ANALYSIS_PROMPT),
                    timeout=self._config.timeout_s,
                )
        return description

    def _pick_fallback(self) -> dict[FeatureCategory, str]:
        index = int(self._clock()) % len(FALLBACK_CATALOG)
        return FALLBACK_CATALOG[index]

    def _resolve(self, parsed: dict[FeatureCategory, str | None], description: str) -> ParentFeatures:
        fallback = self._pick_fallback()
        missing = [category.value for category, value in parsed.items() if value is None]
        if missing:
            logger.info("Filling unresolved features from fallback catalog", missing=missing)

        return ParentFeatures(
            skin_tone=parsed[FeatureCategory.SKIN_TONE] or fallback[FeatureCategory.SKIN_TONE],
            eye_color=parsed[FeatureCategory.EYE_COLOR] or fallback[FeatureCategory.EYE_COLOR],
            hair_color=parsed[FeatureCategory.HAIR_COLOR] or fallback[FeatureCategory.HAIR_COLOR],
            face_shape=parsed[FeatureCategory.FACE_SHAPE] or fallback[FeatureCategory.FACE_SHAPE],
            raw_description=description[:_RAW_DESCRIPTION_LIMIT],
        )

    def _fallback_features(self) -> ParentFeatures:
        selected = self._pick_fallback()
        return ParentFeatures(
            skin_tone=selected[FeatureCategory.SKIN_TONE],
            eye_color=selected[FeatureCategory.EYE_COLOR],
            hair_color=selected[FeatureCategory.HAIR_COLOR],
            face_shape=selected[FeatureCategory.FACE_SHAPE],
            raw_description=_FALLBACK_DESCRIPTION,
        )
