# File: baby_face_predictor/services/image_generation_service.py
import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from tenacity import wait_fixed

from baby_face_predictor.data.settings import GenerationModelConfig, settings
from baby_face_predictor.services.generation_errors import (
    AllModelsFailedError,
    GenerationAbortedError,
    InvalidModelOutputError,
    classify_error,
    describe_error,
)
from baby_face_predictor.services.output_normalizer import normalize_to_url
from baby_face_predictor.services.utils.retry import backoff_retrying

logger = structlog.get_logger(__name__)


class ModelInvoker:
    """
    Walks the configured generation models in order until one returns a
    usable image URL.

    Rate-limit, billing and content-safety failures stop the walk at once,
    since another model on the same account would fail the same way.
    """

    def __init__(
        self,
        client: Any,
        models: list[GenerationModelConfig] | None = None,
        *,
        model_timeout_s: float | None = None,
        inter_model_delay_s: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        config = settings.generation
        self._client = client
        self._models = list(models if models is not None else config.models)
        self._model_timeout_s = model_timeout_s if model_timeout_s is not None else config.model_timeout_s
        self._inter_model_delay_s = (
            inter_model_delay_s if inter_model_delay_s is not None else config.inter_model_delay_s
        )
        self._sleep = sleep

    @property
    def model_names(self) -> list[str]:
        return [model.name for model in self._models]

    async def generate(self, prompt: str) -> str:
        if not self._models:
            raise AllModelsFailedError([], None)

        attempted: list[str] = []
        try:
            async for attempt in backoff_retrying(
                attempts=len(self._models),
                wait=wait_fixed(self._inter_model_delay_s),
                is_retryable=lambda exc: classify_error(exc).is_retryable,
                sleep=self._sleep,
                log=logger,
            ):
                with attempt:
                    model = self._models[attempt.retry_state.attempt_number - 1]
                    attempted.append(model.name)
                    return await self._try_model(model, prompt, position=len(attempted))
        except Exception as exc:
            kind = classify_error(exc)
            if not kind.is_retryable:
                logger.warning("Generation aborted", kind=kind.value, model=attempted[-1], error=describe_error(exc))
                raise GenerationAbortedError(kind, exc) from exc
            logger.error("All generation models failed", attempted_models=attempted, error=describe_error(exc))
            raise AllModelsFailedError(attempted, exc) from exc
        raise AssertionError("Unreachable")

    async def _try_model(self, model: GenerationModelConfig, prompt: str, *, position: int) -> str:
        log = logger.bind(model=model.name, attempt=position, total=len(self._models))
        log.info("Trying generation model")
        start_time = time.monotonic()

        async def _call() -> str | None:
            output = await self._client.run(model.model, model.build_input(prompt))
            return await normalize_to_url(output)

        url = await asyncio.wait_for(_call(), timeout=self._model_timeout_s)
        if url is None:
            log.warning("Model returned no usable image URL")
            raise InvalidModelOutputError(model.name)

        log.info("Generation model succeeded", duration_ms=int((time.monotonic() - start_time) * 1000))
        return url


async def check_service_status(client: Any) -> dict[str, Any]:
    """Probes the provider account; never raises."""
    try:
        await client.account()
    except Exception as e:
        logger.exception("Generation service status check failed")
        return {"available": False, "error": describe_error(e)}
    return {"available": True, "error": None}
