# File: baby_face_predictor/services/clients/replicate_async_client.py
from __future__ import annotations

import asyncio
import math
from collections.abc import Awaitable, Callable
from typing import Any

import aiohttp
import orjson
import structlog
from tenacity import wait_exponential

from baby_face_predictor.data.settings import settings
from baby_face_predictor.services.utils.http_client import http_client
from baby_face_predictor.services.utils.retry import backoff_retrying

logger = structlog.get_logger(__name__)

MAX_HTTP_RETRIES = 3
TERMINAL_STATES = frozenset({"succeeded", "failed", "canceled"})


class ReplicateError(Exception):
    """A non-2xx answer from the API or a prediction that did not succeed."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ReplicateAsyncClient:
    """
    Async, non-blocking client for the Replicate predictions API.

    `run()` creates a prediction, waits for it with the `Prefer: wait` header
    and then polls its `get` URL with a growing interval until it reaches a
    terminal state. The raw `output` field is returned untouched; its shape
    differs from model to model.
    """

    def __init__(
        self,
        api_token: str | None = None,
        *,
        base_url: str | None = None,
        session: aiohttp.ClientSession | None = None,
        concurrency_limit: int = 8,
        prefer_wait_s: int | None = None,
        poll_interval_s: float | None = None,
        poll_interval_max_s: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._api_token = api_token or settings.get_replicate_token()
        if not self._api_token:
            raise RuntimeError(
                "REPLICATE_API_TOKEN is missing. Set env var or settings.api_urls.replicate_api_token."
            )
        self._base_url = (base_url or str(settings.api_urls.replicate)).rstrip("/")
        self._session = session
        self._sem = asyncio.Semaphore(concurrency_limit)
        config = settings.generation
        self._prefer_wait_s = prefer_wait_s if prefer_wait_s is not None else config.prefer_wait_s
        self._poll_interval_s = poll_interval_s if poll_interval_s is not None else config.poll_interval_s
        self._poll_interval_max_s = (
            poll_interval_max_s if poll_interval_max_s is not None else config.poll_interval_max_s
        )
        self._sleep = sleep
        logger.info("ReplicateAsyncClient initialized", concurrency=concurrency_limit)

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_token}",
            "Content-Type": "application/json",
        }

    async def run(self, model_ref: str, input: dict[str, Any]) -> Any:
        """Runs a model to completion and returns the prediction's output."""
        async with self._sem:
            prediction = await self._create_prediction(model_ref, input)
            log = logger.bind(prediction_id=prediction.get("id"), model=model_ref)
            log.info("replicate.prediction.created", status=prediction.get("status"))

            try:
                prediction = await self._poll_until_done(prediction)
            except asyncio.CancelledError:
                await self._cancel_prediction(prediction, log)
                raise

            status = prediction.get("status")
            if status != "succeeded":
                error = prediction.get("error") or f"Prediction {status}"
                log.warning("replicate.prediction.unsuccessful", status=status, error=error)
                raise ReplicateError(str(error))

            log.info("replicate.prediction.succeeded", predict_time=(prediction.get("metrics") or {}).get("predict_time"))
            return prediction.get("output")

    async def account(self) -> dict[str, Any]:
        """Returns the account owning the token. Used as a cheap credentials probe."""
        return await self._request("GET", f"{self._base_url}/account")

    def _create_url_and_body(self, model_ref: str, input: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        if ":" in model_ref:
            _, version = model_ref.split(":", 1)
            return f"{self._base_url}/predictions", {"version": version, "input": input}
        owner, name = model_ref.split("/", 1)
        return f"{self._base_url}/models/{owner}/{name}/predictions", {"input": input}

    async def _create_prediction(self, model_ref: str, input: dict[str, Any]) -> dict[str, Any]:
        url, body = self._create_url_and_body(model_ref, input)
        headers = {**self._headers, "Prefer": f"wait={self._prefer_wait_s}"}
        return await self._request("POST", url, json_data=body, headers=headers)

    async def _poll_until_done(self, prediction: dict[str, Any]) -> dict[str, Any]:
        attempt = 0
        interval = self._poll_interval_s
        get_url = (prediction.get("urls") or {}).get("get") or f"{self._base_url}/predictions/{prediction.get('id')}"

        while prediction.get("status") not in TERMINAL_STATES:
            await self._sleep(interval)
            prediction = await self._request("GET", get_url)
            logger.debug("replicate.status", state=prediction.get("status"))
            attempt += 1
            interval = min(self._poll_interval_max_s, self._poll_interval_s * math.pow(1.3, attempt))

        return prediction

    async def _cancel_prediction(self, prediction: dict[str, Any], log: Any) -> None:
        if prediction.get("status") in TERMINAL_STATES:
            return
        cancel_url = (prediction.get("urls") or {}).get("cancel") or (
            f"{self._base_url}/predictions/{prediction.get('id')}/cancel"
        )
        try:
            await self._request("POST", cancel_url)
            log.warning("replicate.prediction.cancelled")
        except Exception:
            log.exception("replicate.prediction.cancel.failed")

    async def _request(
        self,
        method: str,
        url: str,
        *,
        json_data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        session = self._session or await http_client.session()
        result: Any = {}
        async for attempt in backoff_retrying(
            attempts=MAX_HTTP_RETRIES + 1,
            wait=wait_exponential(multiplier=0.3),
            is_retryable=lambda exc: isinstance(exc, (aiohttp.ClientConnectionError, asyncio.TimeoutError)),
            sleep=self._sleep,
            log=logger.bind(method=method, url=url),
        ):
            with attempt:
                data = orjson.dumps(json_data) if json_data is not None else None
                async with session.request(method, url, headers=headers or self._headers, data=data) as resp:
                    text = await resp.text()
                    if resp.status >= 400:
                        raise ReplicateError(f"{resp.status} {resp.reason}: {text}", status=resp.status)
                    result = orjson.loads(text) if text else {}
        return result
