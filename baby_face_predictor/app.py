# baby_face_predictor/app.py
from typing import Any

import aiojobs
import structlog
from aiohttp import web

from baby_face_predictor import utils
from baby_face_predictor.data.enums import AiFeature
from baby_face_predictor.data.settings import settings
from baby_face_predictor.services.clients import factory as ai_client_factory
from baby_face_predictor.services.pipelines import BabyPredictionPipeline, create_pipeline
from baby_face_predictor.services.utils.http_client import http_client
from baby_face_predictor.web_handlers.generate_baby import (
    GENERATION_CLIENT_KEY,
    PIPELINE_KEY,
    SCHEDULER_KEY,
)
from baby_face_predictor.web_handlers.generate_baby import routes as generate_baby_routes

logger = structlog.get_logger(__name__)


async def create_app(
    pipeline: BabyPredictionPipeline | None = None,
    generation_client: Any | None = None,
) -> web.Application:
    if generation_client is None:
        generation_client, _ = ai_client_factory.get_ai_client_and_model(
            feature=AiFeature.IMAGE_GENERATION
        )
    if pipeline is None:
        pipeline = create_pipeline(generation_client)

    app = web.Application()
    app.add_routes(generate_baby_routes)
    app[PIPELINE_KEY] = pipeline
    app[GENERATION_CLIENT_KEY] = generation_client
    app.on_startup.append(aiohttp_on_startup)
    app.on_shutdown.append(aiohttp_on_shutdown)
    return app


async def aiohttp_on_startup(app: web.Application) -> None:
    # The scheduler binds to the running loop, so it is created here
    app[SCHEDULER_KEY] = aiojobs.Scheduler(
        limit=settings.web.max_concurrent_jobs,
        pending_limit=settings.web.max_pending_jobs,
    )
    logger.info(
        "Baby face predictor started",
        host=settings.web.listening_host,
        port=settings.web.listening_port,
    )


async def aiohttp_on_shutdown(app: web.Application) -> None:
    await app[SCHEDULER_KEY].close()
    await http_client.close()
    logger.info("Baby face predictor stopped")


def main() -> None:
    utils.logging.setup_logger()
    web.run_app(
        create_app(),
        handle_signals=True,
        host=settings.web.listening_host,
        port=settings.web.listening_port,
    )


if __name__ == "__main__":
    main()
