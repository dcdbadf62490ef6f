# baby_face_predictor/web_handlers/generate_baby.py
import uuid
from typing import TYPE_CHECKING, Any

import orjson
import structlog
from aiohttp import web
from pydantic import ValidationError

from baby_face_predictor.data.settings import settings
from baby_face_predictor.dto.generation import GenerationRequest
from baby_face_predictor.services.image_generation_service import check_service_status

if TYPE_CHECKING:
    import aiojobs

    from baby_face_predictor.services.pipelines import BabyPredictionPipeline

logger = structlog.get_logger(__name__)

PIPELINE_KEY: web.AppKey["BabyPredictionPipeline"] = web.AppKey("pipeline")
GENERATION_CLIENT_KEY: web.AppKey[Any] = web.AppKey("generation_client")
SCHEDULER_KEY: web.AppKey["aiojobs.Scheduler"] = web.AppKey("scheduler")

_IMAGE_FIELDS = {"parentImage1", "parentImage2", "parent_image_1", "parent_image_2"}
_FIELD_MESSAGES: tuple[tuple[frozenset[str], str], ...] = (
    (frozenset({"similarity"}), "Similarity must be a number between 0 and 100"),
    (frozenset({"age"}), "Age must be a number between 1 and 5"),
    (frozenset({"gender"}), "Gender must be male, female, or random"),
)
IMAGES_REQUIRED = "Both parent images are required"
INVALID_IMAGE = "Invalid image data format"
INVALID_BODY = "Request body must be a JSON object"
SERVICE_UNAVAILABLE = "AI generation service is currently unavailable. Please try again later."


def _dumps(value: Any) -> str:
    return orjson.dumps(value).decode()


def _error_response(message: str, status: int) -> web.Response:
    return web.json_response({"success": False, "error": message}, status=status, dumps=_dumps)


def validation_message(exc: ValidationError) -> str:
    """Picks the single user-facing message for a rejected request body."""
    errors = exc.errors()
    image_errors = [e for e in errors if e["loc"] and e["loc"][0] in _IMAGE_FIELDS]
    if image_errors:
        if any(e["type"] == "missing" or e.get("input") in ("", None) for e in image_errors):
            return IMAGES_REQUIRED
        return INVALID_IMAGE

    for fields, message in _FIELD_MESSAGES:
        if any(e["loc"] and e["loc"][0] in fields for e in errors):
            return message

    first = errors[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"Invalid field '{location}': {first['msg']}"


async def generate_baby_handler(req: web.Request) -> web.Response:
    # aiohttp runs each request in its own task
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=req.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
    )

    try:
        body = await req.json(loads=orjson.loads)
    except ValueError:
        return _error_response(INVALID_BODY, 400)
    if not isinstance(body, dict):
        return _error_response(INVALID_BODY, 400)

    try:
        request = GenerationRequest.model_validate(body)
    except ValidationError as e:
        message = validation_message(e)
        logger.info("Rejected generation request", reason=message)
        return _error_response(message, 400)

    scheduler = req.app[SCHEDULER_KEY]
    if scheduler.pending_count >= settings.web.max_pending_jobs:
        raise web.HTTPTooManyRequests
    if scheduler.closed:
        raise web.HTTPServiceUnavailable(reason="Closed queue")

    if settings.web.check_service_before_generation:
        status = await check_service_status(req.app[GENERATION_CLIENT_KEY])
        if not status["available"]:
            return _error_response(SERVICE_UNAVAILABLE, 503)

    pipeline = req.app[PIPELINE_KEY]
    job = await scheduler.spawn(pipeline.run(request))
    result = await job.wait()

    return web.json_response(result.to_response_json(), dumps=_dumps)


async def health_handler(req: web.Request) -> web.Response:
    status = await check_service_status(req.app[GENERATION_CLIENT_KEY])
    return web.json_response(
        {
            "status": "healthy",
            "service": {"available": status["available"], "error": status["error"]},
        },
        dumps=_dumps,
    )


routes = [
    web.post("/api/generate-baby", generate_baby_handler),
    web.get("/api/generate-baby", health_handler),
]
