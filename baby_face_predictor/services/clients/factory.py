# baby_face_predictor/services/clients/factory.py
from __future__ import annotations
from typing import Any

from openai import AsyncOpenAI

from baby_face_predictor.data.enums import AiFeature
from baby_face_predictor.data.settings import settings

from .mock_ai_client import MockAIClient
from .replicate_async_client import ReplicateAsyncClient

_CLIENT_CLASSES: dict[str, type[Any]] = {
    "mock": MockAIClient,
    "replicate": ReplicateAsyncClient,
    "openai": AsyncOpenAI,
}


def _create_client_instance(client_name: str) -> Any:
    client_class = _CLIENT_CLASSES.get(client_name)
    if not client_class:
        raise ValueError(f"Unknown client type specified in config: '{client_name}'")

    if client_name == "openai":
        if not settings.api_urls.openai_api_key:
            raise RuntimeError("Missing API key for OpenAI. Set env var API_URLS__OPENAI_API_KEY.")
        return client_class(
            api_key=settings.api_urls.openai_api_key.get_secret_value(),
            base_url=str(settings.api_urls.openai),
        )

    # Replicate reads its token from settings, Mock needs nothing
    return client_class()


def get_ai_client(client_name: str) -> Any:
    """
    Creates an AI client instance for a given client name.
    """
    return _create_client_instance(client_name.lower())


def get_ai_client_and_model(*, feature: AiFeature) -> tuple[Any, str | None]:
    """
    Creates the client configured for a pipeline feature and returns it along
    with the feature's model. Image generation has no single model (it walks
    a list of them), so its model is None.
    """
    feature_config = getattr(settings, feature.value, None)
    if feature_config is None or not hasattr(feature_config, "client"):
        raise ValueError(f"Configuration for feature '{feature.value}' not found in settings.")

    client_instance = _create_client_instance(feature_config.client.lower())
    return client_instance, getattr(feature_config, "model", None)
