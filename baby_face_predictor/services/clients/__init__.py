# baby_face_predictor/services/clients/__init__.py
from .factory import get_ai_client, get_ai_client_and_model
from .mock_ai_client import MockAIClient
from .replicate_async_client import ReplicateAsyncClient, ReplicateError

__all__ = [
    "MockAIClient",
    "ReplicateAsyncClient",
    "ReplicateError",
    "get_ai_client",
    "get_ai_client_and_model",
]
