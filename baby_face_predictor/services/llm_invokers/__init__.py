# baby_face_predictor/services/llm_invokers/__init__.py
from .vision_service import VisionService

__all__ = ["VisionService"]
