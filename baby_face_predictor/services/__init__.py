# baby_face_predictor/services/__init__.py
from .baby_name_generator import generate_baby_name, generate_multiple_baby_names
from .image_generation_service import ModelInvoker, check_service_status
from .output_normalizer import normalize_to_url

__all__ = [
    "ModelInvoker",
    "check_service_status",
    "generate_baby_name",
    "generate_multiple_baby_names",
    "normalize_to_url",
]
