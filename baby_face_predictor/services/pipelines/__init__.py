from .baby_prediction import BabyPredictionPipeline, create_pipeline

__all__ = ["BabyPredictionPipeline", "create_pipeline"]
