from .composer import compose_prompt, describe_similarity

__all__ = ["compose_prompt", "describe_similarity"]
