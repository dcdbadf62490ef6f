# baby_face_predictor/data/settings.py
from typing import Any, Literal

from pydantic import AliasChoices, AnyHttpUrl, BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiUrls(BaseModel):
    replicate: AnyHttpUrl = "https://api.replicate.com/v1"
    replicate_api_token: SecretStr | None = None
    # --- OpenAI-compatible vision provider ---
    openai: AnyHttpUrl = "https://api.openai.com/v1"
    openai_api_key: SecretStr | None = None


class HttpConfig(BaseModel):
    """Shared provider HTTP session."""
    connect_timeout_s: float = 5.0
    read_timeout_s: float = 60.0
    connection_limit: int = 100
    user_agent: str = "baby-face-predictor/0.1"


class VisionConfig(BaseModel):
    """Parent photo analysis (vision-description model)."""
    client: str = "replicate"
    model: str = "yorickvp/llava-13b:b5f6212d032508382d61ff00469ddda3e32fd8a0e75dc39d8a4191bb742157fb"
    timeout_s: float = 30.0
    max_retries: int = 2
    backoff_base_s: float = 1.0
    inconclusive_retry_delay_s: float = 1.0


class GenerationModelConfig(BaseModel):
    """One entry of the generation fallback chain."""
    name: str
    model: str
    prompt_template: str = "{{PROMPT}}"
    negative_prompt: str = ""
    params: dict[str, Any] = Field(default_factory=dict)

    def build_input(self, prompt: str) -> dict[str, Any]:
        """Builds the provider input for this model from a composed prompt."""
        payload = dict(self.params)
        payload["prompt"] = self.prompt_template.replace("{{PROMPT}}", prompt)
        if self.negative_prompt:
            payload["negative_prompt"] = self.negative_prompt
        return payload


_SDXL = "stability-ai/sdxl:39ed52f2a78e934b3ba6e2a89f5b1c712de7dfea535525255b1aa35c5565e08b"
_STABLE_DIFFUSION = "stability-ai/stable-diffusion:db21e45d3f7023abc2a46ee38a23973f6dce16bb082a930b0c49861f96d1e5bf"


def _default_generation_models() -> list[GenerationModelConfig]:
    return [
        GenerationModelConfig(
            name="SDXL (Primary)",
            model=_SDXL,
            prompt_template="RAW photo, {{PROMPT}}",
            negative_prompt=(
                "(deformed iris, deformed pupils), text, worst quality, low quality, jpeg artifacts, "
                "ugly, duplicate, morbid, mutilated, (extra fingers), (mutated hands), poorly drawn hands, "
                "mutation, blurry, dehydrated, bad anatomy, bad proportions, extra limbs, cloned face, "
                "disfigured, gross proportions, malformed limbs, missing arms, missing legs, extra arms, "
                "extra legs, (fused fingers), (too many fingers), long neck, camera, twins, collage, grid, "
                "montage, (black and white:1.3), (monochrome:1.3), (grayscale:1.2), cartoon, anime, "
                "drawing, painting, 3d render, cgi, illustration, wrong skin tone, pale when should be dark, "
                "light skin when should be dark, incorrect complexion, washed out skin, bleached appearance"
            ),
            params={
                "width": 768,
                "height": 1024,
                "num_outputs": 1,
                "num_inference_steps": 30,
                "guidance_scale": 6.0,
                "refine": "expert_ensemble_refiner",
                "scheduler": "K_EULER",
                "apply_watermark": False,
            },
        ),
        GenerationModelConfig(
            name="Stable Diffusion (Fallback 1)",
            model=_STABLE_DIFFUSION,
            prompt_template="professional portrait photography, {{PROMPT}}",
            negative_prompt=(
                "cartoon, anime, drawing, painting, 3d render, cgi, illustration, "
                "multiple babies, twins, text, blurry, deformed"
            ),
            params={
                "width": 512,
                "height": 768,
                "num_outputs": 1,
                "num_inference_steps": 20,
                "guidance_scale": 7.5,
            },
        ),
        GenerationModelConfig(
            name="Simple SDXL (Fallback 2)",
            model=_SDXL,
            negative_prompt="cartoon, multiple babies, 3d render",
            params={
                "width": 768,
                "height": 1024,
                "num_outputs": 1,
                "num_inference_steps": 20,
                "guidance_scale": 5.0,
                "scheduler": "DPMSolverMultistep",
            },
        ),
    ]


class GenerationConfig(BaseModel):
    client: str = "replicate"
    models: list[GenerationModelConfig] = Field(default_factory=_default_generation_models)
    inter_model_delay_s: float = 2.0
    model_timeout_s: float = 25.0
    pipeline_timeout_s: float = 60.0
    # Replicate polling
    prefer_wait_s: int = 10
    poll_interval_s: float = 0.8
    poll_interval_max_s: float = 4.0


class BlendingConfig(BaseModel):
    """
    Heuristic dominance knobs. Empirically tuned, not a genetic model:
    a dominant value wins when rng.random() exceeds the threshold.
    """
    eye_dominance_threshold: float = 0.3
    hair_dominance_threshold: float = 0.4
    lower_band: float = 0.3
    upper_band: float = 0.7


class WebConfig(BaseModel):
    listening_host: str = "0.0.0.0"
    listening_port: int = 8080
    max_pending_jobs: int = 20
    max_concurrent_jobs: int = 4
    # Probe the provider account before spending a generation
    check_service_before_generation: bool = True


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_urls: ApiUrls = Field(default_factory=ApiUrls)
    replicate_api_token: SecretStr | None = Field(
        default=None, validation_alias=AliasChoices("replicate_api_token", "REPLICATE_API_TOKEN")
    )

    vision: VisionConfig = Field(default_factory=VisionConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    blending: BlendingConfig = Field(default_factory=BlendingConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    web: WebConfig = Field(default_factory=WebConfig)

    logging_level: int = 20
    # "auto" renders to the console on a TTY and JSON otherwise
    log_format: Literal["auto", "console", "json"] = "auto"

    def get_replicate_token(self) -> str | None:
        token = self.api_urls.replicate_api_token or self.replicate_api_token
        return token.get_secret_value() if token else None


settings = Settings()
