from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # LLM configuration (OpenAI-compatible endpoint, e.g. OpenRouter)
    llm_api_key: str = ""
    llm_base_url: str = "https://openrouter.ai/api/v1"
    llm_model_name: str = "nvidia/nemotron-nano-12b-v2-vl:free"
    llm_temperature: float = 0.1
    llm_max_tokens: int = 2048  # caps runaway structured output
    llm_timeout: float = 120.0
    llm_max_retries: int = 2  # retries with exponential backoff
    llm_retry_delay: float = 2.0  # first retry delay (seconds), doubles afterwards
    llm_max_concurrent: int = 3

    # Vision (per-frame OCR + style inference)
    vision_model_name: str = "qwen/qwen2.5-vl-72b-instruct"
    vision_batch_size: int = 5
    vision_temperature: float = 0.0

    # Temporal grouping
    grouping_mode: str = "auto"  # exact | fuzzy | auto
    fuzzy_similarity_threshold: float = 0.8
    fuzzy_singleton_ratio: float = 0.5  # auto mode: singleton share that triggers the fuzzy pass
    min_group_detections: int = 2

    # Motion classification (percentage-of-frame units)
    static_variance_threshold: float = 2.0
    static_displacement_threshold: float = 5.0
    pop_in_jump_threshold: float = 10.0
    velocity_analysis: bool = False
    easing_ratio: float = 0.7
    linear_tolerance: float = 0.3

    # Enrichment fan-out
    enrichment_timeout_s: float = 60.0

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]


settings = Settings()
