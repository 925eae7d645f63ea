from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"

    vision_model: str = "gpt-4o"
    max_output_tokens: int = 1000

    # Per-attempt HTTP timeouts (seconds)
    request_timeout: float = 60.0
    connect_timeout: float = 10.0

    # Retry budgets (total attempts, not retries)
    bite_max_attempts: int = 3
    default_max_attempts: int = 2
    retry_base_delay: float = 1.0  # delay = base * 2^retry -> 2s, 4s, ...

    cache_ttl_seconds: int = 86400  # 24 hours
    geocode_timeout: float = 2.0
    max_image_bytes: int = 20 * 1024 * 1024

    emergency_danger_level: int = 8

    class Config:
        env_file = ".env"

    @property
    def chat_completions_url(self) -> str:
        return f"{self.openai_base_url.rstrip('/')}/chat/completions"


settings = Settings()
