from typing import Optional

from pydantic_settings import BaseSettings

from .constants import CAM_OVERRIDE_GBPH, DEFAULT_DURATION_MINUTES, NOISE_THRESHOLD, REMUX_OVERRIDE_GBPH


class Settings(BaseSettings):
    """Titulky addon settings.

    All settings can be overridden via environment variables or a .env file
    (uppercase names, e.g. RD_TOKEN=..., MAX_RESULTS=10).
    """

    addon_version: str = "2.1.0"
    addon_name: str = "Titulky.com Subtitles + RD"

    rd_token: Optional[str] = None
    realdebrid_token: Optional[str] = None
    request_timeout: int = 10
    debrid_timeout: int = 5

    # Ranking
    max_results: int = 6  # subtitles returned per request
    noise_threshold: float = NOISE_THRESHOLD
    cam_override_gbph: float = CAM_OVERRIDE_GBPH
    remux_override_gbph: float = REMUX_OVERRIDE_GBPH
    default_duration_minutes: int = DEFAULT_DURATION_MINUTES

    result_cache_ttl: int = 1800
    empty_cache_ttl: int = 300
    cache_max_size: int = 1000

    log_level: str = "INFO"
    json_logs: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def effective_rd_token(self) -> Optional[str]:
        return self.rd_token or self.realdebrid_token or None


settings = Settings()
