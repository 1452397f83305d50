from pathlib import Path

from pydantic_settings import BaseSettings

_PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    # Single externally supplied port; everything else has a sane default
    PORT: int = 3000
    HOST: str = "0.0.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    # Landing page served on GET /
    INDEX_FILE: str = str(_PACKAGE_DIR / "static" / "index.html")

    # Display names are client-asserted and capped at this many characters
    MAX_NAME_LENGTH: int = 40

    # Frames queued per connection before further deliveries are dropped
    OUTBOX_MAX_SIZE: int = 256

    model_config = {"env_file": ".env"}


settings = Settings()
