from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "LockerScope"
    debug: bool = False

    catalog_url: str = "https://fortnite-api.com/v2/cosmetics/br"

    data_dir: Path = Path("data")
    catalog_path: Path = Path("data/fortnite_cosmetics.json")
    image_cache_dir: Path = Path("data/cache/thumbnails")

    # None uses the allow-list packaged with lockerscope
    allow_list_path: Path | None = None

    # Upstream image host rate ceiling
    image_max_concurrency: int = 15
    image_timeout_seconds: float = 30.0

    fuzzy_attempts_per_category: int = 10
    fuzzy_threshold: float = 0.65


settings = Settings()
