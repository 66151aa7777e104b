"""Configuration management"""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # TMDB
    TMDB_API_KEY: Optional[str] = None
    TMDB_BASE_URL: str = "https://api.themoviedb.org/3"
    TMDB_IMAGE_BASE_URL: str = "https://image.tmdb.org/t/p"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/streamflix.db"

    # Directories
    BASE_DIR: Path = Path(__file__).parent.parent
    DATA_DIR: Path = BASE_DIR / "data"
    LOGS_DIR: Path = DATA_DIR / "logs"
    TEMPLATES_DIR: Path = Path(__file__).parent / "templates"

    # Servers
    HOST: str = "0.0.0.0"
    PORT: int = 8787
    STREAM_HOST: str = "0.0.0.0"
    STREAM_PORT: int = 8788
    ALLOWED_ORIGINS: Optional[str] = None  # Comma-separated origins
    SITE_URL: str = "http://localhost:8787"

    # Player access
    PLAYER_ALLOWED_HOSTS: str = "localhost,127.0.0.1"
    ACCESS_TOKEN_TTL_SECONDS: int = 300

    # Playback and fetching
    LOAD_TIMEOUT_SECONDS: float = 10.0
    RETRY_MAX_ATTEMPTS: int = 2
    RETRY_BASE_DELAY_MS: int = 1000
    RETRY_JITTER_MS: int = 250

    # Client storage
    MAX_HISTORY_ITEMS: int = 10
    DEFAULT_THEME: str = "dark"

    # Maintenance mode
    MAINTENANCE_MODE: bool = False
    MAINTENANCE_MESSAGE: str = (
        "We're currently performing some scheduled maintenance to improve "
        "your experience. StreamFlix will be back online shortly."
    )

    class Config:
        env_file = ".env"
        case_sensitive = True

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Ensure directories exist
        self.DATA_DIR.mkdir(exist_ok=True)
        self.LOGS_DIR.mkdir(exist_ok=True)

    @property
    def allowed_player_hosts(self) -> list:
        return [h.strip() for h in self.PLAYER_ALLOWED_HOSTS.split(",") if h.strip()]


# Global settings instance
settings = Settings()
