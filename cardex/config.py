from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "Cardex"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/cardex"

    # Owner name of the shared catalog; also the tag carried by catalog cards
    system_owner: str = "System"

    # Tag carried by cards their owner has opted into discovery
    available_tag: str = "Available"

    # Owners averaging below this are flagged on discovery
    low_rating_threshold: float = 3.0


settings = Settings()


# =============================================================================
# RATING BOUNDS
# =============================================================================

MIN_RATING = 1
MAX_RATING = 5
