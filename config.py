from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PKG_DIR = Path(__file__).resolve().parent
ENV_PATH = PKG_DIR / ".env"


class Settings(BaseSettings):
    # App
    app_env: str = "dev"

    # AI scoring
    ai_provider: str = Field("gemini", validation_alias="AI_PROVIDER")
    gemini_api_key: str | None = Field(
        default=None, validation_alias="GEMINI_API_KEY"
    )
    gemini_model: str = Field(
        "gemini-2.5-flash", validation_alias="GEMINI_MODEL"
    )
    openai_api_key: str | None = Field(
        default=None, validation_alias="OPENAI_API_KEY"
    )
    openai_model: str = Field("gpt-4o-mini", validation_alias="OPENAI_MODEL")
    ai_timeout_seconds: float = Field(
        10.0, validation_alias="AI_TIMEOUT_SECONDS"
    )
    ai_max_retries: int = Field(1, validation_alias="AI_MAX_RETRIES")
    max_prompt_candidates: int = Field(
        200, validation_alias="MAX_PROMPT_CANDIDATES"
    )

    # Ranking
    default_radius_km: float = Field(
        100.0, validation_alias="DEFAULT_RADIUS_KM"
    )

    # Profiles
    profile_db_path: str = Field(
        str(PKG_DIR / "hackmatch.db"), validation_alias="PROFILE_DB_PATH"
    )

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
