"""Settings for the feedbase mapping layer, loaded from the environment and `.env`."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    Values are loaded from environment variables and/or a .env file.
    """

    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./feedbase.db",
        validation_alias="FEEDBASE_DATABASE_URL",
    )
    """URL of the database used when a descriptor does not name its own."""

    STRICT_MODE: bool = Field(default=True, validation_alias="FEEDBASE_STRICT_MODE")
    """
    Policy for models without a storage descriptor.

    Strict mode raises a contract error on any persistence call; permissive
    mode logs a warning and skips the call.
    """

    ECHO_SQL: bool = Field(default=False, validation_alias="FEEDBASE_ECHO_SQL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


settings = Settings()
