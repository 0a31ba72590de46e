from __future__ import annotations

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings


class ConfigurationError(RuntimeError):
    """Raised when required settings are missing or invalid."""


class Settings(BaseSettings):
    """Client configuration read from environment variables and ``.env``."""

    base_url: str = Field(default="", validation_alias="GLPI_BASE_URL")
    client_id: str = Field(default="", validation_alias="GLPI_CLIENT_ID")
    client_secret: str = Field(default="", validation_alias="GLPI_CLIENT_SECRET")
    username: str = Field(default="", validation_alias="GLPI_USER")
    password: str = Field(default="", validation_alias="GLPI_PASS")

    log_level: str = Field(default="INFO", validation_alias="HELPDESK_LOG_LEVEL")
    log_format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s %(message)s",
        validation_alias="HELPDESK_LOG_FORMAT",
    )
    log_file: str | None = Field(default=None, validation_alias="HELPDESK_LOG_FILE")
    timeout: float = Field(default=10.0, gt=0, validation_alias="HELPDESK_TIMEOUT")

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    def missing_fields(self) -> list[str]:
        """Return the environment names of required settings left empty."""

        required = {
            "GLPI_BASE_URL": self.base_url,
            "GLPI_CLIENT_ID": self.client_id,
            "GLPI_CLIENT_SECRET": self.client_secret,
            "GLPI_USER": self.username,
            "GLPI_PASS": self.password,
        }
        return [name for name, value in required.items() if not value.strip()]


def load_settings(env_file: str | None = ".env") -> Settings:
    """Load and validate settings, raising :class:`ConfigurationError` on problems."""

    try:
        settings = Settings(_env_file=env_file)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    missing = settings.missing_fields()
    if missing:
        raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")
    return settings
