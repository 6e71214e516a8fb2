"""Configuration for the REST server."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from workflow_studio.studio.config import StudioSettings


class ServerSettings(BaseSettings):
    """Settings for the REST API.

    Engine settings (id prefix, layout metrics) are shared with the CLI via
    :class:`workflow_studio.studio.config.StudioSettings`.
    """

    # Dev-friendly CORS (Vite). Override via WORKFLOW_STUDIO_CORS_ORIGINS=...
    cors_origins: str = Field(
        default="http://localhost:5173,http://127.0.0.1:5173",
        validation_alias="WORKFLOW_STUDIO_CORS_ORIGINS",
        description="Comma-separated list of allowed CORS origins.",
    )

    studio: StudioSettings = Field(default_factory=StudioSettings)

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
