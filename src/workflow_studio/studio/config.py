"""Configuration for the workflow studio.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Every variable carries the `WORKFLOW_STUDIO_` prefix so the studio can share a
`.env` with the host application.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from workflow_studio.studio.layout import LayoutOptions


class StudioSettings(BaseSettings):
    """Settings for editor sessions and the CLI.

    Environment variables:
    - WORKFLOW_STUDIO_LOG_LEVEL      (optional)
    - WORKFLOW_STUDIO_ID_PREFIX      (optional)
    - WORKFLOW_STUDIO_HISTORY_LIMIT  (optional)
    - WORKFLOW_STUDIO_LANE_WIDTH / _ROW_HEIGHT / _ORIGIN_X / _ORIGIN_Y (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `StudioSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="WORKFLOW_STUDIO_LOG_LEVEL",
        description="Root logging level",
    )

    id_prefix: str = Field(
        default="flow_step_",
        validation_alias="WORKFLOW_STUDIO_ID_PREFIX",
        description="Prefix for step ids minted by the counter id generator",
    )

    history_limit: int = Field(
        default=100,
        validation_alias="WORKFLOW_STUDIO_HISTORY_LIMIT",
        description="Number of undo steps kept per editor session",
        ge=1,
    )

    lane_width: int = Field(
        default=280,
        validation_alias="WORKFLOW_STUDIO_LANE_WIDTH",
        description="Horizontal distance between nesting lanes on the canvas",
        gt=0,
    )
    row_height: int = Field(
        default=120,
        validation_alias="WORKFLOW_STUDIO_ROW_HEIGHT",
        description="Vertical distance between canvas rows",
        gt=0,
    )
    origin_x: int = Field(default=40, validation_alias="WORKFLOW_STUDIO_ORIGIN_X")
    origin_y: int = Field(default=40, validation_alias="WORKFLOW_STUDIO_ORIGIN_Y")

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    def layout_options(self) -> LayoutOptions:
        return LayoutOptions(
            origin_x=self.origin_x,
            origin_y=self.origin_y,
            lane_width=self.lane_width,
            row_height=self.row_height,
        )
