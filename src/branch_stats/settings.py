"""Application settings for branch-stats."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings for the Waypoint client and local storage."""

    model_config = SettingsConfigDict(
        env_prefix="BRANCH_STATS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    waypoint_base_url: str = "https://stats.svc.halowaypoint.com"
    waypoint_timeout_s: float = 10.0
    waypoint_language: str = "en-US"
    waypoint_game: str = "h4"
    spartan_token: str = Field(
        default="",
        validation_alias=AliasChoices("SPARTAN_TOKEN", "BRANCH_STATS_SPARTAN_TOKEN"),
    )
    data_dir: str = "data/branch_stats"
    log_level: str = "WARNING"
