"""Configuration management for the Insight Dashboard"""
from typing import Literal
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application Configuration
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Query processing
    processing_delay_ms: int = Field(default=500, ge=0, alias="PROCESSING_DELAY_MS")  # Simulated latency
    max_suggestions: int = Field(default=7, ge=1, alias="MAX_SUGGESTIONS")

    # Visualization
    default_chart_mode: Literal["line", "bar", "pie"] = Field(
        default="line", alias="DEFAULT_CHART_MODE"
    )

    # Server Configuration
    server_host: str = Field(default="0.0.0.0", alias="SERVER_HOST")

    # Gradio Configuration
    gradio_share: bool = Field(default=False, alias="GRADIO_SHARE")
    gradio_server_port: int = Field(default=7860, alias="GRADIO_SERVER_PORT")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )


# Load settings from environment
settings = Settings()
