"""
Centralized configuration management for FactGraph.

All environment variables and settings are managed here so the parser,
layout engine, explorer and API read the same values.
"""

from functools import lru_cache
from typing import Dict, Any
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized settings for FactGraph.

    All configuration is loaded from environment variables (prefixed with
    ``FACTGRAPH_``) or a ``.env`` file, with sensible defaults.
    """

    # === Application Settings ===
    app_name: str = Field(default="FactGraph", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str = Field(default="", description="Optional log file path")

    # === API Settings ===
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # === Parser Settings ===
    answer_marker: str = Field(default="Chat Response:", description="Marker that starts the visible answer")
    facts_marker: str = Field(default="Retrieved Facts:", description="Marker that starts the facts block")
    sources_marker: str = Field(default="Sources:", description="Marker that starts the sources block")
    bullet_glyph: str = Field(default="•", description="Separator between fact bullets")

    # === Layout Settings ===
    layout_iterations: int = Field(default=150, ge=0, description="Force simulation iterations")
    layout_cache_size: int = Field(default=32, ge=1, description="Layouts memoized per explorer")

    # === Explorer Settings ===
    badge_display_limit: int = Field(default=3, ge=0, description="Citation badges shown per node")
    top_connected_limit: int = Field(default=8, ge=1, description="Nodes listed as most connected")

    # === Monitoring Settings ===
    enable_metrics: bool = Field(default=True, description="Enable metrics collection")
    metrics_max_history: int = Field(default=1000, description="Samples kept per metric")
    metrics_retention_seconds: int = Field(default=3600, description="Metric retention window")

    model_config = SettingsConfigDict(
        env_prefix="FACTGRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Logging Configuration ===
    @property
    def logging_config(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return {
            'level': self.log_level,
            'file': self.log_file or None,
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        }

    # === Monitoring Configuration ===
    @property
    def monitoring_config(self) -> Dict[str, Any]:
        """Get monitoring configuration."""
        return {
            'enabled': self.enable_metrics,
            'max_history': self.metrics_max_history,
            'retention_seconds': self.metrics_retention_seconds,
        }

    # === Parser Configuration ===
    @property
    def parser_config(self) -> Dict[str, Any]:
        """Get fact parser markers."""
        return {
            'answer_marker': self.answer_marker,
            'facts_marker': self.facts_marker,
            'sources_marker': self.sources_marker,
            'bullet_glyph': self.bullet_glyph,
        }

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator('answer_marker', 'facts_marker', 'sources_marker', 'bullet_glyph')
    @classmethod
    def validate_marker(cls, v):
        if not v or not v.strip():
            raise ValueError("Parser markers cannot be empty")
        return v.strip()


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once per application lifecycle.
    """
    return Settings()
