"""Application configuration."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # App settings
    app_name: str = "Label Review API"
    debug: bool = False
    
    # CORS - restrict in production
    cors_origins: list[str] = ["*"]
    
    # Field comparison thresholds
    fuzzy_match_threshold: float = 0.80  # Similarity at or above this is a match
    abv_tolerance: float = 0.5  # Percentage points
    net_contents_tolerance: float = 0.01  # Relative, 1%
    
    # Correction windows (days)
    conditional_deadline_days: int = 7
    correction_deadline_days: int = 30
    
    # Review workflow
    auto_approval_enabled: bool = False
    approval_confidence_threshold: int = 80  # Minimum overall confidence for the ready queue
    
    # Batch processing
    max_batch_size: int = 50
    
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "LABEL_REVIEW_"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
