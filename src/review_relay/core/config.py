"""
Configuration module for Review Relay
"""
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support"""
    
    # Application
    APP_NAME: str = "Review Relay"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    
    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    
    # Google OAuth client (supplied out-of-band, never committed)
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GOOGLE_REDIRECT_URI: str = ""
    GOOGLE_REFRESH_TOKEN: Optional[str] = None
    
    # Business Profile target
    YOUR_GOOGLE_ACCOUNT_ID: str = ""
    YOUR_GOOGLE_LOCATION_ID: str = ""
    
    # Google endpoints
    GOOGLE_AUTH_URL: str = "https://accounts.google.com/o/oauth2/v2/auth"
    GOOGLE_TOKEN_URL: str = "https://oauth2.googleapis.com/token"
    GOOGLE_SCOPE: str = "https://www.googleapis.com/auth/business.manage"
    GOOGLE_REVIEWS_API_URL: str = "https://mybusiness.googleapis.com/v4"
    FORCE_CONSENT_PROMPT: bool = False
    
    # Reviews listing
    REVIEWS_PAGE_SIZE: int = 50
    REVIEWS_ORDER_BY: str = "updateTime desc"
    
    # Upstream calls
    HTTP_TIMEOUT: float = 20.0
    
    # CORS for /api/reviews; lock down to the storefront origin in production
    ALLOWED_ORIGINS: List[str] = ["*"]
    
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # text or json
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )
    
    @property
    def parent_resource(self) -> str:
        """Business Profile parent resource the reviews are listed for"""
        return f"accounts/{self.YOUR_GOOGLE_ACCOUNT_ID}/locations/{self.YOUR_GOOGLE_LOCATION_ID}"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Create settings instance
settings = get_settings()
