"""Application configuration"""

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional


class Settings(BaseSettings):
    """Application settings."""

    # API Configuration
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "PostFlow"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "Guest post ordering, fulfillment and publisher marketplace"

    # Security
    SECRET_KEY: str = Field(..., env="SECRET_KEY")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=30, env="ACCESS_TOKEN_EXPIRE_MINUTES")
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(default=7, env="REFRESH_TOKEN_EXPIRE_DAYS")
    IMPERSONATION_TOKEN_EXPIRE_MINUTES: int = Field(default=60, env="IMPERSONATION_TOKEN_EXPIRE_MINUTES")
    ALGORITHM: str = "HS256"

    # Database
    DATABASE_URL: str = Field(..., env="DATABASE_URL")
    DB_POOL_SIZE: int = Field(default=10, env="DB_POOL_SIZE")
    DB_MAX_OVERFLOW: int = Field(default=20, env="DB_MAX_OVERFLOW")
    DB_ECHO: bool = Field(default=False, env="DB_ECHO")

    # Redis
    REDIS_URL: str = Field(default="redis://localhost:6379", env="REDIS_URL")

    # LLM (OpenAI-compatible chat completions)
    OPENAI_API_KEY: Optional[str] = Field(default=None, env="OPENAI_API_KEY")
    OPENAI_BASE_URL: str = Field(default="https://api.openai.com/v1", env="OPENAI_BASE_URL")
    OPENAI_MODEL: str = Field(default="gpt-4o-mini", env="OPENAI_MODEL")
    LLM_MAX_RETRIES: int = Field(default=3, env="LLM_MAX_RETRIES")
    LLM_RETRY_BASE_SECONDS: float = Field(default=1.0, env="LLM_RETRY_BASE_SECONDS")

    # Stripe
    STRIPE_SECRET_KEY: str = Field(default="", env="STRIPE_SECRET_KEY")
    STRIPE_WEBHOOK_SECRET: str = Field(default="", env="STRIPE_WEBHOOK_SECRET")
    STRIPE_CURRENCY: str = Field(default="usd", env="STRIPE_CURRENCY")

    # Email SMTP Configuration
    SMTP_HOST: str = Field(default="localhost", env="SMTP_HOST")
    SMTP_PORT: int = Field(default=587, env="SMTP_PORT")
    SMTP_USERNAME: str = Field(default="", env="SMTP_USERNAME")
    SMTP_PASSWORD: str = Field(default="", env="SMTP_PASSWORD")
    SMTP_USE_TLS: bool = Field(default=True, env="SMTP_USE_TLS")
    FROM_EMAIL: str = Field(default="noreply@postflow.app", env="FROM_EMAIL")
    FROM_NAME: str = Field(default="PostFlow", env="FROM_NAME")

    # ManyReach outreach webhook
    MANYREACH_WEBHOOK_SECRET: Optional[str] = Field(default=None, env="MANYREACH_WEBHOOK_SECRET")
    MANYREACH_BYPASS_IP_CHECK: bool = Field(default=False, env="MANYREACH_BYPASS_IP_CHECK")
    MANYREACH_ALLOWED_IP_RANGES: list[str] = Field(
        default=["52.70.186.0/24", "34.224.132.0/24", "18.208.0.0/13"],
        env="MANYREACH_ALLOWED_IP_RANGES",
    )
    EMAIL_PROCESSING_MAX_RETRIES: int = Field(default=3, env="EMAIL_PROCESSING_MAX_RETRIES")

    # Shadow publisher automation thresholds
    SHADOW_MIN_PROCESSING_CONFIDENCE: float = Field(default=0.5, env="SHADOW_MIN_PROCESSING_CONFIDENCE")
    SHADOW_AUTO_APPROVE_CONFIDENCE: float = Field(default=0.9, env="SHADOW_AUTO_APPROVE_CONFIDENCE")
    SHADOW_MEDIUM_REVIEW_CONFIDENCE: float = Field(default=0.7, env="SHADOW_MEDIUM_REVIEW_CONFIDENCE")
    SHADOW_LOW_REVIEW_CONFIDENCE: float = Field(default=0.5, env="SHADOW_LOW_REVIEW_CONFIDENCE")
    SHADOW_INVITATION_EXPIRE_DAYS: int = Field(default=30, env="SHADOW_INVITATION_EXPIRE_DAYS")
    REVIEW_AUTO_APPROVE_HOURS: int = Field(default=24, env="REVIEW_AUTO_APPROVE_HOURS")

    # CORS
    ALLOWED_HOSTS: list[str] = Field(default=["http://localhost:3000"], env="ALLOWED_HOSTS")

    # Application URLs
    FRONTEND_URL: str = Field(default="http://localhost:3000", env="FRONTEND_URL")
    BACKEND_URL: str = Field(default="http://localhost:8000", env="BACKEND_URL")

    # Pricing (all amounts in cents)
    SERVICE_FEE_CENTS: int = Field(default=7900, env="SERVICE_FEE_CENTS")
    CLIENT_REVIEW_FEE_CENTS: int = Field(default=50000, env="CLIENT_REVIEW_FEE_CENTS")
    RUSH_FEE_CENTS: int = Field(default=100000, env="RUSH_FEE_CENTS")
    DEFAULT_COMMISSION_PERCENT: float = Field(default=30.0, env="DEFAULT_COMMISSION_PERCENT")
    SHARE_TOKEN_EXPIRE_DAYS: int = Field(default=7, env="SHARE_TOKEN_EXPIRE_DAYS")
    CREDIT_EXPIRING_SOON_DAYS: int = Field(default=30, env="CREDIT_EXPIRING_SOON_DAYS")

    # Development
    LOG_LEVEL: str = Field(default="INFO", env="LOG_LEVEL")
    DEBUG: bool = Field(default=False, env="DEBUG")
    TESTING: bool = Field(default=False, env="TESTING")
    ENVIRONMENT: str = Field(default="development", env="ENVIRONMENT")

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
