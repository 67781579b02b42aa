from typing import List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application Information
    app_name: str = Field(default="Video Engagement API")
    app_description: str = Field(
        default="Likes, stars, comments and views for the video platform"
    )
    app_version: str = Field(default="1.0.0")
    app_url: str = Field(default="http://localhost:8000")
    debug: bool = Field(default=True)
    production: bool = Field(default=False)

    # Database Configuration
    database_url: Optional[str] = Field(default=None)
    db_host: str = Field(default="127.0.0.1")
    db_port: int = Field(default=5432)
    db_database: str = Field(default="videos")
    db_username: str = Field(default="postgres")
    db_password: str = Field(default="postgres")

    # Security Settings
    cors_allowed_origins: List[str] = Field(default=["http://localhost:3000"])

    # JWT Configuration (tokens are issued by the auth provider)
    jwt_secret: str = Field(default="your-secret-key-change-in-production")
    jwt_algorithm: str = Field(default="HS256")
    jwt_user_expiration: int = Field(default=7)
    jwt_issuer: str = Field(default="video-platform-auth")

    # Logging
    log_level: str = Field(default="info")
    log_file: str = Field(default="logs/app.log")

    # Pagination
    default_page_size: int = Field(default=20)
    max_page_size: int = Field(default=100)

    # Redis / slowapi
    redis_url: str = Field(default="redis://localhost:6379")
    redis_rate_limit: str = Field(default="60/minute")
    rate_limit_enabled: bool = Field(default=True)

    # Server-side cooldowns (milliseconds)
    like_cooldown_ms: int = Field(default=1000)
    dislike_cooldown_ms: int = Field(default=3000)
    star_cooldown_ms: int = Field(default=5000)
    comment_like_cooldown_ms: int = Field(default=3000)
    comment_dislike_cooldown_ms: int = Field(default=3000)
    comment_cooldown_ms: int = Field(default=5000)
    view_cooldown_ms: int = Field(default=30 * 60 * 1000)
    rate_limit_retention_hours: int = Field(default=24)
    scheduler_enabled: bool = Field(default=True)

    # Engagement rules
    star_watch_ratio: float = Field(default=0.20)
    comment_max_length: int = Field(default=5000)

    # Client-side retry queue (milliseconds)
    retry_delay_ms: int = Field(default=1100)
    star_retry_delay_ms: int = Field(default=3100)
    retry_max_attempts: Optional[int] = Field(default=None)

    # ============================
    # Generic comma-separated parser
    # ============================
    @staticmethod
    def _parse_csv(value, default):
        if isinstance(value, str):
            items = [x.strip() for x in value.split(",") if x.strip()]
            return items if items else default
        if isinstance(value, list):
            return value
        return default

    @field_validator("cors_allowed_origins", mode="before")
    def validate_cors(cls, v):
        return cls._parse_csv(v, ["http://localhost:3000"])

    @property
    def sqlalchemy_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return "postgresql+psycopg2://{user}:{password}@{host}:{port}/{database}".format(
            user=self.db_username,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_database,
        )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


def load_settings():
    try:
        settings = Settings()
        print("✅ Settings loaded successfully!")
        return settings
    except ValidationError as e:
        print("❌ Validation Error:", e)
        raise


settings = load_settings()
