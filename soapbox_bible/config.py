"""Configuration management for the SoapBox Bible verse store."""
from urllib.parse import urlparse
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # API Configuration
    app_name: str = Field(default="SoapBox Bible API", env="APP_NAME")
    debug: bool = Field(default=False, env="DEBUG")
    log_level: str = Field(default="INFO", env="LOG_LEVEL")

    # Database Configuration (Heroku compatible)
    database_url: str = Field(default="", env="DATABASE_URL")
    db_name: str = Field(default="", env="DB_NAME")
    db_user: str = Field(default="", env="DB_USER")
    db_password: str = Field(default="", env="DB_PASSWORD")
    db_host: str = Field(default="localhost", env="DB_HOST")
    db_port: int = Field(default=5432, env="DB_PORT")
    db_pool_min: int = Field(default=1, env="DB_POOL_MIN")
    db_pool_max: int = Field(default=10, env="DB_POOL_MAX")

    # Verse population and lookup
    population_batch_size: int = Field(default=500, env="POPULATION_BATCH_SIZE")
    random_verse_min_popularity: int = Field(default=7, env="RANDOM_VERSE_MIN_POPULARITY")
    default_translation: str = Field(default="NIV", env="DEFAULT_TRANSLATION")
    search_max_limit: int = Field(default=100, env="SEARCH_MAX_LIMIT")

    # Cache Configuration
    cache_enabled: bool = Field(default=False, env="CACHE_ENABLED")
    redis_url: str = Field(default="redis://localhost:6379/0", env="REDIS_URL")
    cache_ttl_verses: int = Field(default=0, env="CACHE_TTL_VERSES")
    cache_ttl_searches: int = Field(default=60 * 60, env="CACHE_TTL_SEARCHES")

    @field_validator("default_translation")
    @classmethod
    def _upper_translation(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def db_config(self) -> dict:
        """Get database configuration, preferring DATABASE_URL for Heroku."""
        if self.database_url and self.database_url.strip():
            # Parse Heroku DATABASE_URL
            parsed = urlparse(self.database_url)
            return {
                'dbname': parsed.path[1:],  # Remove leading slash
                'user': parsed.username,
                'password': parsed.password,
                'host': parsed.hostname,
                'port': parsed.port or 5432
            }
        elif self.db_name.strip() and self.db_user.strip():
            # Use individual environment variables
            return {
                'dbname': self.db_name,
                'user': self.db_user,
                'password': self.db_password,
                'host': self.db_host,
                'port': self.db_port
            }
        else:
            # Fallback configuration for development
            return {
                'dbname': 'soapbox_bible',
                'user': 'postgres',
                'password': 'postgres',
                'host': 'localhost',
                'port': 5432
            }

    model_config = SettingsConfigDict(
        env_file=None,  # Don't load from .env file
        case_sensitive=False,
        extra="ignore"
    )


def get_settings() -> Settings:
    """Get settings instance."""
    return Settings()
