# careerprofile/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
import os

# Load .env file if it exists, for local development
# In production, environment variables should be set directly.
if os.path.exists(".env"):
    from dotenv import load_dotenv
    load_dotenv()

class AppSettings(BaseSettings):
    name: str = "Career Profile Engine"
    log_level: str = "INFO"
    api_prefix: str = "/api/v1"

    model_config = SettingsConfigDict(env_prefix='APP_')

class DatabaseSettings(BaseSettings):
    url: str = "sqlite+aiosqlite:///./careerprofile.db"  # postgresql+asyncpg://... in deployment
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 20
    pool_recycle: int = 1800  # 30 minutes
    create_tables: bool = False  # create missing tables at startup (local SQLite)

    model_config = SettingsConfigDict(env_prefix='DATABASE_')

class RedisSettings(BaseSettings):
    url: str = "redis://localhost:6379/0"
    enabled: bool = True
    connect_timeout_seconds: float = 1.0
    socket_timeout_seconds: float = 2.0
    report_ttl_seconds: int = 60 * 60 * 24 * 7
    key_prefix: str = "riasec:report"

    model_config = SettingsConfigDict(env_prefix='REDIS_')

class GeminiSettings(BaseSettings):
    api_key: str = ""
    model: str = "gemini-2.5-flash"
    api_version: str = "v1"
    base_url: str = "https://generativelanguage.googleapis.com"
    timeout_seconds: float = 60.0
    max_retries: int = 3
    base_delay_seconds: float = 2.0

    model_config = SettingsConfigDict(env_prefix='GEMINI_')

# Instantiate settings
app_settings = AppSettings()
database_settings = DatabaseSettings()
redis_settings = RedisSettings()
gemini_settings = GeminiSettings()
