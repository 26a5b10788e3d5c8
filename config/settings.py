"""
Configuration module for the Sharpmarks gradebook.
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # Database
    database_url: str = "mysql+pymysql://root@localhost:3306/sharpmarks"
    sql_echo: bool = False
    
    # Tokens
    jwt_secret: str = "change-me-to-a-long-random-secret-value"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    
    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]
    
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


settings = get_settings()
