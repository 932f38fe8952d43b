from pydantic_settings import BaseSettings
from pydantic import SecretStr
from typing import List, Optional
import os
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    app_name: str = "Quiz Builder API"
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Supabase Configuration
    supabase_url: Optional[str] = os.getenv("SUPABASE_URL")
    supabase_anon_key: SecretStr = SecretStr(os.getenv("SUPABASE_ANON_KEY", ""))
    supabase_service_role_key: SecretStr = SecretStr(os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""))

    # Run against the in-process entity store instead of Supabase
    use_memory_store: bool = os.getenv("USE_MEMORY_STORE", "false").lower() == "true"

    # Quiz defaults
    timezone: str = os.getenv("QUIZ_TIMEZONE", "UTC")
    default_passing_score: int = int(os.getenv("DEFAULT_PASSING_SCORE", 60))
    default_time_limit_minutes: int = int(os.getenv("DEFAULT_TIME_LIMIT_MINUTES", 30))
    author_roles: List[str] = ["admin", "teacher"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

settings = Settings()
