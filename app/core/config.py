from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    ENV: str = "dev"  # "dev" or "prod"
    LOG_LEVEL: str = "INFO"

    # Emit an authz_decision log event for every guarded data-access check
    LOG_DECISIONS: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
