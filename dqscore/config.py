from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./dqscore.db"
    REDIS_URL: str = "redis://localhost:6379/0"

    # JSON file: {"Account": {"Name": "Account Name", ...}, ...}
    FIELD_CATALOG_PATH: str | None = None

    # display label derivation
    CUSTOM_FIELD_SUFFIX: str = "__c"
    ID_FIELD_SUFFIX: str = "Id"

    AUTO_CREATE_TABLES: bool = False
    LOG_LEVEL: str = "INFO"
    ENV: str = "dev"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
