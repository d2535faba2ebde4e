from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str
    JWT_SECRET: str = "CHANGE_ME"
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    ROOT_PATH: str = ""
    CORS_ORIGINS: list[str] = ["*"]

    AUTO_CREATE_TABLES: bool = False
    SCHEDULER_ENABLED: bool = True
    ITEM_EXPIRY_CHECK_MINUTES: int = 15

    # Inline audio payloads are base64 text; ~1MB of audio
    AUDIO_MAX_BASE64_CHARS: int = 1_200_000

    EXPOSE_INTERNAL_ERRORS: bool = False

settings = Settings()
