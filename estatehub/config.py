from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "postgresql+asyncpg://estatehub:estatehub_dev@db:5432/estatehub"
    DATABASE_ECHO: bool = False

    # HTTP
    ALLOWED_ORIGINS: str = "*"
    SLOW_REQUEST_MS: float = 1000.0

    # Codes
    CONTRACT_NO_PREFIX: str = "CON-"
    CODE_PADDING: int = 4

    # Installments
    INSTALLMENT_REMAINDER_ON_LAST: bool = False

    # App
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "standard"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
