from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    DEBUG: bool = False
    APP_NAME: str = "Order Pricing API"
    version: str = "0.1.0"
    APP_DOMAIN: str = "example.com"
    APP_DATABASE_DSN: str = "sqlite:////tmp/orderpricing.db"
    SQLITE_BUSY_TIMEOUT: float = 30.0

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Orders
    ORDER_NUMBER_PREFIX: str = "ORD"
    MONEY_ROUNDING: str = "ROUND_HALF_UP"  # any decimal module rounding constant name


settings = Settings()
