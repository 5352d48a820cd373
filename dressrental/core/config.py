from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    BUSINESS_TIMEZONE: str = "Europe/Paris"

    BACKEND_BASE_URL: str | None = None
    BACKEND_API_TOKEN: str | None = None
    BACKEND_TIMEOUT_SECONDS: float = 10.0

    DEFAULT_VAT_RATIO: float = 5 / 6
    DEPOSIT_PAID_DEFAULT_RATIO: float = 0.5
    PACKAGE_DEPOSIT_FLOOR_RATIO: float = 0.5
    DEFAULT_CAUTION_TTC: float = 0.0

    DAILY_CONTRACT_TYPE_ID: str = "89f29652-c045-43ec-b4b2-ca32e913163d"
    CONTRACT_NUMBER_PREFIX: str = "CTR"

    DAILY_START_HOUR: int = 9
    DAILY_END_HOUR: int = 18
    PACKAGE_START_HOUR: int = 12

    AVAILABILITY_FAIL_OPEN: bool = True


settings = Settings()
