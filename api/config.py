import os
from functools import lru_cache

from pydantic import BaseModel


def _env_float(name: str) -> float | None:
    value = os.getenv(name)
    return float(value) if value else None


class Settings(BaseModel):
    APP_NAME: str = os.getenv("APP_NAME", "Dispatch Quoting API")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Fare overrides; unset values keep the FareTable defaults
    CURRENCY: str = os.getenv("CURRENCY", "NGN")
    BASE_FARE: float | None = _env_float("BASE_FARE")
    RATE_PER_KM: float | None = _env_float("RATE_PER_KM")
    VAT_RATE: float | None = _env_float("VAT_RATE")
    INSURANCE_RATE: float | None = _env_float("INSURANCE_RATE")
    MIN_INSURED_VALUE: float | None = _env_float("MIN_INSURED_VALUE")
    PRICING_RULES_PATH: str | None = os.getenv("PRICING_RULES_PATH")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
