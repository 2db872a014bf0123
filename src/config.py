"""Application configuration loaded from environment variables and .env file."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DATABASE_URL: str = "sqlite:///./dev.db"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    TRADER_DATA_PATH: str = "src/data/seed_traders.json"

    # 첫 거래 시 생성되는 플레이어 자원
    DEFAULT_PLAYER_GOLD: int = 100
    DEFAULT_PLAYER_FOOD: int = 50
    DEFAULT_PLAYER_WATER: int = 50
    DEFAULT_PLAYER_STRENGTH: int = 10

    # Negotiation rule variants
    ESCALATION_MODE: str = "threshold"  # "threshold" | "random_roll"
    REJECT_AGGRO_CHANCE: float = 0.3
    NOTICE_THEFT: bool = True
    THEFT_NOTICE_CHANCE: float = 0.7
    RANDOM_OFFER_FALLBACK: bool = False
    THEFT_COSTS_GOLD: bool = False

    # 고정하면 모든 세션 난수가 재현 가능 (디버그용)
    RNG_SEED: Optional[int] = None


settings = Settings()
