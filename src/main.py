"""FastAPI application entrypoint."""

import random
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.api.health import router as health_router
from src.api.trade import router as trade_router
from src.config import Settings, settings
from src.core.event_bus import EventBus
from src.core.logging import get_logger, setup_logging
from src.core.trade.registry import TraderRegistry
from src.core.trade.rules import EscalationMode, NegotiationRules
from src.db.database import SessionLocal, engine as db_engine
from src.db.models import Base
from src.services.player_service import PlayerDefaults, PlayerService
from src.services.trade_service import RngFactory, TradeService

setup_logging(settings.LOG_LEVEL, sql_echo=settings.DEBUG)
logger = get_logger(__name__)


def build_rules(config: Settings) -> NegotiationRules:
    """설정값 → 협상 규칙. 잘못된 값은 기동 시 ValueError."""
    return NegotiationRules(
        escalation_mode=EscalationMode(config.ESCALATION_MODE),
        reject_aggro_chance=config.REJECT_AGGRO_CHANCE,
        notice_theft=config.NOTICE_THEFT,
        theft_notice_chance=config.THEFT_NOTICE_CHANCE,
        random_offer_fallback=config.RANDOM_OFFER_FALLBACK,
        theft_costs_gold=config.THEFT_COSTS_GOLD,
    )


def build_player_defaults(config: Settings) -> PlayerDefaults:
    return PlayerDefaults(
        gold=config.DEFAULT_PLAYER_GOLD,
        food=config.DEFAULT_PLAYER_FOOD,
        water=config.DEFAULT_PLAYER_WATER,
        strength=config.DEFAULT_PLAYER_STRENGTH,
    )


def build_rng_factory(config: Settings) -> RngFactory:
    """세션마다 독립 난수원. RNG_SEED 지정 시 세션 순서대로 재현 가능."""
    if config.RNG_SEED is None:
        return random.Random
    seeder = random.Random(config.RNG_SEED)
    return lambda: random.Random(seeder.getrandbits(64))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=db_engine)
    logger.info("Database tables created.")

    logger.info("Loading traders from %s...", settings.TRADER_DATA_PATH)
    registry = TraderRegistry()
    registry.load_from_json(settings.TRADER_DATA_PATH)

    rules = build_rules(settings)
    logger.info("Negotiation rules: %s", rules)

    event_bus = EventBus()
    db_session = SessionLocal()
    # PlayerService가 trade_ended를 구독해 자원을 기록
    player_service = PlayerService(
        db=db_session,
        event_bus=event_bus,
        defaults=build_player_defaults(settings),
    )
    trade_service = TradeService(
        event_bus=event_bus,
        registry=registry,
        players=player_service,
        rules=rules,
        rng_factory=build_rng_factory(settings),
    )
    app.state.event_bus = event_bus
    app.state.player_service = player_service
    app.state.trade_service = trade_service
    logger.info("TradeService initialized (%d traders).", registry.count())

    yield

    logger.info("Shutting down...")
    db_session.close()


app = FastAPI(title="Trader Negotiation", lifespan=lifespan)

app.include_router(health_router)
app.include_router(trade_router)
