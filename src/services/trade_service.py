"""거래 Service — Core 세션 생명주기, EventBus 통신

Service → Core 허용. 플레이어 레코드는 PlayerService 소유:
시드는 직접 조회하고, 결과 기록은 trade_ended 이벤트로 넘긴다.
활성 협상 세션은 인메모리로만 보관한다 (재시작 시 소멸).
"""

import random
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Optional

from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.logging import get_logger
from src.core.trade.ledger import ResourceLedger
from src.core.trade.models import (
    Intent,
    NegotiationState,
    Outcome,
    ResourceSnapshot,
    Trader,
    TradeEvent,
)
from src.core.trade.registry import TraderRegistry
from src.core.trade.rules import DEFAULT_RULES, NegotiationRules
from src.core.trade.session import NegotiationSession
from src.services.player_service import PlayerService

logger = get_logger(__name__)

# Outcome 이벤트 → 발행할 EventBus 이벤트
OUTCOME_EVENTS: dict[TradeEvent, str] = {
    TradeEvent.BOUGHT: EventTypes.TRADE_COMPLETED,
    TradeEvent.STOLE: EventTypes.ITEM_STOLEN,
    TradeEvent.THEFT_NOTICED: EventTypes.ITEM_STOLEN,
    TradeEvent.TRADER_AGGRO: EventTypes.TRADER_HOSTILE,
    TradeEvent.CAUGHT_STEALING: EventTypes.TRADER_HOSTILE,
    TradeEvent.LEFT: EventTypes.TRADE_ENDED,
}

RngFactory = Callable[[], random.Random]


class TradeConflictError(ValueError):
    """플레이어에게 이미 진행 중인 세션이 있음"""


@dataclass
class ActiveTrade:
    """진행 중인 세션 + 소유 플레이어.

    baseline: 마지막으로 기록된 시점의 원장. 종료 시 변화량 계산 기준.
    """

    session_id: str
    player_id: str
    session: NegotiationSession
    baseline: ResourceSnapshot
    purchases: int = 0


class TradeService:
    """거래 세션 생명주기"""

    def __init__(
        self,
        event_bus: EventBus,
        registry: TraderRegistry,
        players: PlayerService,
        rules: NegotiationRules = DEFAULT_RULES,
        rng_factory: Optional[RngFactory] = None,
    ):
        self._bus = event_bus
        self._registry = registry
        self._players = players
        self._rules = rules
        self._rng_factory: RngFactory = rng_factory or random.Random
        self._active: dict[str, ActiveTrade] = {}

    # === 상인 조회 ===

    def get_trader(self, trader_id: str) -> Trader | None:
        return self._registry.get(trader_id)

    def list_traders(self) -> list[Trader]:
        return self._registry.get_all()

    # === 세션 ===

    def start_session(self, player_id: str, trader_id: str) -> ActiveTrade:
        """상인 조우 → 새 세션 생성.

        1. 상인 조회 (없으면 ValueError)
        2. 진행 중 세션 확인 (있으면 TradeConflictError)
        3. 플레이어 자원으로 원장 시드
        4. trade_started 발행
        """
        trader = self._registry.get(trader_id)
        if trader is None:
            raise ValueError(f"Unknown trader: {trader_id}")
        self._ensure_no_live_session(player_id)

        seed = self._players.seed_resources(player_id)
        session = NegotiationSession(
            trader,
            ResourceLedger.from_snapshot(seed),
            rng=self._rng_factory(),
            rules=self._rules,
        )

        session_id = str(uuid.uuid4())
        active = ActiveTrade(
            session_id=session_id,
            player_id=player_id,
            session=session,
            baseline=seed,
        )
        self._active[session_id] = active

        self._bus.emit(
            GameEvent(
                event_type=EventTypes.TRADE_STARTED,
                data={
                    "session_id": session_id,
                    "player_id": player_id,
                    "trader_id": trader_id,
                    "state": session.state.value,
                },
                source="trade_service",
            )
        )
        self._bus.reset_chain()

        logger.info(
            "Trade session %s started (player=%s, trader=%s, state=%s)",
            session_id,
            player_id,
            trader_id,
            session.state.value,
        )
        return active

    def get_session(self, session_id: str) -> ActiveTrade | None:
        return self._active.get(session_id)

    def active_session_count(self) -> int:
        """종료되지 않은 세션 수"""
        return sum(1 for a in self._active.values() if not a.session.is_ended)

    def submit_intent(self, session_id: str, intent: Intent) -> Outcome | None:
        """의도 1건 처리. 세션 없으면 None.

        leave로 종료되면 trade_ended에 원장 변화량을 실어 보낸다.
        종료된 세션은 discard_session() 전까지 조회 가능 (session_ended 신호).
        """
        active = self._active.get(session_id)
        if active is None:
            return None

        outcome = active.session.submit(intent)
        if outcome.log_entry.event == TradeEvent.BOUGHT:
            active.purchases += 1

        event_type = OUTCOME_EVENTS.get(outcome.log_entry.event)
        if event_type is not None:
            self._bus.emit(
                GameEvent(
                    event_type=event_type,
                    data=self._event_data(active, outcome),
                    source="trade_service",
                )
            )
        self._bus.reset_chain()

        if outcome.applied and outcome.new_state == NegotiationState.ENDED:
            # 기록 완료 → 재시작 후 다시 떠나면 이후 변화만 반영
            active.baseline = outcome.ledger
            active.purchases = 0
            logger.info(
                "Trade session %s ended for %s (%s)",
                session_id,
                active.player_id,
                outcome.ledger.as_dict(),
            )

        return outcome

    def discard_session(self, session_id: str) -> bool:
        """호출자가 거래 화면을 떠날 때 세션 폐기. 진행 중이면 원장 기록 없이 버린다."""
        active = self._active.pop(session_id, None)
        if active is None:
            return False
        logger.info("Trade session %s discarded", session_id)
        return True

    def restart_session(self, session_id: str) -> ActiveTrade | None:
        """같은 상인과 세션 재시작. 원장은 그대로.

        종료된 세션을 되살릴 때 같은 플레이어의 다른 세션이 진행 중이면 TradeConflictError.
        """
        active = self._active.get(session_id)
        if active is None:
            return None
        if active.session.is_ended:
            self._ensure_no_live_session(active.player_id)
        active.session.restart()
        return active

    # === 내부 ===

    def _ensure_no_live_session(self, player_id: str) -> None:
        for active in self._active.values():
            if active.player_id == player_id and not active.session.is_ended:
                raise TradeConflictError(
                    f"Player {player_id} already has a live trade session "
                    f"{active.session_id}"
                )

    def _event_data(self, active: ActiveTrade, outcome: Outcome) -> dict[str, Any]:
        data: dict[str, Any] = {
            "session_id": active.session_id,
            "player_id": active.player_id,
            "trader_id": active.session.trader.trader_id,
            "item_name": outcome.log_entry.item_name,
            "state": outcome.new_state.value,
        }
        if outcome.log_entry.event == TradeEvent.LEFT:
            final = outcome.ledger.as_dict()
            baseline = active.baseline.as_dict()
            data["deltas"] = {k: final[k] - baseline[k] for k in final}
            data["purchases"] = active.purchases
        return data
