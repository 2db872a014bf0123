"""거래 협상 상태 기계

상태 × 의도 → (가드, 효과, 다음 상태).

- OFFERING: accept / decline / steal / next_offer / leave
- HOSTILE: leave 외 모든 요청 거부 (trader_hostile)
- ENDED: 모든 요청 거부 (session_ended, applied=False, 로그 추가 없음)

플레이어 측 거부 결과는 예외가 아니라 Outcome 데이터로 반환한다.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Optional

from .catalog import OfferCatalog
from .dialogue import DialogueTag, dialogue_for_event, select_dialogue
from .ledger import ResourceLedger
from .models import (
    Intent,
    LogEntry,
    NegotiationState,
    Outcome,
    Trader,
    TradeEvent,
    TradeItem,
)
from .resolver import (
    hostility_rolled_on_reject,
    hostility_triggered_on_reject,
    theft_noticed,
    theft_succeeds,
)
from .rules import DEFAULT_RULES, EscalationMode, NegotiationRules
from .session_log import SessionLog

logger = logging.getLogger(__name__)

# (이벤트, 메시지, 품목 이름)
_Step = tuple[TradeEvent, str, Optional[str]]


class NegotiationSession:
    """플레이어 1명 × 상인 1명 거래 세션 (집합 루트).

    상인 조우마다 새로 생성하며 상인 간 재사용하지 않는다.
    단일 호출자 소유 — 동시 접근 미지원.
    """

    def __init__(
        self,
        trader: Trader,
        ledger: ResourceLedger,
        rng: Optional[random.Random] = None,
        rules: NegotiationRules = DEFAULT_RULES,
    ) -> None:
        self._trader = trader
        self._ledger = ledger
        self._rng = rng or random.Random()
        self._rules = rules
        self._catalog = OfferCatalog(trader.catalog)
        self._log = SessionLog()
        self._state = self._initial_state()
        self._rejection_count = 0
        self._record_encounter()

        self._offering_handlers: dict[Intent, Callable[[], _Step]] = {
            Intent.ACCEPT: self._accept,
            Intent.DECLINE: self._decline,
            Intent.STEAL: self._steal,
            Intent.NEXT_OFFER: self._next_offer,
        }

    # === 조회 ===

    @property
    def trader(self) -> Trader:
        return self._trader

    @property
    def ledger(self) -> ResourceLedger:
        return self._ledger

    @property
    def catalog(self) -> OfferCatalog:
        return self._catalog

    @property
    def rules(self) -> NegotiationRules:
        return self._rules

    @property
    def state(self) -> NegotiationState:
        return self._state

    @property
    def rejection_count(self) -> int:
        return self._rejection_count

    @property
    def is_ended(self) -> bool:
        return self._state == NegotiationState.ENDED

    def log(self) -> tuple[LogEntry, ...]:
        return self._log.entries()

    def greeting(self) -> str:
        """현재 상태의 상인 대사. 적대면 aggro, 종료면 작별 대사."""
        if self._state == NegotiationState.HOSTILE:
            return select_dialogue(self._trader, DialogueTag.AGGRO)
        if self._state == NegotiationState.ENDED:
            return select_dialogue(self._trader, DialogueTag.LEAVE_TRADE)
        return select_dialogue(self._trader, DialogueTag.ENCOUNTER)

    # === 공개 API ===

    def submit(self, intent: Intent) -> Outcome:
        """플레이어 의도 1건 처리."""
        intent = Intent(intent)

        if self._state == NegotiationState.ENDED:
            return self._ended_outcome()

        if intent == Intent.LEAVE:
            step = self._leave()
        elif self._state == NegotiationState.HOSTILE:
            step = (
                TradeEvent.TRADER_HOSTILE,
                f"{self._trader.name} is hostile and refuses to trade.",
                None,
            )
        else:
            step = self._offering_handlers[intent]()

        event, message, item_name = step
        entry = self._log.append(event, message, self._state, item_name)
        logger.debug(
            "Trade %s: %s -> %s (state=%s)",
            self._trader.trader_id,
            intent.value,
            event.value,
            self._state.value,
        )
        return Outcome(
            new_state=self._state,
            ledger=self._ledger.snapshot(),
            dialogue_text=dialogue_for_event(self._trader, event),
            log_entry=entry,
        )

    def restart(self) -> LogEntry:
        """세션 재시작. 상태/거절 횟수/선택/로그 초기화, 원장은 유지."""
        self._state = self._initial_state()
        self._rejection_count = 0
        self._catalog.reset()
        self._log.clear()
        logger.info("Trade session with %s restarted", self._trader.trader_id)
        return self._record_encounter()

    # === OFFERING 처리 ===

    def _accept(self) -> _Step:
        item = self._pick_item()
        if item is None:
            return self._no_offers()

        if self._ledger.gold < item.gold_cost:
            return (
                TradeEvent.INSUFFICIENT_GOLD,
                f"Insufficient gold: {item.name} costs {item.gold_cost}, "
                f"you have {self._ledger.gold}.",
                item.name,
            )

        self._ledger.apply(
            gold=-item.gold_cost,
            food=item.food_restore,
            water=item.water_restore,
        )
        return (
            TradeEvent.BOUGHT,
            f"You bought {item.name} for {item.gold_cost} gold.",
            item.name,
        )

    def _decline(self) -> _Step:
        item = self._catalog.current()
        if item is None:
            return self._no_offers()

        self._rejection_count += 1
        if self._escalates_on_reject():
            self._state = NegotiationState.HOSTILE
            penalty_text = self._apply_penalties()
            logger.info(
                "Trader %s turned hostile after %d rejections",
                self._trader.trader_id,
                self._rejection_count,
            )
            return (
                TradeEvent.TRADER_AGGRO,
                f"You declined {item.name}. {self._trader.name} is angry with "
                f"your rejection! {penalty_text}",
                item.name,
            )

        next_item = self._catalog.next()
        return (
            TradeEvent.DECLINED,
            f"You declined {item.name}. {self._trader.name} offers "
            f"{next_item.name} instead.",
            item.name,
        )

    def _steal(self) -> _Step:
        item = self._pick_item()
        if item is None:
            return self._no_offers()

        if not theft_succeeds(
            self._trader.steal_success_rate, self._ledger.strength, self._rng
        ):
            self._state = NegotiationState.HOSTILE
            penalty_text = self._apply_penalties()
            logger.info("Theft from %s failed", self._trader.trader_id)
            return (
                TradeEvent.CAUGHT_STEALING,
                f"You were caught stealing {item.name}! {penalty_text}",
                item.name,
            )

        gold_cost = item.gold_cost if self._rules.theft_costs_gold else 0
        self._ledger.apply(
            gold=-gold_cost, food=item.food_restore, water=item.water_restore
        )

        if self._rules.notice_theft and theft_noticed(
            self._rules.theft_notice_chance, self._rng
        ):
            self._state = NegotiationState.HOSTILE
            penalty_text = self._apply_penalties()
            logger.info("Theft from %s noticed", self._trader.trader_id)
            return (
                TradeEvent.THEFT_NOTICED,
                f"You stole {item.name}, but {self._trader.name} noticed your "
                f"theft! {penalty_text}",
                item.name,
            )

        return (
            TradeEvent.STOLE,
            f"You stole {item.name}.",
            item.name,
        )

    def _next_offer(self) -> _Step:
        item = self._catalog.next()
        if item is None:
            return self._no_offers()
        return (
            TradeEvent.BROWSED,
            f"You look at {item.name} ({item.gold_cost} gold).",
            item.name,
        )

    def _leave(self) -> _Step:
        self._state = NegotiationState.ENDED
        logger.info("Player left trade with %s", self._trader.trader_id)
        return (
            TradeEvent.LEFT,
            f"You left the trade with {self._trader.name}.",
            None,
        )

    # === 내부 ===

    def _initial_state(self) -> NegotiationState:
        if self._trader.is_aggro:
            return NegotiationState.HOSTILE
        return NegotiationState.OFFERING

    def _record_encounter(self) -> LogEntry:
        if self._state == NegotiationState.HOSTILE:
            message = f"You meet {self._trader.name}, who is hostile."
        else:
            message = f"You meet {self._trader.name}."
        return self._log.append(TradeEvent.ENCOUNTERED, message, self._state)

    def _pick_item(self) -> Optional[TradeItem]:
        """선택 품목, 미선택 시 규칙에 따라 무작위 또는 0번."""
        if self._rules.random_offer_fallback and not self._catalog.has_selection:
            return self._catalog.random_item(self._rng)
        return self._catalog.current()

    def _no_offers(self) -> _Step:
        return (
            TradeEvent.NO_OFFERS,
            f"{self._trader.name} has no offers.",
            None,
        )

    def _escalates_on_reject(self) -> bool:
        if self._rules.escalation_mode == EscalationMode.RANDOM_ROLL:
            return hostility_rolled_on_reject(
                self._trader.aggro_on_max_reject,
                self._rejection_count,
                self._rules.reject_aggro_chance,
                self._rng,
            )
        return hostility_triggered_on_reject(
            self._trader.aggro_on_max_reject,
            self._rejection_count,
            self._trader.max_offers_before_decline,
        )

    def _apply_penalties(self) -> str:
        """상인 페널티 적용. 거절 적대화/절도 실패/절도 발각 공통 경로."""
        trader = self._trader
        self._ledger.apply(
            strength=-trader.strength_penalty,
            water=-trader.water_penalty,
            food=-trader.food_penalty,
        )
        parts = [
            f"{label} -{amount}"
            for label, amount in (
                ("Strength", trader.strength_penalty),
                ("Water", trader.water_penalty),
                ("Food", trader.food_penalty),
            )
            if amount > 0
        ]
        if not parts:
            return "No penalties."
        return "Penalties: " + ", ".join(parts) + "."

    def _ended_outcome(self) -> Outcome:
        last = self._log.last()
        entry = LogEntry(
            sequence=len(self._log),
            event=TradeEvent.SESSION_ENDED,
            message="The trade session has ended.",
            state=NegotiationState.ENDED,
        )
        logger.debug(
            "Intent rejected: session with %s already ended (last=%s)",
            self._trader.trader_id,
            last.event.value if last else None,
        )
        return Outcome(
            new_state=NegotiationState.ENDED,
            ledger=self._ledger.snapshot(),
            dialogue_text=None,
            log_entry=entry,
            applied=False,
        )
