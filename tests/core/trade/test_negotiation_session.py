"""NegotiationSession 상태 기계 테스트

전이표 전 행 + 속성(단조성, 멱등성) + 시나리오 A~D.
"""

from __future__ import annotations

import random

import pytest

from src.core.trade.ledger import ResourceLedger
from src.core.trade.models import (
    Intent,
    NegotiationState,
    ResourceSnapshot,
    Trader,
    TradeEvent,
    TradeItem,
)
from src.core.trade.rules import EscalationMode, NegotiationRules
from src.core.trade.session import NegotiationSession

WATERSKIN = TradeItem(name="Waterskin", gold_cost=15, food_restore=0, water_restore=30)
DATES = TradeItem(name="Dried Dates", gold_cost=10, food_restore=20, water_restore=0)

NO_NOTICE = NegotiationRules(notice_theft=False)


class _SequenceRandom(random.Random):
    """random()이 정해진 값을 순서대로 반환. 예상 밖 굴림은 실패."""

    def __init__(self, values: list[float] | None = None) -> None:
        super().__init__(0)
        self._values = list(values or [])

    def random(self) -> float:
        if not self._values:
            raise AssertionError("unexpected random() call")
        return self._values.pop(0)


def _make_trader(**kwargs) -> Trader:
    defaults = {
        "trader_id": "trd_test",
        "name": "Test Trader",
        "encounter_dialogue": "Welcome!",
        "trade_event_dialogue": "Something else, then?",
        "positive_dialogue": "Thank you!",
        "leave_trade_dialogue": "Farewell.",
        "aggro_dialogue": "Get out!",
        "max_offers_before_decline": 3,
        "aggro_on_max_reject": False,
        "steal_success_rate": 0.5,
        "strength_penalty": 2,
        "water_penalty": 10,
        "food_penalty": 5,
        "catalog": (WATERSKIN, DATES),
    }
    defaults.update(kwargs)
    return Trader(**defaults)


def _make_session(
    trader: Trader | None = None,
    gold: int = 100,
    food: int = 50,
    water: int = 50,
    strength: int = 10,
    rng: random.Random | None = None,
    rules: NegotiationRules = NegotiationRules(),
) -> NegotiationSession:
    return NegotiationSession(
        trader or _make_trader(),
        ResourceLedger(gold=gold, food=food, water=water, strength=strength),
        rng=rng or _SequenceRandom(),
        rules=rules,
    )


# ── 초기 상태 ─────────────────────────────────────────────────


class TestInitialState:
    def test_offering_by_default(self) -> None:
        session = _make_session()
        assert session.state == NegotiationState.OFFERING
        assert session.rejection_count == 0
        assert session.greeting() == "Welcome!"

    def test_hostile_when_trader_is_aggro(self) -> None:
        session = _make_session(_make_trader(is_aggro=True))
        assert session.state == NegotiationState.HOSTILE
        assert session.greeting() == "Get out!"

    def test_encounter_logged(self) -> None:
        session = _make_session()
        log = session.log()
        assert len(log) == 1
        assert log[0].event == TradeEvent.ENCOUNTERED
        assert log[0].sequence == 0
        assert "Test Trader" in log[0].message

    def test_string_intent_accepted(self) -> None:
        outcome = _make_session().submit("accept")
        assert outcome.log_entry.event == TradeEvent.BOUGHT

    def test_unknown_intent_rejected(self) -> None:
        with pytest.raises(ValueError):
            _make_session().submit("haggle")


# ── Accept ────────────────────────────────────────────────────


class TestAccept:
    def test_buys_current_offer(self) -> None:
        session = _make_session(gold=100, food=50, water=50)
        outcome = session.submit(Intent.ACCEPT)

        assert outcome.applied is True
        assert outcome.new_state == NegotiationState.OFFERING
        assert outcome.log_entry.event == TradeEvent.BOUGHT
        assert outcome.log_entry.item_name == "Waterskin"
        assert outcome.dialogue_text == "Thank you!"
        assert outcome.ledger == ResourceSnapshot(
            gold=85, food=50, water=80, strength=10
        )

    def test_buys_selected_offer_after_browsing(self) -> None:
        session = _make_session()
        session.submit(Intent.NEXT_OFFER)
        outcome = session.submit(Intent.ACCEPT)
        assert outcome.log_entry.item_name == "Dried Dates"
        assert outcome.ledger.gold == 90
        assert outcome.ledger.food == 70

    def test_exact_gold_is_enough(self) -> None:
        outcome = _make_session(gold=15).submit(Intent.ACCEPT)
        assert outcome.log_entry.event == TradeEvent.BOUGHT
        assert outcome.ledger.gold == 0

    def test_scenario_a_insufficient_gold(self) -> None:
        trader = _make_trader(catalog=(TradeItem(name="Relic", gold_cost=50),))
        session = _make_session(trader, gold=30)
        before = session.ledger.snapshot()

        outcome = session.submit(Intent.ACCEPT)

        assert outcome.log_entry.event == TradeEvent.INSUFFICIENT_GOLD
        assert "insufficient gold" in outcome.log_entry.message.lower()
        assert outcome.ledger == before
        assert outcome.new_state == NegotiationState.OFFERING
        assert outcome.dialogue_text is None

    def test_restore_capped_at_100(self) -> None:
        session = _make_session(water=90)
        outcome = session.submit(Intent.ACCEPT)
        assert outcome.ledger.water == 100

    def test_repeated_accepts_gold_non_increasing_and_bounded(self) -> None:
        session = _make_session(gold=1000, food=90, water=90)
        previous_gold = session.ledger.gold
        for i in range(30):
            if i % 3 == 0:
                session.submit(Intent.NEXT_OFFER)
            snap = session.submit(Intent.ACCEPT).ledger
            assert snap.gold <= previous_gold
            assert 0 <= snap.food <= 100
            assert 0 <= snap.water <= 100
            previous_gold = snap.gold


# ── Decline ───────────────────────────────────────────────────


class TestDecline:
    def test_decline_advances_offer(self) -> None:
        session = _make_session()
        outcome = session.submit(Intent.DECLINE)

        assert outcome.log_entry.event == TradeEvent.DECLINED
        assert outcome.log_entry.item_name == "Waterskin"
        assert outcome.dialogue_text == "Something else, then?"
        assert session.rejection_count == 1
        assert session.catalog.current() == DATES

    def test_decline_does_not_touch_ledger(self) -> None:
        session = _make_session()
        before = session.ledger.snapshot()
        assert session.submit(Intent.DECLINE).ledger == before

    def test_scenario_b_escalation_on_second_decline(self) -> None:
        trader = _make_trader(
            max_offers_before_decline=2,
            aggro_on_max_reject=True,
            strength_penalty=3,
            water_penalty=4,
            food_penalty=5,
        )
        session = _make_session(trader, strength=10, food=50, water=50)

        first = session.submit(Intent.DECLINE)
        assert first.new_state == NegotiationState.OFFERING

        second = session.submit(Intent.DECLINE)
        assert second.new_state == NegotiationState.HOSTILE
        assert second.log_entry.event == TradeEvent.TRADER_AGGRO
        assert second.dialogue_text == "Get out!"
        assert second.ledger == ResourceSnapshot(
            gold=100, food=45, water=46, strength=7
        )
        assert "Strength -3" in second.log_entry.message

        # 적대 이후 거절은 거부되고 페널티 재적용 없음
        third = session.submit(Intent.DECLINE)
        assert third.log_entry.event == TradeEvent.TRADER_HOSTILE
        assert third.ledger == second.ledger
        assert session.rejection_count == 2

    def test_never_hostile_without_aggro_on_max_reject(self) -> None:
        session = _make_session(
            _make_trader(max_offers_before_decline=1, aggro_on_max_reject=False)
        )
        for _ in range(50):
            outcome = session.submit(Intent.DECLINE)
            assert outcome.new_state == NegotiationState.OFFERING
        assert session.rejection_count == 50

    def test_zero_penalties_message(self) -> None:
        trader = _make_trader(
            max_offers_before_decline=1,
            aggro_on_max_reject=True,
            strength_penalty=0,
            water_penalty=0,
            food_penalty=0,
        )
        outcome = _make_session(trader).submit(Intent.DECLINE)
        assert outcome.new_state == NegotiationState.HOSTILE
        assert "No penalties." in outcome.log_entry.message

    def test_random_roll_variant(self) -> None:
        rules = NegotiationRules(
            escalation_mode=EscalationMode.RANDOM_ROLL, reject_aggro_chance=0.3
        )
        trader = _make_trader(aggro_on_max_reject=True, max_offers_before_decline=10)
        # 1회차: 굴림 없음, 2회차: 0.5 (빗나감), 3회차: 0.1 (적중)
        session = _make_session(trader, rng=_SequenceRandom([0.5, 0.1]), rules=rules)

        assert session.submit(Intent.DECLINE).new_state == NegotiationState.OFFERING
        assert session.submit(Intent.DECLINE).new_state == NegotiationState.OFFERING
        outcome = session.submit(Intent.DECLINE)
        assert outcome.new_state == NegotiationState.HOSTILE
        assert outcome.log_entry.event == TradeEvent.TRADER_AGGRO


# ── Steal ─────────────────────────────────────────────────────


class TestSteal:
    def test_scenario_c_certain_theft(self) -> None:
        trader = _make_trader(steal_success_rate=1.0)
        session = _make_session(
            trader, gold=100, food=50, water=50, strength=100, rules=NO_NOTICE,
            rng=_SequenceRandom([0.999]),
        )
        outcome = session.submit(Intent.STEAL)

        assert outcome.log_entry.event == TradeEvent.STOLE
        assert outcome.new_state == NegotiationState.OFFERING
        assert outcome.ledger == ResourceSnapshot(
            gold=100, food=50, water=80, strength=100
        )
        assert outcome.dialogue_text is None

    def test_unnoticed_theft_rolls_notice_separately(self) -> None:
        # 절도 0.1 < 0.5 성공, 발각 0.9 >= 0.7 미발각
        session = _make_session(rng=_SequenceRandom([0.1, 0.9]))
        outcome = session.submit(Intent.STEAL)
        assert outcome.log_entry.event == TradeEvent.STOLE
        assert outcome.new_state == NegotiationState.OFFERING

    def test_noticed_theft_keeps_loot_applies_penalties(self) -> None:
        session = _make_session(
            gold=100, food=50, water=50, strength=10, rng=_SequenceRandom([0.1, 0.2])
        )
        outcome = session.submit(Intent.STEAL)

        assert outcome.log_entry.event == TradeEvent.THEFT_NOTICED
        assert outcome.new_state == NegotiationState.HOSTILE
        assert outcome.dialogue_text == "Get out!"
        # water +30 -10, food -5, strength -2, gold 그대로
        assert outcome.ledger == ResourceSnapshot(
            gold=100, food=45, water=70, strength=8
        )

    def test_failed_theft_caught(self) -> None:
        session = _make_session(
            gold=100, food=50, water=50, strength=10, rng=_SequenceRandom([0.6])
        )
        outcome = session.submit(Intent.STEAL)

        assert outcome.log_entry.event == TradeEvent.CAUGHT_STEALING
        assert outcome.new_state == NegotiationState.HOSTILE
        assert outcome.dialogue_text == "Get out!"
        assert outcome.ledger == ResourceSnapshot(
            gold=100, food=45, water=40, strength=8
        )

    def test_theft_never_costs_gold(self) -> None:
        session = _make_session(gold=0, rng=_SequenceRandom([0.0]), rules=NO_NOTICE)
        outcome = session.submit(Intent.STEAL)
        assert outcome.log_entry.event == TradeEvent.STOLE
        assert outcome.ledger.gold == 0

    def test_theft_costs_gold_variant(self) -> None:
        rules = NegotiationRules(notice_theft=False, theft_costs_gold=True)
        session = _make_session(gold=10, rng=_SequenceRandom([0.0]), rules=rules)
        outcome = session.submit(Intent.STEAL)
        assert outcome.log_entry.event == TradeEvent.STOLE
        # 15 골드 품목, 잔액 부족분은 0에서 흡수
        assert outcome.ledger.gold == 0
        assert outcome.ledger.water == 80

    def test_weak_player_fails_more(self) -> None:
        # strength 2 → chance 0.1; 0.2 는 실패
        session = _make_session(strength=2, rng=_SequenceRandom([0.2]))
        assert session.submit(Intent.STEAL).log_entry.event == TradeEvent.CAUGHT_STEALING


# ── Empty catalog ─────────────────────────────────────────────


class TestEmptyCatalog:
    @pytest.mark.parametrize(
        "intent", [Intent.ACCEPT, Intent.DECLINE, Intent.STEAL, Intent.NEXT_OFFER]
    )
    def test_scenario_d_no_offers(self, intent: Intent) -> None:
        session = _make_session(_make_trader(catalog=()))
        before = session.ledger.snapshot()

        outcome = session.submit(intent)

        assert outcome.log_entry.event == TradeEvent.NO_OFFERS
        assert outcome.new_state == NegotiationState.OFFERING
        assert outcome.ledger == before
        assert session.rejection_count == 0


# ── Next offer ────────────────────────────────────────────────


class TestNextOffer:
    def test_browse(self) -> None:
        session = _make_session()
        outcome = session.submit(Intent.NEXT_OFFER)
        assert outcome.log_entry.event == TradeEvent.BROWSED
        assert outcome.log_entry.item_name == "Waterskin"
        assert session.submit(Intent.NEXT_OFFER).log_entry.item_name == "Dried Dates"
        assert session.submit(Intent.NEXT_OFFER).log_entry.item_name == "Waterskin"


# ── Hostile ───────────────────────────────────────────────────


class TestHostile:
    @pytest.mark.parametrize(
        "intent", [Intent.ACCEPT, Intent.DECLINE, Intent.STEAL, Intent.NEXT_OFFER]
    )
    def test_refuses_trading(self, intent: Intent) -> None:
        session = _make_session(_make_trader(is_aggro=True))
        before = session.ledger.snapshot()

        outcome = session.submit(intent)

        assert outcome.log_entry.event == TradeEvent.TRADER_HOSTILE
        assert outcome.new_state == NegotiationState.HOSTILE
        assert outcome.dialogue_text == "Get out!"
        assert outcome.ledger == before
        assert session.rejection_count == 0

    def test_only_leave_changes_state(self) -> None:
        session = _make_session(_make_trader(is_aggro=True))
        rng = random.Random(99)
        trading = [Intent.ACCEPT, Intent.DECLINE, Intent.STEAL, Intent.NEXT_OFFER]
        for _ in range(40):
            assert session.submit(rng.choice(trading)).new_state == NegotiationState.HOSTILE

        assert session.submit(Intent.LEAVE).new_state == NegotiationState.ENDED

    def test_leave_from_hostile(self) -> None:
        session = _make_session(_make_trader(is_aggro=True))
        outcome = session.submit(Intent.LEAVE)
        assert outcome.log_entry.event == TradeEvent.LEFT
        assert outcome.dialogue_text == "Farewell."


# ── Leave / Ended ─────────────────────────────────────────────


class TestLeave:
    def test_leave_ends_session(self) -> None:
        session = _make_session()
        outcome = session.submit(Intent.LEAVE)
        assert outcome.applied is True
        assert outcome.new_state == NegotiationState.ENDED
        assert outcome.log_entry.event == TradeEvent.LEFT
        assert outcome.dialogue_text == "Farewell."
        assert "Test Trader" in outcome.log_entry.message
        assert session.is_ended

    def test_greeting_after_leave_is_farewell(self) -> None:
        session = _make_session()
        session.submit(Intent.LEAVE)
        assert session.greeting() == "Farewell."

    def test_leave_twice_is_idempotent(self) -> None:
        session = _make_session()
        session.submit(Intent.LEAVE)
        log_len = len(session.log())
        ledger = session.ledger.snapshot()

        second = session.submit(Intent.LEAVE)
        third = session.submit(Intent.LEAVE)

        assert second.new_state == NegotiationState.ENDED
        assert second.applied is False
        assert second.log_entry.event == TradeEvent.SESSION_ENDED
        assert second == third
        assert len(session.log()) == log_len
        assert session.ledger.snapshot() == ledger

    @pytest.mark.parametrize(
        "intent", [Intent.ACCEPT, Intent.DECLINE, Intent.STEAL, Intent.NEXT_OFFER]
    )
    def test_ended_rejects_everything(self, intent: Intent) -> None:
        session = _make_session()
        session.submit(Intent.LEAVE)
        before = session.ledger.snapshot()

        outcome = session.submit(intent)

        assert outcome.applied is False
        assert outcome.log_entry.event == TradeEvent.SESSION_ENDED
        assert outcome.dialogue_text is None
        assert outcome.ledger == before


# ── Restart ───────────────────────────────────────────────────


class TestRestart:
    def test_restart_resets_negotiation_keeps_ledger(self) -> None:
        trader = _make_trader(max_offers_before_decline=1, aggro_on_max_reject=True)
        session = _make_session(trader)
        session.submit(Intent.DECLINE)
        assert session.state == NegotiationState.HOSTILE
        ledger = session.ledger.snapshot()

        entry = session.restart()

        assert entry.event == TradeEvent.ENCOUNTERED
        assert session.state == NegotiationState.OFFERING
        assert session.rejection_count == 0
        assert session.log() == (entry,)
        assert session.ledger.snapshot() == ledger
        assert session.catalog.has_selection is False

    def test_restart_after_leave(self) -> None:
        session = _make_session()
        session.submit(Intent.LEAVE)
        session.restart()
        assert session.submit(Intent.ACCEPT).applied is True


# ── Random offer fallback ─────────────────────────────────────


class TestRandomOfferFallback:
    def test_random_pick_without_selection(self) -> None:
        rules = NegotiationRules(random_offer_fallback=True)
        names = set()
        for seed in range(20):
            session = _make_session(rng=random.Random(seed), rules=rules)
            names.add(session.submit(Intent.ACCEPT).log_entry.item_name)
        assert names == {"Waterskin", "Dried Dates"}

    def test_explicit_selection_wins(self) -> None:
        rules = NegotiationRules(random_offer_fallback=True)
        for seed in range(10):
            session = _make_session(rng=random.Random(seed), rules=rules)
            session.submit(Intent.NEXT_OFFER)
            session.submit(Intent.NEXT_OFFER)
            assert session.submit(Intent.ACCEPT).log_entry.item_name == "Dried Dates"


# ── Log ───────────────────────────────────────────────────────


class TestSessionLogOrdering:
    def test_entries_sequential(self) -> None:
        session = _make_session()
        session.submit(Intent.NEXT_OFFER)
        session.submit(Intent.DECLINE)
        session.submit(Intent.ACCEPT)
        session.submit(Intent.LEAVE)
        log = session.log()
        assert [e.sequence for e in log] == list(range(len(log)))
        assert [e.event for e in log] == [
            TradeEvent.ENCOUNTERED,
            TradeEvent.BROWSED,
            TradeEvent.DECLINED,
            TradeEvent.BOUGHT,
            TradeEvent.LEFT,
        ]
        assert log[-1].state == NegotiationState.ENDED
