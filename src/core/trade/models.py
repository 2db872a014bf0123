"""거래 협상 도메인 모델 (DB 무관)

상인 정의는 세션 시작 시 스냅샷으로 소비되며, Core는 이를 변경하지 않는다.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class NegotiationState(str, Enum):
    """협상 상태 3단계"""

    OFFERING = "offering"
    HOSTILE = "hostile"
    ENDED = "ended"  # 종료 상태, 이후 의도 거부


class Intent(str, Enum):
    """플레이어 의도"""

    ACCEPT = "accept"
    DECLINE = "decline"
    STEAL = "steal"
    LEAVE = "leave"
    NEXT_OFFER = "next_offer"


class TradeEvent(str, Enum):
    """세션 로그에 기록되는 서술 이벤트 태그"""

    ENCOUNTERED = "encountered"
    BROWSED = "browsed"
    BOUGHT = "bought"
    INSUFFICIENT_GOLD = "insufficient_gold"
    NO_OFFERS = "no_offers"
    DECLINED = "declined"
    TRADER_AGGRO = "trader_aggro"  # 거절 누적으로 적대화
    STOLE = "stole"
    THEFT_NOTICED = "theft_noticed"
    CAUGHT_STEALING = "caught_stealing"
    TRADER_HOSTILE = "trader_hostile"  # 적대 상태에서 거래 요청 거부
    LEFT = "left"
    SESSION_ENDED = "session_ended"


@dataclass(frozen=True)
class TradeItem:
    """거래 품목 — 불변. 상인 카탈로그 내 이름 유일."""

    name: str
    gold_cost: int = 0
    food_restore: int = 0
    water_restore: int = 0

    def __post_init__(self) -> None:
        for attr in ("gold_cost", "food_restore", "water_restore"):
            if getattr(self, attr) < 0:
                raise ValueError(f"TradeItem {self.name!r}: {attr} must be >= 0")


@dataclass(frozen=True)
class Trader:
    """상인 스냅샷 — 대사 5종 + 행동 파라미터 + 카탈로그."""

    trader_id: str
    name: str

    # 대사 (빈 문자열 허용)
    encounter_dialogue: str = ""
    trade_event_dialogue: str = ""
    positive_dialogue: str = ""
    leave_trade_dialogue: str = ""
    aggro_dialogue: str = ""

    # 행동 파라미터
    max_offers_before_decline: int = 3
    aggro_on_max_reject: bool = False
    steal_success_rate: float = 0.0  # 기본 비율 (0.0~1.0), 퍼센트 아님
    strength_penalty: int = 0
    water_penalty: int = 0
    food_penalty: int = 0
    is_aggro: bool = False

    catalog: tuple[TradeItem, ...] = ()

    def __post_init__(self) -> None:
        if self.max_offers_before_decline < 1:
            raise ValueError(
                f"Trader {self.trader_id!r}: max_offers_before_decline must be >= 1"
            )
        if not 0.0 <= self.steal_success_rate <= 1.0:
            raise ValueError(
                f"Trader {self.trader_id!r}: steal_success_rate must be in [0, 1]"
            )
        for attr in ("strength_penalty", "water_penalty", "food_penalty"):
            if getattr(self, attr) < 0:
                raise ValueError(f"Trader {self.trader_id!r}: {attr} must be >= 0")

        names = [item.name for item in self.catalog]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(
                f"Trader {self.trader_id!r}: duplicate item names {duplicates}"
            )


@dataclass(frozen=True)
class ResourceSnapshot:
    """ResourceLedger 읽기 전용 사본"""

    gold: int
    food: int
    water: int
    strength: int

    def as_dict(self) -> dict[str, int]:
        return {
            "gold": self.gold,
            "food": self.food,
            "water": self.water,
            "strength": self.strength,
        }


@dataclass(frozen=True)
class LogEntry:
    """세션 로그 1건"""

    sequence: int
    event: TradeEvent
    message: str
    state: NegotiationState  # 기록 시점의 상태 (전이 후)
    item_name: Optional[str] = None


@dataclass(frozen=True)
class Outcome:
    """submit() 결과.

    applied=False 는 종료된 세션에 대한 거부 신호뿐이다.
    """

    new_state: NegotiationState
    ledger: ResourceSnapshot
    dialogue_text: Optional[str]
    log_entry: LogEntry
    applied: bool = True
