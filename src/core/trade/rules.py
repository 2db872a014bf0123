"""협상 규칙 변형 설정

게임마다 갈리는 협상 동작을 명시적 옵션으로 둔다.
기본값은 결정적 거절 임계치 + 절도 성공 후 발각 굴림.
"""

from dataclasses import dataclass
from enum import Enum

from .resolver import REJECT_AGGRO_CHANCE, THEFT_NOTICE_CHANCE


class EscalationMode(str, Enum):
    THRESHOLD = "threshold"  # rejection_count >= max_offers_before_decline
    RANDOM_ROLL = "random_roll"  # 첫 거절 이후 매번 reject_aggro_chance


@dataclass(frozen=True)
class NegotiationRules:
    escalation_mode: EscalationMode = EscalationMode.THRESHOLD
    reject_aggro_chance: float = REJECT_AGGRO_CHANCE
    notice_theft: bool = True
    theft_notice_chance: float = THEFT_NOTICE_CHANCE
    # 플레이어가 직접 고르지 않았을 때 0번 대신 무작위 품목
    random_offer_fallback: bool = False
    # 절도 성공 시에도 품목 가격 차감 (기본: 무료)
    theft_costs_gold: bool = False

    def __post_init__(self) -> None:
        for attr in ("reject_aggro_chance", "theft_notice_chance"):
            value = getattr(self, attr)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"NegotiationRules.{attr} must be in [0, 1]: {value}")


DEFAULT_RULES = NegotiationRules()
