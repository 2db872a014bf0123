"""거래 확률/판정 — 절도 성공, 거절 후 적대화

전부 순수 함수. 난수원은 호출자가 주입한다 (전역 random 사용 금지).
입력 범위 검증은 호출자 책임.
"""

import logging
import random

logger = logging.getLogger(__name__)

# === 절도 ===
STRENGTH_SCALE = 10.0  # strength 10 = 기본 비율 그대로

# === 변형 규칙 기본값 ===
REJECT_AGGRO_CHANCE = 0.3  # 무작위 적대화 변형: 거절 1회당 30%
THEFT_NOTICE_CHANCE = 0.7  # 절도 성공 후 발각 확률


def calculate_theft_chance(steal_success_rate: float, player_strength: int) -> float:
    """절도 성공 확률. rate * (strength / 10), 0~1 클램프."""
    chance = steal_success_rate * (player_strength / STRENGTH_SCALE)
    return max(0.0, min(1.0, chance))


def theft_succeeds(
    steal_success_rate: float,
    player_strength: int,
    rng: random.Random,
) -> bool:
    """절도 성공 판정. rng.random() < chance."""
    chance = calculate_theft_chance(steal_success_rate, player_strength)
    roll = rng.random()
    logger.debug("Theft roll %.3f vs chance %.3f", roll, chance)
    return roll < chance


def hostility_triggered_on_reject(
    aggro_on_max_reject: bool,
    rejection_count: int,
    threshold: int,
) -> bool:
    """거절 누적 적대화 (결정적). aggro_on_max_reject 이고 count >= threshold."""
    return aggro_on_max_reject and rejection_count >= threshold


def hostility_rolled_on_reject(
    aggro_on_max_reject: bool,
    rejection_count: int,
    chance: float,
    rng: random.Random,
) -> bool:
    """무작위 적대화 변형. 첫 거절 이후 매 거절마다 chance 확률."""
    if not aggro_on_max_reject or rejection_count <= 1:
        return False
    return rng.random() < chance


def theft_noticed(notice_chance: float, rng: random.Random) -> bool:
    """절도 성공 후 상인이 눈치챘는지. 성공 판정과 독립된 두 번째 굴림."""
    return rng.random() < notice_chance
