"""플레이어 자원 원장 — gold/food/water/strength

모든 변경은 apply() 한 경로로만 수행되며 필드별 경계로 클램프된다.
음수 초과분은 조용히 흡수한다 (에러 없음).
"""

from __future__ import annotations

from typing import Optional

from .models import ResourceSnapshot

FOOD_MAX = 100
WATER_MAX = 100

# 필드별 (하한, 상한). None = 상한 없음
RESOURCE_BOUNDS: dict[str, tuple[int, Optional[int]]] = {
    "gold": (0, None),
    "food": (0, FOOD_MAX),
    "water": (0, WATER_MAX),
    "strength": (0, None),
}


def clamp_resource(field_name: str, value: int) -> int:
    """필드 경계로 클램프."""
    low, high = RESOURCE_BOUNDS[field_name]
    value = max(low, value)
    if high is not None:
        value = min(high, value)
    return value


class ResourceLedger:
    """세션이 독점 소유하는 자원 카운터 4종."""

    def __init__(
        self, gold: int = 0, food: int = 0, water: int = 0, strength: int = 0
    ) -> None:
        self._gold = clamp_resource("gold", gold)
        self._food = clamp_resource("food", food)
        self._water = clamp_resource("water", water)
        self._strength = clamp_resource("strength", strength)

    @property
    def gold(self) -> int:
        return self._gold

    @property
    def food(self) -> int:
        return self._food

    @property
    def water(self) -> int:
        return self._water

    @property
    def strength(self) -> int:
        return self._strength

    def apply(
        self, gold: int = 0, food: int = 0, water: int = 0, strength: int = 0
    ) -> ResourceSnapshot:
        """delta 적용. 새 값 = clamp(old + delta). 적용 후 스냅샷 반환."""
        self._gold = clamp_resource("gold", self._gold + gold)
        self._food = clamp_resource("food", self._food + food)
        self._water = clamp_resource("water", self._water + water)
        self._strength = clamp_resource("strength", self._strength + strength)
        return self.snapshot()

    def snapshot(self) -> ResourceSnapshot:
        return ResourceSnapshot(
            gold=self._gold,
            food=self._food,
            water=self._water,
            strength=self._strength,
        )

    @classmethod
    def from_snapshot(cls, snapshot: ResourceSnapshot) -> ResourceLedger:
        return cls(
            gold=snapshot.gold,
            food=snapshot.food,
            water=snapshot.water,
            strength=snapshot.strength,
        )

    def __repr__(self) -> str:
        return (
            f"ResourceLedger(gold={self._gold}, food={self._food}, "
            f"water={self._water}, strength={self._strength})"
        )
