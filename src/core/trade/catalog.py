"""상인 카탈로그 탐색 — 순환 next, 인덱스/무작위 선택"""

from __future__ import annotations

import logging
import random
from typing import Optional, Sequence

from .models import TradeItem

logger = logging.getLogger(__name__)


class OfferCatalog:
    """상인 품목 목록의 읽기 전용 뷰 + 현재 선택.

    목록은 복사하지 않으므로 호출자가 바꾸면 다음 접근에 반영된다.
    선택은 품목 이름으로 추적한다. 목록이 바뀌어 선택 품목이 사라지면
    0번으로 복귀하므로 범위 밖 인덱스는 존재하지 않는다.
    """

    def __init__(self, items: Sequence[TradeItem]) -> None:
        self._items = items
        self._selected: Optional[str] = None  # 선택 품목 이름
        self._explicit = False

    @property
    def items(self) -> tuple[TradeItem, ...]:
        return tuple(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    @property
    def index(self) -> Optional[int]:
        """현재 선택 인덱스. 선택 없음/빈 카탈로그면 None."""
        return self._position_of(self._selected)

    @property
    def has_selection(self) -> bool:
        """플레이어가 next()/select()로 직접 고른 적이 있는지."""
        return self._explicit and self.index is not None

    def __len__(self) -> int:
        return len(self._items)

    def current(self) -> Optional[TradeItem]:
        """현재 선택 품목. 첫 접근 시 0번 선택. 빈 카탈로그면 None."""
        if not self._items:
            self._selected = None
            return None
        position = self._position_of(self._selected)
        if position is None:
            position = 0
            self._selected = self._items[0].name
        return self._items[position]

    def next(self) -> Optional[TradeItem]:
        """다음 품목으로 순환 이동.

        현재 선택 품목이 목록에 없으면 0번으로 복귀.
        """
        if not self._items:
            self._selected = None
            return None

        position = self._position_of(self._selected)
        if position is None:
            if self._selected is not None:
                logger.debug("Selected offer %s no longer in catalog", self._selected)
            position = 0
        else:
            position = (position + 1) % len(self._items)

        self._selected = self._items[position].name
        self._explicit = True
        return self._items[position]

    def select(self, index: int) -> TradeItem:
        """명시적 인덱스 선택. 범위 밖은 호출자 버그 — IndexError."""
        if not 0 <= index < len(self._items):
            raise IndexError(
                f"offer index {index} out of range (catalog size {len(self._items)})"
            )
        self._selected = self._items[index].name
        self._explicit = True
        return self._items[index]

    def random_item(self, rng: random.Random) -> Optional[TradeItem]:
        """균등 무작위 선택. 현재 선택은 바꾸지 않는다."""
        if not self._items:
            return None
        return self._items[rng.randrange(len(self._items))]

    def reset(self) -> None:
        self._selected = None
        self._explicit = False

    def _position_of(self, name: Optional[str]) -> Optional[int]:
        if name is None:
            return None
        for i, item in enumerate(self._items):
            if item.name == name:
                return i
        return None
