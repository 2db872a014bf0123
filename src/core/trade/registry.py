"""상인 정의 저장소 — JSON 로드 + 동적 등록"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from .models import Trader, TradeItem

logger = logging.getLogger(__name__)


def trader_from_dict(raw: dict) -> Trader:
    """dict → Trader. 누락 필드는 Trader 기본값.

    KeyError(trader_id/name 누락), ValueError(검증 실패) 전파.
    """
    items = tuple(
        TradeItem(
            name=item["name"],
            gold_cost=int(item.get("gold_cost", 0)),
            food_restore=int(item.get("food_restore", 0)),
            water_restore=int(item.get("water_restore", 0)),
        )
        for item in raw.get("catalog", [])
    )
    return Trader(
        trader_id=raw["trader_id"],
        name=raw["name"],
        encounter_dialogue=raw.get("encounter_dialogue", ""),
        trade_event_dialogue=raw.get("trade_event_dialogue", ""),
        positive_dialogue=raw.get("positive_dialogue", ""),
        leave_trade_dialogue=raw.get("leave_trade_dialogue", ""),
        aggro_dialogue=raw.get("aggro_dialogue", ""),
        max_offers_before_decline=int(raw.get("max_offers_before_decline", 3)),
        aggro_on_max_reject=bool(raw.get("aggro_on_max_reject", False)),
        steal_success_rate=float(raw.get("steal_success_rate", 0.0)),
        strength_penalty=int(raw.get("strength_penalty", 0)),
        water_penalty=int(raw.get("water_penalty", 0)),
        food_penalty=int(raw.get("food_penalty", 0)),
        is_aggro=bool(raw.get("is_aggro", False)),
        catalog=items,
    )


class TraderRegistry:
    """
    상인 정의 저장소.
    초기 데이터(JSON) + 에디터에서 동적으로 등록한 상인 관리.
    """

    def __init__(self) -> None:
        self._traders: dict[str, Trader] = {}

    def load_from_json(self, path: str | Path) -> int:
        """seed_traders.json 로드. 반환: 로드된 수량.

        검증에 실패한 항목은 경고 로그 후 건너뛴다.
        """
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw_list: list[dict] = json.load(f)

        count = 0
        for raw in raw_list:
            try:
                trader = trader_from_dict(raw)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(
                    "Failed to load trader: %s — %s", raw.get("trader_id", "?"), e
                )
                continue
            self._traders[trader.trader_id] = trader
            count += 1

        logger.info("Loaded %d traders from %s", count, path)
        return count

    def register(self, trader: Trader) -> None:
        """이미 존재하는 trader_id면 경고 로그 후 덮어쓴다."""
        if trader.trader_id in self._traders:
            logger.warning("Overwriting existing trader: %s", trader.trader_id)
        self._traders[trader.trader_id] = trader

    def get(self, trader_id: str) -> Optional[Trader]:
        return self._traders.get(trader_id)

    def get_all(self) -> list[Trader]:
        return list(self._traders.values())

    def count(self) -> int:
        return len(self._traders)
