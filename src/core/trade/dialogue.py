"""상인 대사 선택 — (이벤트 → 대사 태그) 조회만, 분기 없음"""

from enum import Enum
from typing import Optional

from .models import Trader, TradeEvent


class DialogueTag(str, Enum):
    ENCOUNTER = "encounter"
    TRADE_EVENT = "trade_event"
    POSITIVE = "positive"
    LEAVE_TRADE = "leave_trade"
    AGGRO = "aggro"


_TAG_TO_FIELD: dict[DialogueTag, str] = {
    DialogueTag.ENCOUNTER: "encounter_dialogue",
    DialogueTag.TRADE_EVENT: "trade_event_dialogue",
    DialogueTag.POSITIVE: "positive_dialogue",
    DialogueTag.LEAVE_TRADE: "leave_trade_dialogue",
    DialogueTag.AGGRO: "aggro_dialogue",
}

# None = 상인 대사 없음 (플레이어 측 서술만)
EVENT_DIALOGUE: dict[TradeEvent, Optional[DialogueTag]] = {
    TradeEvent.ENCOUNTERED: DialogueTag.ENCOUNTER,
    TradeEvent.BROWSED: None,
    TradeEvent.BOUGHT: DialogueTag.POSITIVE,
    TradeEvent.INSUFFICIENT_GOLD: None,
    TradeEvent.NO_OFFERS: None,
    TradeEvent.DECLINED: DialogueTag.TRADE_EVENT,
    TradeEvent.TRADER_AGGRO: DialogueTag.AGGRO,
    TradeEvent.STOLE: None,
    TradeEvent.THEFT_NOTICED: DialogueTag.AGGRO,
    TradeEvent.CAUGHT_STEALING: DialogueTag.AGGRO,
    TradeEvent.TRADER_HOSTILE: DialogueTag.AGGRO,
    TradeEvent.LEFT: DialogueTag.LEAVE_TRADE,
    TradeEvent.SESSION_ENDED: None,
}


def select_dialogue(trader: Trader, tag: DialogueTag) -> str:
    """상인 대사 반환. 5종 모두 항상 존재 (빈 문자열 가능)."""
    return getattr(trader, _TAG_TO_FIELD[tag])


def dialogue_tag_for(event: TradeEvent) -> Optional[DialogueTag]:
    return EVENT_DIALOGUE[event]


def dialogue_for_event(trader: Trader, event: TradeEvent) -> Optional[str]:
    """이벤트에 대응하는 상인 대사. 대응 없으면 None."""
    tag = dialogue_tag_for(event)
    if tag is None:
        return None
    return select_dialogue(trader, tag)
