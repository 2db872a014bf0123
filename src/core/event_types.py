"""이벤트 유형 상수

거래 Service가 발행하는 이벤트. Core(거래 상태 기계)는 EventBus를 모른다.
"""


class EventTypes:
    """이벤트 유형 문자열 상수"""

    # trade session lifecycle
    TRADE_STARTED = "trade_started"
    TRADE_ENDED = "trade_ended"

    # trade outcomes
    TRADE_COMPLETED = "trade_completed"
    ITEM_STOLEN = "item_stolen"
    TRADER_HOSTILE = "trader_hostile"
