"""API request/response schemas."""

from typing import Optional

from pydantic import BaseModel, Field

from src.core.trade.models import Intent


# === Request Schemas ===


class StartTradeRequest(BaseModel):
    """거래 세션 시작 요청"""

    player_id: str = Field(..., min_length=1, max_length=50, description="플레이어 ID")
    trader_id: str = Field(..., min_length=1, description="상인 ID")


class IntentRequest(BaseModel):
    """플레이어 의도 제출"""

    intent: Intent = Field(
        ..., description="의도: accept, decline, steal, leave, next_offer"
    )


# === Response Schemas ===


class TradeItemInfo(BaseModel):
    """거래 품목"""

    name: str
    gold_cost: int
    food_restore: int
    water_restore: int


class TraderSummary(BaseModel):
    """상인 목록 항목"""

    trader_id: str
    name: str
    is_aggro: bool
    offer_count: int


class TraderDetail(BaseModel):
    """상인 상세 (대사 + 행동 파라미터 + 카탈로그)"""

    trader_id: str
    name: str
    encounter_dialogue: str
    trade_event_dialogue: str
    positive_dialogue: str
    leave_trade_dialogue: str
    aggro_dialogue: str
    max_offers_before_decline: int
    aggro_on_max_reject: bool
    steal_success_rate: float
    strength_penalty: int
    water_penalty: int
    food_penalty: int
    is_aggro: bool
    catalog: list[TradeItemInfo] = []


class LedgerInfo(BaseModel):
    """플레이어 자원"""

    gold: int
    food: int
    water: int
    strength: int


class LogEntryInfo(BaseModel):
    """세션 로그 1건"""

    sequence: int
    event: str
    message: str
    state: str
    item_name: Optional[str] = None


class TradeSessionResponse(BaseModel):
    """세션 상태"""

    session_id: str
    player_id: str
    trader_id: str
    state: str
    rejection_count: int
    ledger: LedgerInfo
    dialogue: str
    current_offer: Optional[TradeItemInfo] = None


class OutcomeResponse(BaseModel):
    """의도 처리 결과"""

    success: bool
    session_id: str
    state: str
    event: str
    message: str
    dialogue: Optional[str] = None
    item_name: Optional[str] = None
    ledger: LedgerInfo
    current_offer: Optional[TradeItemInfo] = None


class TradeLogResponse(BaseModel):
    session_id: str
    entries: list[LogEntryInfo] = []


class PlayerResponse(BaseModel):
    """플레이어 저장 자원 (종료된 거래까지 반영)"""

    player_id: str
    ledger: LedgerInfo


class ErrorResponse(BaseModel):
    """에러 응답"""

    success: bool = False
    error: str
    detail: Optional[str] = None
