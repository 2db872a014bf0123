"""Trade API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.schemas import (
    ErrorResponse,
    IntentRequest,
    LedgerInfo,
    LogEntryInfo,
    OutcomeResponse,
    PlayerResponse,
    StartTradeRequest,
    TradeItemInfo,
    TradeLogResponse,
    TraderDetail,
    TraderSummary,
    TradeSessionResponse,
)
from src.core.logging import get_logger
from src.core.trade.models import (
    LogEntry,
    NegotiationState,
    ResourceSnapshot,
    Trader,
    TradeItem,
)
from src.services.player_service import PlayerService
from src.services.trade_service import ActiveTrade, TradeConflictError, TradeService

logger = get_logger(__name__)

router = APIRouter(prefix="/trade", tags=["trade"])


def get_trade_service(request: Request) -> TradeService:
    """TradeService 인스턴스 반환 (의존성 주입)"""
    service: TradeService = request.app.state.trade_service
    return service


def get_player_service(request: Request) -> PlayerService:
    """PlayerService 인스턴스 반환 (의존성 주입)"""
    service: PlayerService = request.app.state.player_service
    return service


def _build_item_info(item: Optional[TradeItem]) -> Optional[TradeItemInfo]:
    if item is None:
        return None
    return TradeItemInfo(
        name=item.name,
        gold_cost=item.gold_cost,
        food_restore=item.food_restore,
        water_restore=item.water_restore,
    )


def _build_ledger_info(snapshot: ResourceSnapshot) -> LedgerInfo:
    return LedgerInfo(**snapshot.as_dict())


def _build_log_entry_info(entry: LogEntry) -> LogEntryInfo:
    return LogEntryInfo(
        sequence=entry.sequence,
        event=entry.event.value,
        message=entry.message,
        state=entry.state.value,
        item_name=entry.item_name,
    )


def _build_trader_detail(trader: Trader) -> TraderDetail:
    return TraderDetail(
        trader_id=trader.trader_id,
        name=trader.name,
        encounter_dialogue=trader.encounter_dialogue,
        trade_event_dialogue=trader.trade_event_dialogue,
        positive_dialogue=trader.positive_dialogue,
        leave_trade_dialogue=trader.leave_trade_dialogue,
        aggro_dialogue=trader.aggro_dialogue,
        max_offers_before_decline=trader.max_offers_before_decline,
        aggro_on_max_reject=trader.aggro_on_max_reject,
        steal_success_rate=trader.steal_success_rate,
        strength_penalty=trader.strength_penalty,
        water_penalty=trader.water_penalty,
        food_penalty=trader.food_penalty,
        is_aggro=trader.is_aggro,
        catalog=[_build_item_info(i) for i in trader.catalog],
    )


def _current_offer(active: ActiveTrade) -> Optional[TradeItemInfo]:
    """적대/종료 상태에서는 카탈로그를 노출하지 않는다."""
    session = active.session
    if session.state != NegotiationState.OFFERING:
        return None
    return _build_item_info(session.catalog.current())


def _build_session_response(active: ActiveTrade) -> TradeSessionResponse:
    session = active.session
    return TradeSessionResponse(
        session_id=active.session_id,
        player_id=active.player_id,
        trader_id=session.trader.trader_id,
        state=session.state.value,
        rejection_count=session.rejection_count,
        ledger=_build_ledger_info(session.ledger.snapshot()),
        dialogue=session.greeting(),
        current_offer=_current_offer(active),
    )


def _require_session(service: TradeService, session_id: str) -> ActiveTrade:
    active = service.get_session(session_id)
    if active is None:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    return active


# === 상인 ===


@router.get("/traders", response_model=list[TraderSummary])
def list_traders(
    service: TradeService = Depends(get_trade_service),
) -> list[TraderSummary]:
    """등록된 상인 목록"""
    return [
        TraderSummary(
            trader_id=t.trader_id,
            name=t.name,
            is_aggro=t.is_aggro,
            offer_count=len(t.catalog),
        )
        for t in service.list_traders()
    ]


@router.get(
    "/traders/{trader_id}",
    response_model=TraderDetail,
    responses={404: {"model": ErrorResponse}},
)
def get_trader(
    trader_id: str,
    service: TradeService = Depends(get_trade_service),
) -> TraderDetail:
    """상인 상세"""
    trader = service.get_trader(trader_id)
    if trader is None:
        raise HTTPException(status_code=404, detail=f"Trader not found: {trader_id}")
    return _build_trader_detail(trader)


# === 세션 ===


@router.post(
    "/sessions",
    response_model=TradeSessionResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def start_session(
    request: StartTradeRequest,
    service: TradeService = Depends(get_trade_service),
) -> TradeSessionResponse:
    """
    거래 시작

    상인과 조우해 새 협상 세션을 연다. 플레이어 레코드가 없으면 기본 자원으로 생성.
    플레이어당 진행 중 세션은 하나 (있으면 409).
    """
    try:
        active = service.start_session(request.player_id, request.trader_id)
    except TradeConflictError as e:
        logger.warning("Trade refused: %s", e)
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        logger.warning("Failed to start trade: %s", e)
        raise HTTPException(status_code=404, detail=str(e))
    return _build_session_response(active)


@router.get(
    "/sessions/{session_id}",
    response_model=TradeSessionResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_session(
    session_id: str,
    service: TradeService = Depends(get_trade_service),
) -> TradeSessionResponse:
    return _build_session_response(_require_session(service, session_id))


@router.post(
    "/sessions/{session_id}/intent",
    response_model=OutcomeResponse,
    responses={404: {"model": ErrorResponse}},
)
def submit_intent(
    session_id: str,
    request: IntentRequest,
    service: TradeService = Depends(get_trade_service),
) -> OutcomeResponse:
    """
    플레이어 의도 제출

    거절/잔액 부족/적대 상인 등은 에러가 아니라 event 필드로 전달된다.
    종료된 세션에는 success=False, event="session_ended".
    """
    active = _require_session(service, session_id)
    outcome = service.submit_intent(session_id, request.intent)
    if outcome is None:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")

    entry = outcome.log_entry
    return OutcomeResponse(
        success=outcome.applied,
        session_id=session_id,
        state=outcome.new_state.value,
        event=entry.event.value,
        message=entry.message,
        dialogue=outcome.dialogue_text,
        item_name=entry.item_name,
        ledger=_build_ledger_info(outcome.ledger),
        current_offer=_current_offer(active),
    )


@router.get(
    "/sessions/{session_id}/log",
    response_model=TradeLogResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_session_log(
    session_id: str,
    service: TradeService = Depends(get_trade_service),
) -> TradeLogResponse:
    active = _require_session(service, session_id)
    return TradeLogResponse(
        session_id=session_id,
        entries=[_build_log_entry_info(e) for e in active.session.log()],
    )


@router.post(
    "/sessions/{session_id}/restart",
    response_model=TradeSessionResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def restart_session(
    session_id: str,
    service: TradeService = Depends(get_trade_service),
) -> TradeSessionResponse:
    """같은 상인과 세션 재시작 (거절 횟수 초기화, 자원 유지)"""
    try:
        active = service.restart_session(session_id)
    except TradeConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if active is None:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    return _build_session_response(active)


@router.delete(
    "/sessions/{session_id}",
    responses={404: {"model": ErrorResponse}},
)
def discard_session(
    session_id: str,
    service: TradeService = Depends(get_trade_service),
) -> dict[str, bool]:
    """세션 폐기"""
    if not service.discard_session(session_id):
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    return {"success": True}


# === 플레이어 ===


@router.get(
    "/players/{player_id}",
    response_model=PlayerResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_player(
    player_id: str,
    players: PlayerService = Depends(get_player_service),
) -> PlayerResponse:
    """플레이어 저장 자원. 진행 중 세션의 변화는 떠날 때 반영된다."""
    snapshot = players.get_resources(player_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail=f"Player not found: {player_id}")
    return PlayerResponse(player_id=player_id, ledger=_build_ledger_info(snapshot))
