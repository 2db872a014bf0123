"""플레이어 자원 Service — PlayerModel 소유, 거래 결과 반영

거래 Service와는 EventBus로만 통신한다 (trade_ended 구독).
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from src.core.event_bus import EventBus, GameEvent
from src.core.event_types import EventTypes
from src.core.logging import get_logger
from src.core.trade.ledger import clamp_resource
from src.core.trade.models import ResourceSnapshot
from src.db.models import PlayerModel

logger = get_logger(__name__)

RESOURCE_FIELDS = ("gold", "food", "water", "strength")


@dataclass
class PlayerDefaults:
    """첫 거래 시 플레이어 레코드 초기값"""

    gold: int = 100
    food: int = 50
    water: int = 50
    strength: int = 10


class PlayerService:
    """플레이어 레코드 조회/생성 + 종료된 거래의 자원 변화 기록"""

    def __init__(
        self,
        db: Session,
        event_bus: EventBus,
        defaults: PlayerDefaults | None = None,
    ):
        self._db = db
        self._bus = event_bus
        self._defaults = defaults or PlayerDefaults()
        self._register_event_handlers()

    def _register_event_handlers(self) -> None:
        """EventBus 구독"""
        self._bus.subscribe(EventTypes.TRADE_ENDED, self._on_trade_ended)

    # === 조회 ===

    def get_or_create(self, player_id: str) -> PlayerModel:
        """플레이어 레코드 조회, 없으면 기본 자원으로 생성."""
        player = self._find(player_id)
        if player is None:
            player = PlayerModel(
                player_id=player_id,
                gold=self._defaults.gold,
                food=self._defaults.food,
                water=self._defaults.water,
                strength=self._defaults.strength,
                trades_completed=0,
            )
            self._db.add(player)
            self._db.commit()
            logger.info("Created player %s with default resources", player_id)
        return player

    def get_resources(self, player_id: str) -> ResourceSnapshot | None:
        player = self._find(player_id)
        if player is None:
            return None
        return self._to_snapshot(player)

    def seed_resources(self, player_id: str) -> ResourceSnapshot:
        """새 세션 원장 시드. 레코드가 없으면 생성."""
        return self._to_snapshot(self.get_or_create(player_id))

    # === 거래 결과 반영 ===

    def apply_trade_result(
        self, player_id: str, deltas: dict[str, int], purchases: int
    ) -> ResourceSnapshot:
        """세션 동안의 변화량을 현재 레코드에 더한다 (덮어쓰지 않음).

        다른 경로로 레코드가 바뀌었어도 변화량만 반영되므로 이중 소비가 없다.
        """
        player = self.get_or_create(player_id)
        for field_name in RESOURCE_FIELDS:
            current = getattr(player, field_name)
            delta = deltas.get(field_name, 0)
            setattr(player, field_name, clamp_resource(field_name, current + delta))
        player.trades_completed = (player.trades_completed or 0) + purchases
        player.updated_at = datetime.utcnow()
        self._db.commit()

        snapshot = self._to_snapshot(player)
        logger.info(
            "Trade result saved for %s: deltas=%s purchases=%d -> %s",
            player_id,
            deltas,
            purchases,
            snapshot.as_dict(),
        )
        return snapshot

    # === 이벤트 핸들러 ===

    def _on_trade_ended(self, event: GameEvent) -> None:
        """trade_ended: data에 player_id, deltas, purchases."""
        self.apply_trade_result(
            event.data["player_id"],
            event.data.get("deltas", {}),
            event.data.get("purchases", 0),
        )

    # === 내부 ===

    def _find(self, player_id: str) -> PlayerModel | None:
        return (
            self._db.query(PlayerModel)
            .filter(PlayerModel.player_id == player_id)
            .first()
        )

    @staticmethod
    def _to_snapshot(player: PlayerModel) -> ResourceSnapshot:
        return ResourceSnapshot(
            gold=player.gold,
            food=player.food,
            water=player.water,
            strength=player.strength,
        )
