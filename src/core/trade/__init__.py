"""거래 협상 Core — 순수 Python, DB/UI 무관"""

from .catalog import OfferCatalog
from .dialogue import DialogueTag, dialogue_for_event, select_dialogue
from .ledger import FOOD_MAX, WATER_MAX, ResourceLedger
from .models import (
    Intent,
    LogEntry,
    NegotiationState,
    Outcome,
    ResourceSnapshot,
    Trader,
    TradeEvent,
    TradeItem,
)
from .registry import TraderRegistry, trader_from_dict
from .resolver import (
    calculate_theft_chance,
    hostility_rolled_on_reject,
    hostility_triggered_on_reject,
    theft_noticed,
    theft_succeeds,
)
from .rules import DEFAULT_RULES, EscalationMode, NegotiationRules
from .session import NegotiationSession
from .session_log import SessionLog

__all__ = [
    "OfferCatalog",
    "DialogueTag",
    "dialogue_for_event",
    "select_dialogue",
    "FOOD_MAX",
    "WATER_MAX",
    "ResourceLedger",
    "Intent",
    "LogEntry",
    "NegotiationState",
    "Outcome",
    "ResourceSnapshot",
    "Trader",
    "TradeEvent",
    "TradeItem",
    "TraderRegistry",
    "trader_from_dict",
    "calculate_theft_chance",
    "hostility_rolled_on_reject",
    "hostility_triggered_on_reject",
    "theft_noticed",
    "theft_succeeds",
    "DEFAULT_RULES",
    "EscalationMode",
    "NegotiationRules",
    "NegotiationSession",
    "SessionLog",
]
