"""세션 서술 로그 — 추가 전용"""

from typing import Iterator, Optional

from .models import LogEntry, NegotiationState, TradeEvent


class SessionLog:
    """UI 표시용 이벤트 기록기. 순서 보장, 삭제는 restart 시 clear()뿐."""

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []

    def append(
        self,
        event: TradeEvent,
        message: str,
        state: NegotiationState,
        item_name: Optional[str] = None,
    ) -> LogEntry:
        entry = LogEntry(
            sequence=len(self._entries),
            event=event,
            message=message,
            state=state,
            item_name=item_name,
        )
        self._entries.append(entry)
        return entry

    def entries(self) -> tuple[LogEntry, ...]:
        return tuple(self._entries)

    def last(self) -> Optional[LogEntry]:
        return self._entries[-1] if self._entries else None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(list(self._entries))
