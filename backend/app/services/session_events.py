"""세션 변경(로그인/로그아웃 등) 이벤트 구독/통지 객체입니다.

애플리케이션 진입점(app.main)이 하나의 인스턴스를 ``app.state.session_events`` 로
소유하고, 종료 시 ``close()`` 로 모든 구독을 해제합니다.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

logger = logging.getLogger(__name__)

SIGNED_UP = "SIGNED_UP"
SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
PASSWORD_RESET_REQUESTED = "PASSWORD_RESET_REQUESTED"
PASSWORD_UPDATED = "PASSWORD_UPDATED"

EVENT_TYPES = {SIGNED_UP, SIGNED_IN, SIGNED_OUT, PASSWORD_RESET_REQUESTED, PASSWORD_UPDATED}


@dataclass(frozen=True)
class SessionEvent:
    event: str
    user_id: int
    session_id: Optional[str] = None
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class SessionEvents:
    def __init__(self):
        self._lock = threading.Lock()
        self._listeners: dict[int, Callable[[SessionEvent], None]] = {}
        self._next_id = 1

    def subscribe(self, listener: Callable[[SessionEvent], None]) -> Callable[[], None]:
        """리스너를 등록하고, 호출 시 구독을 해제하는 함수를 돌려준다."""
        with self._lock:
            token = self._next_id
            self._next_id += 1
            self._listeners[token] = listener

        def unsubscribe():
            with self._lock:
                self._listeners.pop(token, None)

        return unsubscribe

    def notify(self, event: SessionEvent):
        if event.event not in EVENT_TYPES:
            raise ValueError(f"unknown session event: {event.event}")
        with self._lock:
            listeners = list(self._listeners.values())
        for listener in listeners:
            try:
                listener(event)
            except Exception as exc:
                # 리스너 하나의 실패가 인증 흐름을 중단시키지 않는다.
                logger.warning("[session] listener failed for %s: %s", event.event, exc)

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def close(self):
        with self._lock:
            self._listeners.clear()
