"""
Rate limit store.

클라이언트 키(IP) → 고정 윈도우 요청 수.
RateLimitStore 프로토콜만 맞추면 분산 저장소로 교체할 수 있다.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol


@dataclass
class WindowState:
    """현재 윈도우 상태."""

    count: int
    reset_at: float  # 윈도우 종료 시각 (store clock 기준)


class RateLimitStore(Protocol):
    """요청 카운터 저장소."""

    def now(self) -> float:
        """reset_at과 같은 기준의 현재 시각."""
        ...

    def hit(self, key: str, window_seconds: float) -> WindowState:
        """요청 1건 기록 후 현재 윈도우 상태 반환."""
        ...

    def reset(self, key: str) -> None:
        ...


class InMemoryRateLimitStore:
    """
    프로세스 내 dict 기반 고정 윈도우 저장소.

    Usage:
        store = InMemoryRateLimitStore()
        state = store.hit("127.0.0.1", 60)
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._windows: dict[str, WindowState] = {}

    def now(self) -> float:
        return self._clock()

    def hit(self, key: str, window_seconds: float) -> WindowState:
        now = self._clock()
        state = self._windows.get(key)

        if state is None or now >= state.reset_at:
            state = WindowState(count=0, reset_at=now + window_seconds)
            self._windows[key] = state
            self._evict_expired(now)

        state.count += 1
        return state

    def reset(self, key: str) -> None:
        self._windows.pop(key, None)

    def _evict_expired(self, now: float) -> None:
        expired = [k for k, s in self._windows.items() if now >= s.reset_at]
        for key in expired:
            del self._windows[key]

    def __len__(self) -> int:
        return len(self._windows)
