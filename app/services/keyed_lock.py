# 키 단위 상호 배제: 같은 키의 변경만 직렬화하고 다른 키는 병렬 진행

import os
import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator, List

from app.services.errors import LockTimeout

LOCK_TIMEOUT_SEC = float(os.getenv("LOCK_TIMEOUT_SEC", "5"))


class KeyedLock:
    """키별 Lock 을 참조 카운트로 관리. 마지막 사용자가 놓으면 항목 삭제."""

    def __init__(self, timeout: float = LOCK_TIMEOUT_SEC) -> None:
        self._timeout = timeout
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, List] = {}  # key -> [Lock, refcount]

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._locks[key] = entry
            entry[1] += 1
        try:
            if not entry[0].acquire(timeout=self._timeout):
                raise LockTimeout(f"Timed out waiting for lock on {key!r}")
            try:
                yield
            finally:
                entry[0].release()
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
