"""Firebase push keys.

A push key is 20 characters: 8 characters encoding the creation time in
milliseconds (base-64, most significant first) followed by 12 random ones.
"""

import random
import threading
import time
from typing import Optional

PUSH_CHARS = "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"
PUSH_ID_LENGTH = 20
_TIME_CHARS = 8


def decode_push_time(key: str) -> Optional[int]:
    if not isinstance(key, str) or len(key) != PUSH_ID_LENGTH:
        return None
    ms = 0
    for ch in key[:_TIME_CHARS]:
        idx = PUSH_CHARS.find(ch)
        if idx < 0:
            return None
        ms = ms * 64 + idx
    return ms


class PushIdGenerator:
    """Generates lexicographically increasing push keys."""

    def __init__(self, clock=time.time, rng: Optional[random.Random] = None):
        self._clock = clock
        self._rng = rng or random.Random()
        self._lock = threading.Lock()
        self._last_ms = -1
        self._last_rand = [0] * 12

    def __call__(self, now_ms: Optional[int] = None) -> str:
        with self._lock:
            ms = int(self._clock() * 1000) if now_ms is None else int(now_ms)
            if ms == self._last_ms:
                # same millisecond: increment the random tail so keys stay ordered
                for i in range(11, -1, -1):
                    if self._last_rand[i] != 63:
                        self._last_rand[i] += 1
                        break
                    self._last_rand[i] = 0
            else:
                self._last_rand = [self._rng.randrange(64) for _ in range(12)]
            self._last_ms = ms

            head = []
            for _ in range(_TIME_CHARS):
                head.append(PUSH_CHARS[ms % 64])
                ms //= 64
            return "".join(reversed(head)) + "".join(PUSH_CHARS[i] for i in self._last_rand)
