"""Time source for expiry bookkeeping (Unix seconds). Injected so tests can pin it."""

import time
from typing import Callable

Clock = Callable[[], int]


def system_clock() -> int:
    return int(time.time())
