# -*- coding: utf-8 -*-
"""
Write pacing.
A fixed delay is awaited around every remote write (term create, media upload,
post create/update). Reads are never delayed.
"""
from __future__ import annotations

import time
from typing import Callable


class Pacer:
    def __init__(self, delay_seconds: float, sleep: Callable[[float], None] = time.sleep) -> None:
        self.delay_seconds = max(0.0, delay_seconds)
        self._sleep = sleep
        self.waits = 0

    def wait(self) -> None:
        self.waits += 1
        if self.delay_seconds > 0:
            self._sleep(self.delay_seconds)
