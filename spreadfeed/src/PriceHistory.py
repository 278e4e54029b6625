"""PriceHistory: In-memory window of timestamped price observations for leaf feeds."""

from __future__ import annotations

import bisect


def _timestamp(observation: tuple[int, int]) -> int:
    return observation[0]


class PriceHistory:
    """Ordered (timestamp, price) observations trimmed to a lookback window.

    :ivar lookback: Seconds of history kept behind the newest observation.
    :ivar observations: Observations in ascending timestamp order.
    """

    DEFAULT_LOOKBACK_SECONDS = 7200  # 2 hours

    def __init__(self, lookback: int = DEFAULT_LOOKBACK_SECONDS) -> None:
        if lookback < 0:
            raise ValueError("lookback must be non-negative")
        self.lookback = lookback
        self.observations: list[tuple[int, int]] = []

    def __len__(self) -> int:
        return len(self.observations)

    def record(self, timestamp: int, price: int) -> None:
        """Add an observation and drop those older than the lookback window.

        An observation with the same timestamp as the newest one replaces it.
        """
        if self.observations and timestamp < self.observations[-1][0]:
            raise ValueError(
                f"Observation at {timestamp} is older than the latest "
                f"({self.observations[-1][0]})"
            )
        if self.observations and timestamp == self.observations[-1][0]:
            self.observations[-1] = (timestamp, price)
        else:
            self.observations.append((timestamp, price))

        cutoff = timestamp - self.lookback
        first_kept = bisect.bisect_left(self.observations, cutoff, key=_timestamp)
        if first_kept:
            del self.observations[:first_kept]

    def latest(self) -> tuple[int, int] | None:
        return self.observations[-1] if self.observations else None

    def price_at(self, timestamp: int) -> int | None:
        """Return the newest price observed at or before ``timestamp``.

        Returns None if ``timestamp`` predates the window.
        """
        index = bisect.bisect_right(self.observations, timestamp, key=_timestamp)
        if index == 0:
            return None
        return self.observations[index - 1][1]
