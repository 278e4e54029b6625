"""PriceFeedMock: In-memory leaf feed with preset prices, for tests and dry runs."""

from __future__ import annotations

from .PriceFeed import Commit


class PriceFeedMock:
    """Leaf feed returning preset prices.

    Prices given to set_next_update() are adopted by every later successful
    update(), so tests can tell a published refresh from a discarded one.

    :ivar current_price: Price returned by get_current_price().
    :ivar historical_price: Price returned by get_historical_price() for any timestamp.
    :ivar last_update_time: Value returned by get_last_update_time().
    :ivar update_called: Number of times update() (or stage_update()) has been awaited.
    """

    def __init__(
        self,
        current_price: int | None = None,
        historical_price: int | None = None,
        last_update_time: int | None = None,
    ) -> None:
        self.current_price = current_price
        self.historical_price = historical_price
        self.last_update_time = last_update_time
        self.update_called = 0
        self._next_error: BaseException | None = None
        self._next_state: tuple[int | None, int | None, int | None] | None = None

    def __repr__(self) -> str:
        return f"PriceFeedMock(current={self.current_price}, historical={self.historical_price})"

    def set_current_price(self, price: int | None) -> None:
        self.current_price = price

    def set_historical_price(self, price: int | None) -> None:
        self.historical_price = price

    def set_last_update_time(self, timestamp: int | None) -> None:
        self.last_update_time = timestamp

    def set_next_update(
        self,
        current_price: int | None,
        historical_price: int | None,
        last_update_time: int | None,
    ) -> None:
        """Set the prices a successful update() publishes."""
        self._next_state = (current_price, historical_price, last_update_time)

    def fail_next_update(self, error: BaseException) -> None:
        """Make the next update() raise ``error`` without touching any price."""
        self._next_error = error

    async def stage_update(self) -> Commit:
        self.update_called += 1
        if self._next_error is not None:
            error, self._next_error = self._next_error, None
            raise error

        next_state = self._next_state

        def commit() -> None:
            if next_state is not None:
                self.current_price, self.historical_price, self.last_update_time = next_state

        return commit

    async def update(self) -> None:
        commit = await self.stage_update()
        commit()

    def get_current_price(self) -> int | None:
        return self.current_price

    def get_historical_price(self, timestamp: int) -> int | None:
        return self.historical_price

    def get_last_update_time(self) -> int | None:
        return self.last_update_time
