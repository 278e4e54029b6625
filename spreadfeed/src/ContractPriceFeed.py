"""ContractPriceFeed: Leaf price feed reading an on-chain price aggregator.

The contract must expose ``decimals()`` and ``latestRoundData()`` as in the
Chainlink AggregatorV3Interface. Answers are rescaled from the contract's
decimals to the feed precision, and the round's ``updatedAt`` is used as the
observation time.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from web3.exceptions import Web3Exception

from . import FixedPoint
from .PriceFeed import Commit, PriceFeedUpdateError
from .PriceHistory import PriceHistory

if TYPE_CHECKING:
    from web3.contract import Contract

logger = logging.getLogger(__name__)


class ContractPriceFeed:
    """Price feed for a single on-chain aggregator contract.

    :ivar contract: Aggregator contract instance.
    :ivar precision: Fixed-point precision of reported prices.
    :ivar history: Observations within the lookback window.
    """

    def __init__(
        self,
        contract: Contract,
        precision: int = FixedPoint.DEFAULT_PRECISION,
        lookback: int = PriceHistory.DEFAULT_LOOKBACK_SECONDS,
    ) -> None:
        self.contract = contract
        self.precision = precision
        self.history = PriceHistory(lookback)
        self.decimals: int | None = None

    def __repr__(self) -> str:
        return f"ContractPriceFeed({self.contract.address})"

    def _read_round(self) -> tuple[int, int, int]:
        if self.decimals is None:
            self.decimals = self.contract.functions.decimals().call()
        round_data = self.contract.functions.latestRoundData().call()
        round_id, answer, updated_at = round_data[0], round_data[1], round_data[3]
        return round_id, answer, updated_at

    async def stage_update(self) -> Commit:
        """Read the latest round from the contract without recording it.

        :returns: Callable recording the round's answer in the history.
        :raises PriceFeedUpdateError: On RPC failure or a non-positive answer.
        """
        try:
            round_id, answer, updated_at = await asyncio.to_thread(self._read_round)
        except (Web3Exception, OSError, ValueError) as e:
            logger.warning(f"{self!r}: contract read failed: {e}")
            raise PriceFeedUpdateError(repr(self), f"contract read failed: {e}") from e

        if answer <= 0:
            logger.warning(f"{self!r}: invalid answer {answer} in round {round_id}")
            raise PriceFeedUpdateError(repr(self), f"invalid answer {answer}")

        price = FixedPoint.rescale(answer, self.decimals, self.precision)

        def commit() -> None:
            latest = self.history.latest()
            if latest is not None and updated_at < latest[0]:
                logger.warning(
                    f"{self!r}: round {round_id} updated at {updated_at}, "
                    f"older than recorded {latest[0]}; ignoring"
                )
                return
            self.history.record(updated_at, price)
            logger.debug(f"{self!r}: round {round_id} answer {answer} at {updated_at}")

        return commit

    async def update(self) -> None:
        """Read the latest round from the contract and record it.

        :raises PriceFeedUpdateError: On RPC failure or a non-positive answer.
            Previously recorded prices are left unchanged.
        """
        commit = await self.stage_update()
        commit()

    def get_current_price(self) -> int | None:
        latest = self.history.latest()
        return latest[1] if latest else None

    def get_historical_price(self, timestamp: int) -> int | None:
        return self.history.price_at(timestamp)

    def get_last_update_time(self) -> int | None:
        latest = self.history.latest()
        return latest[0] if latest else None
