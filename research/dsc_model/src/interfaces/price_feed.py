"""Price feed protocol: the aggregator read interface."""
from typing import Protocol, Tuple


class PriceFeed(Protocol):
    """Latest answer of one asset priced in USD."""

    address: str

    def decimals(self) -> int: ...

    def latest_round_data(self) -> Tuple[int, int, int, int, int]:
        """(round_id, answer, started_at, updated_at, answered_in_round)"""
        ...
