"""Mock price aggregator with a settable answer"""
import time
from typing import Tuple

from ..chain import Chain


class MockV3Aggregator:
    """Aggregator returning whatever answer was last pushed to it"""

    def __init__(self, chain: Chain, address: str, decimals: int, initial_answer: int):
        self.address = address
        self._decimals = decimals
        self.latest_answer = 0
        self.latest_timestamp = 0
        self.latest_round = 0
        self.update_answer(initial_answer)
        chain.register(self)

    def snapshot(self):
        return self.latest_answer, self.latest_timestamp, self.latest_round

    def restore(self, state) -> None:
        self.latest_answer, self.latest_timestamp, self.latest_round = state

    def decimals(self) -> int:
        return self._decimals

    def update_answer(self, answer: int) -> None:
        self.latest_answer = answer
        self.latest_timestamp = int(time.time())
        self.latest_round += 1

    def latest_round_data(self) -> Tuple[int, int, int, int, int]:
        return (
            self.latest_round,
            self.latest_answer,
            self.latest_timestamp,
            self.latest_timestamp,
            self.latest_round,
        )

    def __repr__(self):
        return f"MockV3Aggregator({self.address}, answer={self.latest_answer}, decimals={self._decimals})"
