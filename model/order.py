# model/order.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Tuple

from config import PRIORITY_WEIGHTS, PriorityWeights


def bucket(value: int, size: int) -> int:
    # truncate toward zero, not floor
    q = abs(value) // size
    return q if value >= 0 else -q


def order_priority(value: int, created_at: int, weights: PriorityWeights = PRIORITY_WEIGHTS) -> float:
    return weights.value * bucket(value, weights.value_bucket) - weights.time * created_at


@dataclass
class Order:
    order_id: int
    created_at: int
    value: int
    delivery_time: int          # one-way travel time from base

    priority: float = field(init=False)
    eta: int = 0
    delivery_start_time: int = 0

    def __post_init__(self) -> None:
        self.priority = order_priority(self.value, self.created_at)

    def set_eta(self, eta: int) -> None:
        self.eta = eta
        self.delivery_start_time = eta - self.delivery_time

    @property
    def priority_key(self) -> Tuple[float, int, int]:
        # ties: later creation sorts lower, then larger id sorts lower
        return (self.priority, -self.created_at, -self.order_id)

    @property
    def eta_key(self) -> int:
        return self.eta

    @property
    def return_time(self) -> int:
        """Time the agent is back at base after dropping this order off."""
        return self.eta + self.delivery_time

    def describe(self) -> str:
        return f"[{self.order_id}, {self.created_at}, {self.value}, {self.delivery_time}, {self.eta}]"
