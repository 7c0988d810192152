# workloads/generate_workload.py
from __future__ import annotations
import os
import random
from typing import List

from config import (
    DELIVERY_TIME_RANGE, ORDER_VALUE_RANGE, RANDOM_SEED,
    WORKLOAD_HORIZON, WORKLOAD_ORDERS,
)


def set_seed(seed: int = RANDOM_SEED) -> None:
    random.seed(seed)


def generate_commands(
    n_orders: int = WORKLOAD_ORDERS,
    horizon: int = WORKLOAD_HORIZON,
    cancel_rate: float = 0.1,
    update_rate: float = 0.1,
    query_rate: float = 0.1,
) -> List[str]:
    """
    Random command script with non-decreasing timestamps.

    Creation times are spread over [0, horizon]; after each create the script may
    cancel or re-time an earlier order, or issue a read-only query. Mutations can
    target orders that are already delivered, which the dispatcher reports.
    """
    lines: List[str] = []
    created: List[int] = []

    times = sorted(random.randint(0, horizon) for _ in range(n_orders))
    for i, t in enumerate(times):
        oid = 1001 + i
        value = random.randint(*ORDER_VALUE_RANGE)
        duration = random.randint(*DELIVERY_TIME_RANGE)
        lines.append(f"createOrder({oid}, {t}, {value}, {duration})")
        created.append(oid)

        r = random.random()
        if r < cancel_rate:
            lines.append(f"cancelOrder({random.choice(created)}, {t})")
        elif r < cancel_rate + update_rate:
            lines.append(f"updateTime({random.choice(created)}, {t}, {random.randint(*DELIVERY_TIME_RANGE)})")

        if random.random() < query_rate:
            q = random.random()
            if q < 0.4:
                lines.append(f"print({random.choice(created)})")
            elif q < 0.7:
                lines.append(f"getRankOfOrder({random.choice(created)})")
            else:
                lines.append(f"print({t}, {t + random.randint(10, 100)})")

    lines.append("Quit()")
    return lines


def save_workload(lines: List[str], path: str) -> None:
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")
