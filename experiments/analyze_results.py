# experiments/analyze_results.py
from __future__ import annotations
import csv
import os
from collections import defaultdict
from typing import List

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from model.order import Order


def load_metrics(csv_path: str):
    rows = []
    with open(csv_path, "r", encoding="utf-8") as f:
        r = csv.DictReader(f)
        for row in r:
            # convert numeric fields where possible
            for k, v in list(row.items()):
                if v is None or v == "":
                    row[k] = None
                    continue
                try:
                    row[k] = float(v) if "." in v else int(v)
                except ValueError:
                    pass
            rows.append(row)
    return rows


def summarize(rows):
    groups = defaultdict(list)
    for row in rows:
        groups[row["scenario"]].append(row)

    summary = []
    for scenario, items in groups.items():
        def stat(key, fn):
            vals = np.array([x[key] for x in items if x.get(key) is not None], dtype=float)
            return float(fn(vals)) if vals.size else None

        summary.append({
            "scenario": scenario,
            "runs": len(items),
            "orders_delivered_avg": stat("orders_delivered", np.mean),
            "cancelled_avg": stat("cancelled", np.mean),
            "avg_wait_avg": stat("avg_wait", np.mean),
            "max_wait_p95": stat("max_wait", lambda a: np.percentile(a, 95)),
            "last_eta_avg": stat("last_eta", np.mean),
        })
    return summary


def save_summary(summary, out_csv):
    os.makedirs(os.path.dirname(out_csv), exist_ok=True)
    with open(out_csv, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=list(summary[0].keys()))
        w.writeheader()
        w.writerows(summary)


def plot_delivery_timeline(orders: List[Order], out_path: str, title: str = "") -> None:
    """One bar per delivered order: agent departure to drop-off, plus the ride back."""
    fig, ax = plt.subplots(figsize=(10, max(3, 0.2 * len(orders))))

    y = np.arange(len(orders))
    starts = np.array([o.delivery_start_time for o in orders])
    legs = np.array([o.delivery_time for o in orders])

    ax.barh(y, legs, left=starts, label="outbound")
    ax.barh(y, legs, left=starts + legs, alpha=0.4, label="return")
    ax.set_yticks(y)
    ax.set_yticklabels([str(o.order_id) for o in orders], fontsize=6)
    ax.set_xlabel("time")
    ax.set_ylabel("order")
    if title:
        ax.set_title(f"Scenario: {title}")
    ax.legend()

    os.makedirs(os.path.dirname(out_path), exist_ok=True)
    fig.savefig(out_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
