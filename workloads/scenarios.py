# workloads/scenarios.py
SCENARIOS = {
    "low":    {"orders": 20,  "horizon": 400, "cancel_rate": 0.05, "update_rate": 0.05, "query_rate": 0.10},
    "medium": {"orders": 50,  "horizon": 300, "cancel_rate": 0.10, "update_rate": 0.10, "query_rate": 0.15},
    "high":   {"orders": 120, "horizon": 200, "cancel_rate": 0.15, "update_rate": 0.15, "query_rate": 0.20},
}
