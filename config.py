# config.py
import os
import sys
from dataclasses import dataclass

# Reproducibility
RANDOM_SEED = 42

# Simulation clock
START_TIME = 0
END_OF_TIME = sys.maxsize  # finish() flushes everything up to here

# I/O
OUTPUT_SUFFIX = "_output_file.txt"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DEFAULT_LOG_LEVEL = "WARNING"

# Workload generation
WORKLOAD_ORDERS = 50
WORKLOAD_HORIZON = 200
DELIVERY_TIME_RANGE = (5, 40)
ORDER_VALUE_RANGE = (10, 500)

# Results
RESULTS_DIR = os.path.join("results", "tables")
PLOTS_DIR = os.path.join("results", "plots")


@dataclass(frozen=True)
class PriorityWeights:
    value: float = 0.3
    time: float = 0.7
    value_bucket: int = 50  # value is bucketed with truncating division


PRIORITY_WEIGHTS = PriorityWeights()
