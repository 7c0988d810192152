# simulator/commands.py
from __future__ import annotations
import logging
from typing import Iterable, List, Optional, Tuple

from simulator.dispatcher import Dispatcher, OrderNotFoundError

logger = logging.getLogger(__name__)

# command name -> accepted argument counts
ARITY = {
    "createOrder": (4,),
    "print": (1, 2),
    "getRankOfOrder": (1,),
    "cancelOrder": (2,),
    "updateTime": (3,),
    "Quit": (0,),
}


def parse_command(line: str) -> Tuple[str, List[int]]:
    """`createOrder(1, 2, 3, 4)` -> ("createOrder", [1, 2, 3, 4])"""
    line = line.strip()
    open_idx = line.find("(")
    if open_idx <= 0 or not line.endswith(")"):
        raise ValueError(f"Malformed command: {line!r}")

    name = line[:open_idx].strip()
    parts = [p.strip() for p in line[open_idx + 1:-1].split(",")]
    args = [int(p) for p in parts if p]
    return name, args


def execute(d: Dispatcher, name: str, args: List[int]) -> List[str]:
    if name not in ARITY:
        raise ValueError(f"Invalid operation: {name}")
    if len(args) not in ARITY[name]:
        raise ValueError(f"{name} takes {' or '.join(map(str, ARITY[name]))} arguments, got {len(args)}")

    if name == "createOrder":
        return d.create_order(*args)
    if name == "print":
        return d.describe(args[0]) if len(args) == 1 else d.describe_range(*args)
    if name == "getRankOfOrder":
        return d.rank_of(args[0])
    if name == "cancelOrder":
        return d.cancel_order(*args)
    if name == "updateTime":
        return d.update_time(*args)
    return d.finish()


def run_commands(lines: Iterable[str], d: Optional[Dispatcher] = None) -> List[str]:
    """Run a command script; a failing line is logged and skipped."""
    d = d if d is not None else Dispatcher()
    out: List[str] = []

    for line in lines:
        if not line.strip():
            continue
        logger.debug("executing line: %s", line.strip())
        try:
            name, args = parse_command(line)
            out.extend(execute(d, name, args))
        except OrderNotFoundError as e:
            logger.warning("%s (line: %s)", e, line.strip())
        except ValueError:
            logger.exception("Could not process input line: %s", line.strip())

    return out
