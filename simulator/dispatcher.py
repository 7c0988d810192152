# simulator/dispatcher.py
from __future__ import annotations
import heapq
import logging
from typing import Dict, List, Optional, Tuple

from config import END_OF_TIME, START_TIME
from model.order import Order
from simulator.ordered_index import AVLTree

logger = logging.getLogger(__name__)

NO_ORDERS_IN_WINDOW = "There are no orders in that time period"

# max-heap entry keyed by ETA
HeapEntry = Tuple[int, int, Order]


class OrderNotFoundError(KeyError):
    def __init__(self, order_id: int):
        super().__init__(order_id)
        self.order_id = order_id

    def __str__(self) -> str:
        return f"Order {self.order_id} not found"


def _heap_entry(o: Order) -> HeapEntry:
    return (-o.eta, -o.order_id, o)


def format_updates(updates: Dict[int, int]) -> Optional[str]:
    """`updates` maps order id -> new ETA; rendered ascending by ETA."""
    if not updates:
        return None
    items = sorted(updates.items(), key=lambda kv: kv[1])
    return "Updated ETAs: [" + ", ".join(f"{oid}: {eta}" for oid, eta in items) + "]"


class Dispatcher:
    """
    Single delivery agent working out of one base.

    Active orders are indexed three ways: by id, by priority and by ETA. The agent
    makes a round trip per order, so an order's ETA is the return time of the order
    delivered just before it plus its own delivery time. Time only moves forward and
    is supplied by each call.
    """

    def __init__(self):
        self.t: int = START_TIME
        self.orders: Dict[int, Order] = {}
        self.by_priority: AVLTree[Order] = AVLTree(key=lambda o: o.priority_key)
        self.by_eta: AVLTree[Order] = AVLTree(key=lambda o: o.eta_key)

        self._due: List[HeapEntry] = []         # swept by a time advance, not yet reported
        self._history: List[HeapEntry] = []     # delivered, append-only

    # ----------------- clock -----------------
    def advance_time(self, t: int) -> None:
        if t <= self.t:
            return
        self.t = t

        for o in self.orders_between(0, t):
            heapq.heappush(self._due, _heap_entry(o))
            self._remove_active(o)

    def drain_due(self) -> List[str]:
        delivered: List[str] = []
        while self._due:
            entry = heapq.heappop(self._due)
            o = entry[2]
            heapq.heappush(self._history, entry)
            delivered.append(f"Order {o.order_id} has been delivered at time {o.eta}")
            logger.debug("delivered order %d at %d", o.order_id, o.eta)
        # popped latest-first; report earliest-first
        delivered.reverse()
        return delivered

    # ----------------- agent state -----------------
    def currently_delivering(self) -> Optional[Order]:
        """Earliest active order, if the agent has already left base with it."""
        o = self.by_eta.find_min()
        if o is not None and self.t > o.delivery_start_time:
            return o
        return None

    def last_delivered(self) -> Optional[Order]:
        if self._due:
            return self._due[0][2]
        if self._history:
            return self._history[0][2]
        return None

    def orders_between(self, start: int, end: int) -> List[Order]:
        return self.by_eta.between(start, end)

    # ----------------- scheduling -----------------
    def compute_eta(self, order: Order) -> int:
        in_flight = self.currently_delivering()
        ref = self.by_priority.successor_of(order)

        if ref is not None and in_flight is not None and ref.order_id == in_flight.order_id:
            # the in-flight order already left the queue; follow whoever is queued behind it
            ref = self.by_priority.successor_of(in_flight) or in_flight

        if ref is None:
            ref = in_flight

        if ref is None:
            last = self.last_delivered()
            if last is not None and self.t < last.return_time:
                ref = last

        logger.debug("reference order for %d: %s", order.order_id, ref)
        if ref is None:
            return self.t + order.delivery_time
        return ref.return_time + order.delivery_time

    def lower_priority_orders(self, order: Order) -> List[Order]:
        lower = self.by_priority.predecessors_of(order)
        in_flight = self.currently_delivering()
        if in_flight is None:
            return lower
        return [o for o in lower if o.order_id != in_flight.order_id]

    def cascade_eta(self, orders: List[Order], delta: int) -> Dict[int, int]:
        # take all of them out first so a shifted ETA never meets an unshifted one
        for o in orders:
            self.by_eta.remove(o)
        for o in orders:
            o.set_eta(o.eta + delta)
        for o in orders:
            self.by_eta.insert(o)
        return {o.order_id: o.eta for o in orders}

    # ----------------- operations -----------------
    def create_order(self, order_id: int, created_at: int, value: int, delivery_time: int) -> List[str]:
        self.advance_time(created_at)
        out: List[str] = []

        if order_id in self.orders:
            logger.debug("order %d already exists, ignoring create", order_id)
        else:
            o = Order(order_id, created_at, value, delivery_time)
            self.orders[order_id] = o
            self.by_priority.insert(o)

            o.set_eta(self.compute_eta(o))
            logger.debug("created %s at %d", o.describe(), self.t)
            out.append(f"Order {order_id} has been created - ETA: {o.eta}")

            updates = self.cascade_eta(self.lower_priority_orders(o), 2 * delivery_time)
            line = format_updates(updates)
            if line is not None:
                out.append(line)

            # after the cascade: the new ETA may equal an unshifted successor's
            self.by_eta.insert(o)

        out.extend(self.drain_due())
        return out

    def cancel_order(self, order_id: int, current_time: int) -> List[str]:
        self.advance_time(current_time)
        out: List[str] = []

        o = self.orders.get(order_id)
        if not self._can_modify(o):
            out.append(f"Cannot cancel. Order {order_id} has already been delivered.")
        else:
            logger.debug("cancelling order %d at %d", order_id, self.t)
            out.append(f"Order {order_id} has been canceled")
            lower = self.lower_priority_orders(o)
            self._remove_active(o)
            line = format_updates(self.cascade_eta(lower, -2 * o.delivery_time))
            if line is not None:
                out.append(line)

        out.extend(self.drain_due())
        return out

    def update_time(self, order_id: int, current_time: int, new_delivery_time: int) -> List[str]:
        self.advance_time(current_time)
        out: List[str] = []

        o = self.orders.get(order_id)
        if not self._can_modify(o):
            out.append(f"Cannot update. Order {order_id} has already been delivered.")
        else:
            logger.debug("updating order %d delivery time %d -> %d at %d",
                         order_id, o.delivery_time, new_delivery_time, self.t)
            change = new_delivery_time - o.delivery_time
            lower = self.lower_priority_orders(o)

            # departure time stays, arrival moves
            self.by_eta.remove(o)
            start = o.delivery_start_time
            o.delivery_time = new_delivery_time
            o.set_eta(start + new_delivery_time)

            updates = self.cascade_eta(lower, 2 * change)
            self.by_eta.insert(o)
            updates[order_id] = o.eta
            out.append(format_updates(updates))

        out.extend(self.drain_due())
        return out

    def rank_of(self, order_id: int) -> List[str]:
        o = self.orders.get(order_id)
        if o is None:
            raise OrderNotFoundError(order_id)
        rank = len(self.by_eta.predecessors_of(o))
        return [f"Order {order_id} will be delivered after {rank} orders."]

    def describe(self, order_id: int) -> List[str]:
        o = self.orders.get(order_id)
        if o is None:
            raise OrderNotFoundError(order_id)
        return [o.describe()]

    def describe_range(self, start: int, end: int) -> List[str]:
        window = self.orders_between(start, end)
        if not window:
            return [NO_ORDERS_IN_WINDOW]
        return ["[" + ", ".join(str(o.order_id) for o in window) + "]"]

    def finish(self) -> List[str]:
        self.advance_time(END_OF_TIME)
        return self.drain_due()

    # ----------------- helpers -----------------
    def _can_modify(self, o: Optional[Order]) -> bool:
        if o is None or o.eta <= self.t:
            return False
        in_flight = self.currently_delivering()
        return in_flight is None or in_flight.order_id != o.order_id

    def _remove_active(self, o: Order) -> None:
        self.by_priority.remove(o)
        self.by_eta.remove(o)
        del self.orders[o.order_id]

    # ----------------- evaluation -----------------
    def delivered_orders(self) -> List[Order]:
        return sorted((e[2] for e in self._history), key=lambda o: o.eta)

    def metrics(self) -> dict:
        delivered = self.delivered_orders()
        waits = [o.eta - o.created_at for o in delivered]

        return {
            "time": self.t,
            "orders_active": len(self.orders),
            "orders_delivered": len(delivered),
            "avg_wait": (sum(waits) / len(waits)) if waits else None,
            "max_wait": max(waits) if waits else None,
            "last_eta": delivered[-1].eta if delivered else None,
        }
