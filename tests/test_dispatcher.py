import random

import pytest

from simulator.commands import execute, parse_command
from simulator.dispatcher import NO_ORDERS_IN_WINDOW, Dispatcher, OrderNotFoundError, format_updates
from workloads.generate_workload import generate_commands, set_seed


def three_orders():
    """Three orders at t=0, each new one outranking the previous."""
    d = Dispatcher()
    d.create_order(1, 0, 50, 10)
    d.create_order(2, 0, 100, 4)
    d.create_order(3, 0, 150, 3)
    return d


def etas(d):
    return {oid: o.eta for oid, o in d.orders.items()}


def check_consistent(d):
    ids = set(d.orders)
    assert {o.order_id for o in d.by_priority} == ids
    assert {o.order_id for o in d.by_eta} == ids
    assert len(d.by_eta) == len(d.by_priority) == len(ids)
    for o in d.orders.values():
        assert o.eta > d.t
        assert o.delivery_start_time == o.eta - o.delivery_time
        smaller = sum(1 for x in d.orders.values() if x.eta < o.eta)
        assert d.rank_of(o.order_id) == [f"Order {o.order_id} will be delivered after {smaller} orders."]


def test_first_order_on_idle_agent():
    d = Dispatcher()
    assert d.create_order(1, 0, 50, 10) == ["Order 1 has been created - ETA: 10"]
    assert d.describe(1) == ["[1, 0, 50, 10, 10]"]


def test_lower_priority_order_queues_behind():
    d = Dispatcher()
    d.create_order(1, 0, 50, 10)
    # priority 0.6 - 3.5 < 0.3, and order 1 is already on the road
    assert d.create_order(2, 5, 100, 10) == ["Order 2 has been created - ETA: 30"]
    assert etas(d) == {1: 10, 2: 30}


def test_higher_priority_order_shifts_everyone_by_a_round_trip():
    d = Dispatcher()
    d.create_order(1, 0, 50, 10)
    assert d.create_order(2, 0, 100, 4) == [
        "Order 2 has been created - ETA: 4",
        "Updated ETAs: [1: 18]",
    ]
    before = etas(d)
    assert d.create_order(3, 0, 150, 3) == [
        "Order 3 has been created - ETA: 3",
        "Updated ETAs: [2: 10, 1: 24]",
    ]
    after = etas(d)
    for oid, eta in before.items():
        assert after[oid] == eta + 2 * 3
    check_consistent(d)


def test_order_in_flight_is_the_reference_and_is_not_shifted():
    d = Dispatcher()
    d.create_order(1, 0, 50, 10)
    assert d.create_order(2, 2, 500, 5) == ["Order 2 has been created - ETA: 25"]
    assert d.currently_delivering().order_id == 1
    assert etas(d) == {1: 10, 2: 25}


def test_order_below_in_flight_goes_after_queued_orders():
    d = Dispatcher()
    d.create_order(1, 0, 50, 10)
    d.create_order(2, 2, 1000, 5)
    # priority successor of 3 is order 1, which is on the road; order 2 is queued after it
    assert d.create_order(3, 3, 50, 5) == ["Order 3 has been created - ETA: 35"]
    assert etas(d) == {1: 10, 2: 25, 3: 35}
    check_consistent(d)


def test_last_delivered_order_is_reference_until_agent_returns():
    d = Dispatcher()
    d.create_order(1, 0, 50, 10)
    assert d.create_order(2, 15, 50, 5) == [
        "Order 2 has been created - ETA: 25",
        "Order 1 has been delivered at time 10",
    ]
    assert d.last_delivered().order_id == 1


def test_agent_back_at_base_starts_immediately():
    d = Dispatcher()
    d.create_order(1, 0, 50, 10)
    assert d.create_order(2, 22, 50, 5) == [
        "Order 2 has been created - ETA: 27",
        "Order 1 has been delivered at time 10",
    ]


def test_duplicate_create_is_ignored():
    d = Dispatcher()
    d.create_order(1, 0, 50, 10)
    assert d.create_order(1, 1, 500, 3) == []
    assert d.describe(1) == ["[1, 0, 50, 10, 10]"]


def test_cancel_shifts_only_lower_priority_orders():
    d = three_orders()
    assert d.cancel_order(2, 1) == [
        "Order 2 has been canceled",
        "Updated ETAs: [1: 16]",
    ]
    assert etas(d) == {3: 3, 1: 16}
    check_consistent(d)


def test_cancel_lowest_priority_has_no_updates_line():
    d = three_orders()
    assert d.cancel_order(1, 1) == ["Order 1 has been canceled"]
    assert etas(d) == {3: 3, 2: 10}


def test_cancel_in_flight_order_fails():
    d = three_orders()
    assert d.cancel_order(3, 1) == ["Cannot cancel. Order 3 has already been delivered."]
    assert etas(d) == {3: 3, 2: 10, 1: 24}


def test_cancel_delivered_order_fails_and_reports_deliveries():
    d = three_orders()
    assert d.cancel_order(1, 30) == [
        "Cannot cancel. Order 1 has already been delivered.",
        "Order 3 has been delivered at time 3",
        "Order 2 has been delivered at time 10",
        "Order 1 has been delivered at time 24",
    ]
    assert d.orders == {}


def test_cancel_unknown_order_fails():
    d = Dispatcher()
    assert d.cancel_order(42, 0) == ["Cannot cancel. Order 42 has already been delivered."]


def test_update_time_moves_own_eta_and_lower_orders():
    d = three_orders()
    assert d.update_time(2, 1, 6) == ["Updated ETAs: [2: 12, 1: 28]"]
    o = d.orders[2]
    assert o.delivery_time == 6
    assert o.delivery_start_time == 6
    assert etas(d) == {3: 3, 2: 12, 1: 28}
    check_consistent(d)


def test_update_time_shorter_pulls_orders_forward():
    d = three_orders()
    assert d.update_time(2, 1, 2) == ["Updated ETAs: [2: 8, 1: 20]"]
    check_consistent(d)


def test_update_in_flight_order_fails():
    d = three_orders()
    assert d.update_time(3, 1, 5) == ["Cannot update. Order 3 has already been delivered."]


def test_rank_and_describe():
    d = three_orders()
    assert d.rank_of(3) == ["Order 3 will be delivered after 0 orders."]
    assert d.rank_of(1) == ["Order 1 will be delivered after 2 orders."]
    assert d.describe(2) == ["[2, 0, 100, 4, 10]"]


def test_unknown_ids_raise_not_found():
    d = Dispatcher()
    with pytest.raises(OrderNotFoundError):
        d.rank_of(99)
    with pytest.raises(OrderNotFoundError):
        d.describe(99)


def test_describe_range():
    d = three_orders()
    assert d.describe_range(0, 15) == ["[3, 2]"]
    assert d.describe_range(3, 3) == ["[3]"]
    assert d.describe_range(100, 200) == [NO_ORDERS_IN_WINDOW]
    # read-only
    assert d.describe_range(0, 100) == d.describe_range(0, 100) == ["[3, 2, 1]"]


def test_time_never_moves_backwards():
    d = Dispatcher()
    d.advance_time(5)
    d.advance_time(3)
    d.advance_time(5)
    assert d.t == 5


def test_finish_delivers_everything_in_eta_order():
    d = three_orders()
    last_known = etas(d)
    out = d.finish()
    assert out == [
        "Order 3 has been delivered at time 3",
        "Order 2 has been delivered at time 10",
        "Order 1 has been delivered at time 24",
    ]
    assert len(out) == len(last_known)
    assert d.orders == {}
    assert len(d.by_eta) == 0 and len(d.by_priority) == 0
    assert [o.eta for o in d.delivered_orders()] == [3, 10, 24]
    assert d.finish() == []


def test_metrics_after_finish():
    d = three_orders()
    d.finish()
    m = d.metrics()
    assert m["orders_active"] == 0
    assert m["orders_delivered"] == 3
    assert m["avg_wait"] == (3 + 10 + 24) / 3
    assert m["max_wait"] == 24
    assert m["last_eta"] == 24


def test_format_updates_sorts_by_eta():
    assert format_updates({}) is None
    assert format_updates({5: 40, 9: 12}) == "Updated ETAs: [9: 12, 5: 40]"


@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
def test_random_workloads_keep_indices_consistent(seed):
    set_seed(seed)
    lines = generate_commands(n_orders=60, horizon=150, cancel_rate=0.2, update_rate=0.2, query_rate=0.0)
    d = Dispatcher()
    created = 0
    delivered = 0
    for line in lines:
        name, args = parse_command(line)
        out = execute(d, name, args)
        created += sum(1 for x in out if "has been created" in x)
        delivered += sum(1 for x in out if "has been delivered at time" in x)
        if name != "Quit":
            check_consistent(d)

    cancelled = created - delivered
    assert d.orders == {}
    assert len(d.delivered_orders()) == delivered
    assert cancelled >= 0


def test_cascade_survives_colliding_etas():
    # equal durations pack ETAs exactly one round trip apart
    d = Dispatcher()
    rng = random.Random(0)
    for oid in range(1, 30):
        d.create_order(oid, 0, rng.randint(0, 2000), 1)
        check_consistent(d)
    assert len(d.by_eta) == 29
