import pytest
from prometheus_client import REGISTRY

from mycelium import db
from mycelium.reconciler import attempt_order_key, reconcile
from mycelium.routing import InMemoryRoutingTable, LiveRegistration


def _names(table):
    return {r.name for r in table.registrations()}


def _churn_gauge():
    return REGISTRY.get_sample_value("mycelium_proxy_churn")


def test_replaces_stale_server(server):
    table = InMemoryRoutingTable(servers={"a": "1.1.1.1"}, attempt_order=["a"])

    churn = reconcile([server("b", "2.2.2.2", priority=1)], table)

    assert churn == 2
    assert _names(table) == {"b"}
    assert table.get("b") == LiveRegistration(name="b", address="2.2.2.2", port=25565)
    assert table.attempt_order() == ["b"]
    assert _churn_gauge() == 2


def test_forced_hosts_group_in_encounter_order(server):
    table = InMemoryRoutingTable()
    desired = [
        server("lobby", "1.2.3.4", host="play.example.com", priority=1),
        server("survival", "5.6.7.8", host="play.example.com", priority=2),
    ]

    reconcile(desired, table)

    assert table.forced_hosts() == {"play.example.com": ["lobby", "survival"]}
    assert table.attempt_order() == ["lobby", "survival"]


def test_duplicate_name_last_entry_wins(server):
    table = InMemoryRoutingTable()

    churn = reconcile([server("x", "1.1.1.1"), server("x", "9.9.9.9")], table)

    assert churn == 1
    assert table.get("x").address == "9.9.9.9"
    assert table.attempt_order() == ["x"]


def test_second_identical_sync_is_a_no_op(server):
    table = InMemoryRoutingTable()
    desired = [
        server("lobby", host="play.example.com", priority=2),
        server("survival", host="survival.example.com"),
        server("creative", priority=1),
    ]

    assert reconcile(desired, table) == 3
    before = (table.registrations(), table.attempt_order(), table.forced_hosts())

    assert reconcile(desired, table) == 0
    assert (table.registrations(), table.attempt_order(), table.forced_hosts()) == before
    assert _churn_gauge() == 0


@pytest.mark.parametrize(
    "registered,desired_names",
    [
        ({}, []),
        ({}, ["a", "b"]),
        ({"a": "1.1.1.1", "b": "1.1.1.2"}, []),
        ({"a": "1.1.1.1", "b": "1.1.1.2"}, ["b", "c"]),
        ({"a": "1.1.1.1"}, ["a"]),
    ],
)
def test_registered_set_matches_desired_and_churn_counts_symmetric_difference(server, registered, desired_names):
    table = InMemoryRoutingTable(servers=registered, attempt_order=list(registered))

    churn = reconcile([server(n) for n in desired_names], table)

    assert _names(table) == set(desired_names)
    assert sorted(table.attempt_order()) == sorted(desired_names)
    assert churn == len(set(registered) ^ set(desired_names))


def test_attempt_order_sorts_by_priority_with_unprioritized_last(server):
    table = InMemoryRoutingTable()
    desired = [
        server("none-1"),
        server("p5", priority=5),
        server("none-2"),
        server("p1", priority=1),
        server("p5-again", priority=5),
        server("neg", priority=-3),
    ]

    reconcile(desired, table)

    assert table.attempt_order() == ["neg", "p1", "p5", "p5-again", "none-1", "none-2"]


def test_attempt_order_key_is_a_total_order(server):
    a, b, c = server("a", priority=2), server("b", priority=10), server("c")
    assert attempt_order_key(a) < attempt_order_key(b) < attempt_order_key(c)
    assert not attempt_order_key(b) < attempt_order_key(a)


def test_attempt_order_drops_names_not_in_desired(server):
    table = InMemoryRoutingTable(servers={"keep": "1.1.1.1"}, attempt_order=["manual", "keep", "ghost"])

    reconcile([server("keep", "1.1.1.1")], table)

    assert table.attempt_order() == ["keep"]


def test_forced_hosts_partition_only_servers_with_a_host(server):
    table = InMemoryRoutingTable(forced_hosts={"old.example.com": ["gone"]})
    desired = [
        server("a", host="one.example.com"),
        server("b"),
        server("c", host="two.example.com"),
        server("d", host=""),
        server("e", host="one.example.com"),
    ]

    reconcile(desired, table)

    hosts = table.forced_hosts()
    assert hosts == {"one.example.com": ["a", "e"], "two.example.com": ["c"]}
    bucketed = [n for names in hosts.values() for n in names]
    assert sorted(bucketed) == ["a", "c", "e"]


def test_existing_registration_keeps_its_address(server):
    table = InMemoryRoutingTable(servers={"lobby": "1.1.1.1"})

    churn = reconcile([server("lobby", "2.2.2.2")], table)

    assert churn == 0
    assert table.get("lobby").address == "1.1.1.1"


def test_adds_and_removals_are_journaled(server):
    table = InMemoryRoutingTable(servers={"old": "1.1.1.1"})

    reconcile([server("new", "2.2.2.2")], table)

    messages = [e["message"] for e in db.latest_events(10)]
    assert "removed server old" in messages
    assert "added server new (2.2.2.2:25565)" in messages
