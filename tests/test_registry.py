"""Tests for handler registration bookkeeping."""

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from eventmanager import (
    EventManager,
    EventManagerSettings,
    EventPriority,
    HandlerRegistry,
)
from tests.test_events_common import AnotherEvent, SampleEvent, TaggedEvent


def noop(event):
    return None


@pytest.fixture
def registry():
    return HandlerRegistry()


def test_ids_are_sequential_and_unique_across_types(registry):
    first = registry.add("a", noop)
    second = registry.add("b", noop)
    third = registry.add("a", noop)

    assert [first, second, third] == ["handler_1", "handler_2", "handler_3"]


def test_custom_id_prefix():
    registry = HandlerRegistry(id_prefix="sub-")
    assert registry.add("a", noop) == "sub-1"


def test_add_keeps_bucket_sorted_by_priority(registry):
    low = registry.add("a", noop, EventPriority.LOWEST)
    high = registry.add("a", noop, EventPriority.HIGH)
    monitor = registry.add("a", noop, EventPriority.MONITOR)

    assert registry.handler_ids("a") == [monitor, high, low]


def test_equal_priorities_keep_registration_order(registry):
    first = registry.add("a", noop, EventPriority.NORMAL)
    early = registry.add("a", noop, EventPriority.HIGHEST)
    second = registry.add("a", noop, EventPriority.NORMAL)
    third = registry.add("a", noop, EventPriority.NORMAL)

    assert registry.handler_ids("a") == [early, first, second, third]


def test_add_accepts_plain_int_priority(registry):
    handler_id = registry.add("a", noop, 2)
    record = registry.snapshot("a")[0]

    assert record.id == handler_id
    assert record.priority is EventPriority.HIGH


def test_remove_drops_empty_bucket(registry):
    handler_id = registry.add("a", noop)

    assert registry.remove(handler_id) is True
    assert registry.has_handlers("a") is False
    assert registry.count("a") == 0
    assert "a" not in registry.event_types()


def test_remove_unknown_id(registry):
    registry.add("a", noop)
    assert registry.remove("handler_999") is False
    assert registry.count("a") == 1


def test_clear_single_and_all(registry):
    registry.add("a", noop)
    registry.add("b", noop)
    registry.add("b", noop)

    registry.clear("missing")
    assert len(registry) == 3

    registry.clear("b")
    assert registry.event_types() == ["a"]

    registry.clear()
    assert len(registry) == 0
    assert registry.event_types() == []


def test_remove_priority_unknown_type_is_noop(registry):
    registry.remove_priority("missing", EventPriority.HIGH)
    assert len(registry) == 0


def test_remove_priority_drops_bucket_when_nothing_survives(registry):
    registry.add("a", noop, EventPriority.LOW)
    registry.add("a", noop, EventPriority.LOW)

    registry.remove_priority("a", EventPriority.LOW)

    assert registry.has_handlers("a") is False
    assert registry.event_types() == []


def test_snapshot_is_a_copy(registry):
    first = registry.add("a", noop)
    snapshot = registry.snapshot("a")

    registry.add("a", noop, EventPriority.MONITOR)
    registry.remove(first)

    assert [record.id for record in snapshot] == [first]
    assert registry.snapshot("missing") == ()


def test_records_are_immutable(registry):
    registry.add("a", noop)
    record = registry.snapshot("a")[0]

    with pytest.raises(AttributeError):
        record.priority = EventPriority.LOW  # type: ignore[misc]


def test_concurrent_registration_from_threads(registry):
    """Ids stay unique when handlers are added from several threads."""

    def add_many(event_type):
        return [registry.add(event_type, noop) for _ in range(200)]

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(add_many, ["a", "b", "a", "c"]))

    ids = [handler_id for batch in results for handler_id in batch]
    assert len(ids) == len(set(ids)) == 800
    assert registry.count("a") == 400
    assert len(registry) == 800


# Bookkeeping through the EventManager facade


def test_unregister_by_id(manager):
    first = manager.register(SampleEvent, noop)
    second = manager.register(SampleEvent, noop)
    third = manager.register(SampleEvent, noop)

    assert manager.unregister(second) is True
    assert manager.get_handler_ids(SampleEvent) == [first, third]
    assert manager.unregister(second) is False
    assert manager.get_handler_count(SampleEvent) == 2


def test_unregister_all_for_one_type(manager):
    manager.register(SampleEvent, noop)
    manager.register(SampleEvent, noop)
    manager.register(AnotherEvent, noop)

    manager.unregister_all(SampleEvent)

    assert manager.get_handler_count(SampleEvent) == 0
    assert manager.has_handlers(SampleEvent) is False
    assert manager.get_handler_count(AnotherEvent) == 1
    assert manager.has_handlers(AnotherEvent) is True


def test_unregister_all_without_type(manager):
    manager.register(SampleEvent, noop)
    manager.register(AnotherEvent, noop)

    manager.unregister_all()

    assert manager.has_handlers(SampleEvent) is False
    assert manager.has_handlers(AnotherEvent) is False
    assert len(manager.registry) == 0


def test_unregister_by_priority(manager):
    high_a = manager.register(SampleEvent, noop, EventPriority.HIGH)
    low = manager.register(SampleEvent, noop, EventPriority.LOW)
    high_b = manager.register(SampleEvent, noop, EventPriority.HIGH)
    monitor = manager.register(SampleEvent, noop, EventPriority.MONITOR)
    normal = manager.register(SampleEvent, noop, EventPriority.NORMAL)
    other = manager.register(AnotherEvent, noop, EventPriority.HIGH)

    manager.unregister_by_priority(SampleEvent, EventPriority.HIGH)

    ids = manager.get_handler_ids(SampleEvent)
    assert ids == [monitor, normal, low]
    assert high_a not in ids and high_b not in ids
    assert manager.get_handler_ids(AnotherEvent) == [other]


def test_register_then_unregister_round_trip(manager):
    handler_id = manager.register(SampleEvent, noop)
    manager.unregister(handler_id)

    assert manager.get_handler_count(SampleEvent) == 0
    assert manager.has_handlers(SampleEvent) is False
    assert manager.registry.event_types() == []


def test_unknown_type_introspection(manager):
    assert manager.get_handler_ids(SampleEvent) == []
    assert manager.has_handlers(SampleEvent) is False
    assert manager.get_handler_count(SampleEvent) == 0


def test_class_and_tag_share_a_bucket(manager):
    by_class = manager.register(TaggedEvent, noop)
    by_tag = manager.register("sample.tagged", noop)

    assert manager.get_handler_ids("sample.tagged") == [by_class, by_tag]
    assert manager.get_handler_count(TaggedEvent) == 2


def test_custom_handler_id_prefix():
    manager = EventManager(EventManagerSettings(handler_id_prefix="listener-"))
    assert manager.register(SampleEvent, noop) == "listener-1"


def test_remove_priority_with_unknown_priority_value(manager):
    handler_id = manager.register(SampleEvent, noop, EventPriority.LOW)

    manager.unregister_by_priority(SampleEvent, 9)

    assert manager.get_handler_ids(SampleEvent) == [handler_id]


def test_remove_logs_remaining_count(registry, caplog):
    first = registry.add("a", noop)
    registry.add("a", noop)

    with caplog.at_level(logging.DEBUG, logger="eventmanager.core.events.registry"):
        assert registry.remove(first) is True

    records = [r for r in caplog.records if r.getMessage() == "Removed event handler"]
    assert len(records) == 1
    assert records[0].handler_id == first
    assert records[0].handler_count == 1
