"""
Unit tests for the outbound message registry used by /clear.
"""
import pytest

from app.core.message_registry import MessageRegistry


def test_bounds_must_be_positive():
    with pytest.raises(ValueError):
        MessageRegistry(max_per_chat=0, max_chats=1)


def test_per_chat_cap_keeps_newest():
    registry = MessageRegistry(max_per_chat=3, max_chats=10)
    for message_id in (1, 2, 3, 4, 5):
        registry.track(10, message_id)
    assert registry.owned_ids(10) == [3, 4, 5]


def test_least_recent_chat_evicted():
    registry = MessageRegistry(max_per_chat=3, max_chats=2)
    registry.track(1, 100)
    registry.track(2, 200)
    registry.track(1, 101)  # чат 1 снова свежий
    registry.track(3, 300)
    assert len(registry) == 2
    assert registry.owned_ids(2) == []
    assert registry.owned_ids(1) == [100, 101]


def test_duplicates_and_none_ignored():
    registry = MessageRegistry(max_per_chat=5, max_chats=5)
    registry.track(1, 7)
    registry.track(1, 7)
    registry.track(1, None)
    assert registry.owned_ids(1) == [7]


def test_pop_all_and_forget():
    registry = MessageRegistry(max_per_chat=5, max_chats=5)
    for message_id in (5, 9, 7):
        registry.track("42", message_id)
    registry.forget(42, 9)
    assert registry.pop_all(42) == [7, 5]
    assert registry.pop_all(42) == []
    assert len(registry) == 0
