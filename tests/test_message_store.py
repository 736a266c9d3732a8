from datetime import datetime, timezone

import pytest

from chat_gateway.models.models import ChatMessage, MessageAuthor
from chat_gateway.services.message_store import MessageStore

AUTHOR = MessageAuthor(id="a1", name="Alice", email="alice@example.com")


def _message(n: int) -> ChatMessage:
    return ChatMessage(
        id=f"m{n}",
        text=f"message {n}",
        user=AUTHOR,
        room="general",
        timestamp=datetime.now(timezone.utc),
    )


def test_store_keeps_only_most_recent_entries():
    store = MessageStore(limit=100)
    for n in range(250):
        store.append(_message(n))
        assert len(store) <= 100

    ids = [m.id for m in store.recent()]
    assert ids == [f"m{n}" for n in range(150, 250)]


def test_store_below_limit_keeps_everything_in_order():
    store = MessageStore(limit=5)
    for n in range(3):
        store.append(_message(n))

    assert [m.id for m in store.recent()] == ["m0", "m1", "m2"]


def test_recent_is_a_snapshot():
    store = MessageStore(limit=3)
    store.append(_message(1))
    snapshot = store.recent()

    store.append(_message(2))

    assert isinstance(snapshot, tuple)
    assert [m.id for m in snapshot] == ["m1"]


def test_clear_empties_store_and_reports_count():
    store = MessageStore()
    for n in range(7):
        store.append(_message(n))

    assert store.clear() == 7
    assert len(store) == 0
    assert store.recent() == ()


def test_default_limit_is_one_hundred():
    assert MessageStore().limit == 100


@pytest.mark.parametrize("limit", [0, -5])
def test_non_positive_limit_rejected(limit):
    with pytest.raises(ValueError):
        MessageStore(limit=limit)
