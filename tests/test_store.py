"""Tests for the value store and the update queue."""

import pytest

from dagflow._engine import UpdateBatch, UpdateQueue, ValueStore
from dagflow._equality import equal, same_value


class TestValueStore:
    def test_first_write_is_a_change(self) -> None:
        store = ValueStore(same_value)
        assert store.update("x", None)
        assert store.changed("x")
        assert "x" in store

    def test_equal_value_is_not_a_change(self) -> None:
        store = ValueStore(same_value)
        store.update("x", 1)
        store.reset_changed()

        assert not store.update("x", 1)
        assert not store.changed("x")

    def test_unequal_value_overwrites(self) -> None:
        store = ValueStore(same_value)
        store.update("x", 1)
        assert store.update("x", 2)
        assert store.get("x") == 2

    def test_equal_value_keeps_cached_object(self) -> None:
        store = ValueStore(equal)
        first = [1, 2]
        store.update("items", first)
        store.update("items", [1, 2])
        assert store.get("items") is first

    def test_get_missing_returns_none(self) -> None:
        store = ValueStore(same_value)
        assert store.get("missing") is None
        assert store.gather(["missing", "other"]) == (None, None)

    def test_gather_in_order(self) -> None:
        store = ValueStore(same_value)
        store.update("a", 1)
        store.update("b", 2)
        assert store.gather(["b", "a"]) == (2, 1)

    def test_changed_flags(self) -> None:
        store = ValueStore(same_value)
        store.update("a", 1)
        store.mark_unchanged("b")

        assert store.any_changed(["a", "b"])
        assert not store.any_changed(["b", "c"])

        store.reset_changed()
        assert not store.any_changed(["a"])

    def test_mark_unchanged_keeps_recorded_change(self) -> None:
        store = ValueStore(same_value)
        store.update("a", 1)
        store.mark_unchanged("a")

        assert store.changed("a")

    def test_values_view_is_live_and_read_only(self) -> None:
        store = ValueStore(same_value)
        view = store.values
        store.update("a", 1)

        assert dict(view) == {"a": 1}
        assert len(store) == 1
        with pytest.raises(TypeError):
            view["a"] = 2  # type: ignore[index]


class TestUpdateQueue:
    def test_fifo_order(self) -> None:
        queue = UpdateQueue()
        queue.push(UpdateBatch.of({"a": 1}))
        queue.push(UpdateBatch.of({"b": 2}))

        assert len(queue) == 2
        assert queue.pop().names == ("a",)
        assert queue.pop().names == ("b",)
        assert not queue

    def test_pop_empty(self) -> None:
        with pytest.raises(IndexError):
            UpdateQueue().pop()

    def test_push_while_draining(self) -> None:
        queue = UpdateQueue()
        queue.push(UpdateBatch.of({"n": 0}))
        seen = []
        while queue:
            batch = queue.pop()
            seen.append(batch.values["n"])
            if batch.values["n"] < 3:
                queue.push(UpdateBatch.of({"n": batch.values["n"] + 1}))
        assert seen == [0, 1, 2, 3]

    def test_clear(self) -> None:
        queue = UpdateQueue()
        queue.push(UpdateBatch.of({"a": 1}))
        queue.push(UpdateBatch.of({"b": 2}))

        discarded = queue.clear()

        assert [batch.names for batch in discarded] == [("a",), ("b",)]
        assert len(queue) == 0


class TestUpdateBatch:
    def test_snapshot(self) -> None:
        update = {"a": 1}
        batch = UpdateBatch.of(update)
        update["a"] = 2
        assert batch.values["a"] == 1

    def test_empty(self) -> None:
        assert not UpdateBatch.of(None)
        assert not UpdateBatch.of({})
        assert len(UpdateBatch.of({"a": 1, "b": 2})) == 2
