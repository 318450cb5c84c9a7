"""Tests for the in-memory document store."""

import pytest

from src.store import DocumentStore, InMemoryDocumentStore, matches


class TestInMemoryDocumentStore:
    """Tests for InMemoryDocumentStore."""

    def test_satisfies_protocol(self, store: InMemoryDocumentStore) -> None:
        assert isinstance(store, DocumentStore)

    @pytest.mark.asyncio
    async def test_put_get_delete(self, store: InMemoryDocumentStore) -> None:
        await store.put("comments", "c1", {"parent_id": "p", "content": "hi"})

        assert await store.get("comments", "c1") == {"parent_id": "p", "content": "hi"}
        await store.delete("comments", "c1")
        assert await store.get("comments", "c1") is None

    @pytest.mark.asyncio
    async def test_delete_missing_is_noop(self, store: InMemoryDocumentStore) -> None:
        await store.delete("comments", "nope")
        assert store.count("comments") == 0

    @pytest.mark.asyncio
    async def test_collections_are_separate(self, store: InMemoryDocumentStore) -> None:
        await store.put("comments", "x", {"parent_id": "p"})
        assert await store.get("reactions", "x") is None

    @pytest.mark.asyncio
    async def test_query_filters_by_equality(
        self, store: InMemoryDocumentStore
    ) -> None:
        await store.put("comments", "c1", {"parent_id": "p1", "author_id": "a"})
        await store.put("comments", "c2", {"parent_id": "p1", "author_id": "b"})
        await store.put("comments", "c3", {"parent_id": "p2", "author_id": "a"})

        by_parent = await store.query("comments", {"parent_id": "p1"})
        both = await store.query("comments", {"parent_id": "p1", "author_id": "a"})
        everything = await store.query("comments", {})

        assert len(by_parent) == 2
        assert both == [{"parent_id": "p1", "author_id": "a"}]
        assert len(everything) == 3

    @pytest.mark.asyncio
    async def test_records_are_copied(self, store: InMemoryDocumentStore) -> None:
        record = {"parent_id": "p", "tags": ["a"]}
        await store.put("comments", "c1", record)
        record["tags"].append("mutated")

        fetched = await store.get("comments", "c1")
        fetched["tags"].append("also-mutated")

        assert (await store.get("comments", "c1"))["tags"] == ["a"]


def test_matches_requires_every_filter() -> None:
    assert matches({"a": 1}, {}) is True
    assert matches({"a": 1}, {"a": 1}) is True
    assert matches({"a": 1}, {"b": None}) is True
    assert matches({"a": 1}, {"a": 2}) is False
