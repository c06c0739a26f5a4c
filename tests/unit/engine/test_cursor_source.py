"""Unit tests for CursorSource."""

import asyncio

import pytest

from docbackup.engine import CursorSource
from docbackup.errors import CursorExhaustedError, NotInitializedError, UpstreamFailure
from docbackup.models import QuerySpec


def test_next_before_open_raises_not_initialized(source):
    cursor_source = CursorSource(source)

    with pytest.raises(NotInitializedError):
        asyncio.run(cursor_source.next())
    assert source.calls == []


def test_pages_follow_page_size(source):
    cursor_source = CursorSource(source)
    cursor_source.open(QuerySpec(), page_size=2)

    async def read_all():
        pages = []
        while True:
            page = await cursor_source.next()
            pages.append(page)
            if not page.has_more:
                return pages

    pages = asyncio.run(read_all())

    assert [[doc["id"] for doc in page.documents] for page in pages] == [
        ["d1", "d2"],
        ["d3", "d4"],
        ["d5"],
    ]
    assert [page.has_more for page in pages] == [True, True, False]
    assert cursor_source.exhausted


def test_next_after_last_page_raises(source):
    cursor_source = CursorSource(source)
    cursor_source.open(QuerySpec(), page_size=10)

    async def read_twice():
        await cursor_source.next()
        await cursor_source.next()

    with pytest.raises(CursorExhaustedError):
        asyncio.run(read_twice())
    assert source.call_count("fetch") == 1


def test_page_carries_request_charge(make_container, document_factory):
    container = make_container("source", document_factory(1), query_charge=2.5)
    cursor_source = CursorSource(container)
    cursor_source.open(QuerySpec(), page_size=5)

    page = asyncio.run(cursor_source.next())

    assert page.cost == 2.5


def test_empty_result_is_a_single_empty_page(make_container):
    cursor_source = CursorSource(make_container("empty", [], query_charge=1.0))
    cursor_source.open(QuerySpec(), page_size=5)

    page = asyncio.run(cursor_source.next())

    assert page.documents == []
    assert page.has_more is False
    assert page.cost == 1.0


def test_upstream_failure_propagates(make_container, document_factory):
    container = make_container("source", document_factory(2), fail_fetch=True)
    cursor_source = CursorSource(container)
    cursor_source.open(QuerySpec(), page_size=5)

    with pytest.raises(UpstreamFailure):
        asyncio.run(cursor_source.next())


def test_open_rejects_non_positive_page_size(source):
    with pytest.raises(ValueError):
        CursorSource(source).open(QuerySpec(), page_size=0)


def test_query_filter_is_applied(make_container):
    container = make_container(
        "source",
        [{"id": "d1", "pk": "a"}, {"id": "d2", "pk": "b"}, {"id": "d3", "pk": "a"}],
    )
    cursor_source = CursorSource(container)
    cursor_source.open(QuerySpec(filter={"pk": "@pk"}, parameters={"@pk": "a"}), page_size=10)

    page = asyncio.run(cursor_source.next())

    assert [doc["id"] for doc in page.documents] == ["d1", "d3"]
