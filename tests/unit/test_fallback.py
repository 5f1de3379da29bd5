"""Unit tests for the safe-fallback wrapper."""

import asyncio
import logging

import pytest

from learning_analytics.services.fallback import safe_fallback


@pytest.mark.asyncio
async def test_returns_result_when_no_error():
    @safe_fallback(list, "Listing")
    async def listing(source, n):
        return list(range(n))

    assert await listing(object(), 3) == [0, 1, 2]


@pytest.mark.asyncio
async def test_converts_exception_to_default(caplog):
    @safe_fallback(lambda: {"status": "empty"}, "Summary")
    async def summary(source, scope_id, level="course"):
        raise ValueError("bad row")

    with caplog.at_level(logging.ERROR, logger="learning_analytics.services.fallback"):
        result = await summary(object(), "c1", level="class")

    assert result == {"status": "empty"}
    assert "Summary failed ('c1', level='class'): bad row" in caplog.text


@pytest.mark.asyncio
async def test_default_is_fresh_per_call():
    @safe_fallback(list, "Listing")
    async def listing(source):
        raise RuntimeError("down")

    first = await listing(object())
    first.append("x")

    assert await listing(object()) == []


@pytest.mark.asyncio
async def test_cancellation_propagates():
    @safe_fallback(list, "Listing")
    async def listing(source):
        raise asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        await listing(object())


def test_preserves_wrapped_metadata():
    @safe_fallback(list, "Listing")
    async def listing_for_scope(source):
        """Docstring."""
        return []

    assert listing_for_scope.__name__ == "listing_for_scope"
    assert listing_for_scope.__doc__ == "Docstring."
