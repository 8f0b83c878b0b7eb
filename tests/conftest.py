"""Shared fakes for the compile pipeline tests."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest


class FakeExampleStore:
    """In-memory example store with optional per-id latency."""

    def __init__(
        self,
        records: dict[int, dict[str, Any]] | None = None,
        delays: dict[int, float] | None = None,
    ) -> None:
        self.records = records or {}
        self.delays = delays or {}
        self.calls: list[int] = []

    async def get_by_id(self, example_id: int) -> dict[str, Any] | None:
        self.calls.append(example_id)
        await asyncio.sleep(self.delays.get(example_id, 0))
        return self.records.get(example_id)


class FakeSocialStore:
    """In-memory social metadata store with optional per-id latency."""

    def __init__(
        self,
        metadata: dict[str, Any] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.metadata = metadata or {}
        self.delays = delays or {}
        self.calls: list[str] = []

    async def get_metadata_by_id(self, post_id: str) -> Any:
        self.calls.append(post_id)
        await asyncio.sleep(self.delays.get(post_id, 0))
        return self.metadata.get(post_id, {"id": post_id})


@pytest.fixture()
def example_records() -> dict[int, dict[str, Any]]:
    return {
        1: {"id": 1, "name": "Acme Blog"},
        2: {"id": 2, "name": "Field Notes"},
        3: {"id": 3, "name": "Lab Journal"},
    }


@pytest.fixture()
def examples(example_records: dict[int, dict[str, Any]]) -> FakeExampleStore:
    return FakeExampleStore(example_records)


@pytest.fixture()
def social() -> FakeSocialStore:
    return FakeSocialStore({"123456": {"text": "hello world", "author": "user"}})
