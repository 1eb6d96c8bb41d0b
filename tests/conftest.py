"""Shared test fixtures for commentctl."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import AsyncIterator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from commentctl.comments.models import PostRecord
from commentctl.comments.store import CommentStore
from commentctl.comments.store_inmemory import InMemoryCommentStore
from commentctl.comments.store_sql import SqlCommentStore
from commentctl.db import Base

BASE_DATE = datetime(2026, 10, 1, 12, 0, 0)


def _comment_fields(post_id: int = 15, minutes: int = 0, **overrides: str) -> dict[str, str]:
    """Insert field map; `minutes` shifts the comment date past BASE_DATE."""
    stamp = (BASE_DATE + timedelta(minutes=minutes)).isoformat(sep=" ")
    fields = {
        "comment_post_ID": str(post_id),
        "comment_author": "commentctl",
        "comment_author_email": "cli@example.com",
        "comment_author_url": "https://example.com",
        "comment_content": "hello blog",
        "comment_date": stamp,
        "comment_date_gmt": stamp,
    }
    fields.update(overrides)
    return fields


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep host COMMENTCTL_* settings and a stray commentctl.yaml out of tests."""
    for key in ("COMMENTCTL_DATABASE_URL", "COMMENTCTL_CONFIG"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def memory_store() -> InMemoryCommentStore:
    return InMemoryCommentStore(posts=[PostRecord(ID=15, post_title="Hello"), PostRecord(ID=42, post_title="Other")])


@pytest_asyncio.fixture(params=["memory", "sql"])
async def store(request: pytest.FixtureRequest) -> AsyncIterator[CommentStore]:
    """Both store backends, seeded with posts 15 and 42."""
    if request.param == "memory":
        yield InMemoryCommentStore(posts=[PostRecord(ID=15, post_title="Hello"), PostRecord(ID=42, post_title="Other")])
        return
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    sql_store = SqlCommentStore.from_engine(engine)
    await sql_store.add_post(PostRecord(ID=15, post_title="Hello"))
    await sql_store.add_post(PostRecord(ID=42, post_title="Other"))
    yield sql_store
    await sql_store.close()


@pytest.fixture
def make_fields():
    return _comment_fields
