"""SQLAlchemy-backed CommentStore over the posts / comments / commentmeta tables."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, delete, func, select, update
from sqlalchemy.engine import URL
from sqlalchemy.exc import DataError, DBAPIError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import Mapped, mapped_column

from commentctl.comments.models import (
    DISPLAY_STATUS,
    STATUS_VALUES,
    TRASH_META_STATUS,
    TRASH_META_TIME,
    Comment,
    PostRecord,
    StoreError,
    parse_comment_fields,
)
from commentctl.comments.store import CommentStore, build_count_summary
from commentctl.db import Base, connection_error, create_session_factory, query_error

logger = logging.getLogger(__name__)


class PostORM(Base):
    """ORM model for the posts table (only the columns comments rely on)."""

    __tablename__ = "posts"

    ID: Mapped[int] = mapped_column("ID", Integer, primary_key=True, autoincrement=True)
    post_title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    post_status: Mapped[str] = mapped_column(String(20), nullable=False, default="publish")
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class CommentORM(Base):
    """ORM model for the comments table."""

    __tablename__ = "comments"

    comment_ID: Mapped[int] = mapped_column("comment_ID", Integer, primary_key=True, autoincrement=True)
    comment_post_ID: Mapped[int] = mapped_column("comment_post_ID", Integer, nullable=False, default=0, index=True)
    comment_author: Mapped[str] = mapped_column(Text, nullable=False, default="")
    comment_author_email: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    comment_author_url: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    comment_author_IP: Mapped[str] = mapped_column("comment_author_IP", String(100), nullable=False, default="")
    comment_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    comment_date_gmt: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    comment_content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    comment_karma: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comment_approved: Mapped[str] = mapped_column(String(20), nullable=False, default="1", index=True)
    comment_agent: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    comment_type: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    comment_parent: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class CommentMetaORM(Base):
    """ORM model for the commentmeta table."""

    __tablename__ = "commentmeta"

    meta_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    comment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("comments.comment_ID", ondelete="CASCADE"), nullable=False, index=True
    )
    meta_key: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    meta_value: Mapped[str | None] = mapped_column(Text, nullable=True)


def _orm_to_comment(row: CommentORM) -> Comment:
    return Comment(
        comment_ID=row.comment_ID,
        comment_post_ID=row.comment_post_ID,
        comment_author=row.comment_author,
        comment_author_email=row.comment_author_email,
        comment_author_url=row.comment_author_url,
        comment_author_IP=row.comment_author_IP,
        comment_date=row.comment_date,
        comment_date_gmt=row.comment_date_gmt,
        comment_content=row.comment_content,
        comment_karma=row.comment_karma,
        comment_approved=row.comment_approved,
        comment_agent=row.comment_agent,
        comment_type=row.comment_type,
        comment_parent=row.comment_parent,
        user_id=row.user_id,
    )


class SqlCommentStore(CommentStore):
    """CommentStore over an async SQLAlchemy session factory."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        engine: AsyncEngine | None = None,
    ) -> None:
        super().__init__()
        self._session_factory = session_factory
        self._engine = engine
        self._url: URL | None = engine.url if engine is not None else None

    @classmethod
    def from_engine(cls, engine: AsyncEngine) -> SqlCommentStore:
        """Store owning `engine`; close() disposes it."""
        return cls(create_session_factory(engine), engine=engine)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        """Session reporting failures as commentctl DatabaseErrors.

        Not reaching the server is a connection error; a failing statement is a QueryError.
        """
        async with self._session_factory() as session:
            try:
                await session.connection()
            except (OperationalError, InterfaceError, OSError) as exc:
                raise connection_error(exc, self._url) from exc
            try:
                yield session
            except DBAPIError as exc:
                raise query_error(exc) from exc

    @staticmethod
    async def _refresh_post_count(session: AsyncSession, post_id: int) -> None:
        approved = await session.scalar(
            select(func.count())
            .select_from(CommentORM)
            .where(CommentORM.comment_post_ID == post_id, CommentORM.comment_approved == "1")
        )
        await session.execute(
            update(PostORM).where(PostORM.ID == post_id).values(comment_count=int(approved or 0))
        )

    @staticmethod
    async def _pop_meta(session: AsyncSession, comment_id: int, key: str) -> str | None:
        value = await session.scalar(
            select(CommentMetaORM.meta_value).where(
                CommentMetaORM.comment_id == comment_id, CommentMetaORM.meta_key == key
            )
        )
        await session.execute(
            delete(CommentMetaORM).where(CommentMetaORM.comment_id == comment_id, CommentMetaORM.meta_key == key)
        )
        return value

    async def _change_approved(
        self,
        comment_id: int,
        value: str,
        *,
        remember_previous: bool = False,
        stamp_time: bool = False,
    ) -> bool:
        async with self._session() as session:
            row = await session.get(CommentORM, comment_id)
            if row is None:
                return False
            meta: dict[str, str] = {}
            if remember_previous:
                meta[TRASH_META_STATUS] = row.comment_approved
            if stamp_time:
                meta[TRASH_META_TIME] = str(int(time.time()))
            for key, meta_value in meta.items():
                await self._pop_meta(session, comment_id, key)
                session.add(CommentMetaORM(comment_id=comment_id, meta_key=key, meta_value=meta_value))
            row.comment_approved = value
            await session.flush()
            await self._refresh_post_count(session, row.comment_post_ID)
            await session.commit()
            logger.debug("comment %s status -> %s", comment_id, value)
            return True

    async def _restore_approved(self, comment_id: int) -> bool:
        async with self._session() as session:
            row = await session.get(CommentORM, comment_id)
            if row is None:
                return False
            previous = await self._pop_meta(session, comment_id, TRASH_META_STATUS)
            await self._pop_meta(session, comment_id, TRASH_META_TIME)
            row.comment_approved = previous or "0"
            await session.flush()
            await self._refresh_post_count(session, row.comment_post_ID)
            await session.commit()
            logger.debug("comment %s status restored -> %s", comment_id, row.comment_approved)
            return True

    async def get_post(self, post_id: int) -> PostRecord | None:
        async with self._session() as session:
            row = await session.get(PostORM, post_id)
            if row is None:
                return None
            return PostRecord(
                ID=row.ID,
                post_title=row.post_title,
                post_status=row.post_status,
                comment_count=row.comment_count,
            )

    async def add_post(self, post: PostRecord) -> int:
        async with self._session() as session:
            row = PostORM(
                ID=post.ID or None,
                post_title=post.post_title,
                post_status=post.post_status,
                comment_count=post.comment_count,
            )
            session.add(row)
            await session.commit()
            return row.ID

    async def insert(self, fields: dict[str, str]) -> int | None:
        try:
            comment = parse_comment_fields(fields)
        except (KeyError, ValueError) as exc:
            logger.debug("insert rejected: %s", exc)
            return None
        values = comment.as_dict()
        values.pop("comment_ID")
        async with self._session() as session:
            row = CommentORM(**values)
            session.add(row)
            try:
                await session.flush()
                if row.comment_approved == "1":
                    await self._refresh_post_count(session, row.comment_post_ID)
                await session.commit()
            except (DataError, IntegrityError) as exc:
                await session.rollback()
                logger.debug("insert rejected by database: %s", exc.orig)
                return None
            logger.debug("inserted comment %s", row.comment_ID)
            return row.comment_ID

    async def delete(self, comment_id: int, force: bool = False) -> bool:
        async with self._session() as session:
            row = await session.get(CommentORM, comment_id)
            if row is None:
                return False
            if not force and row.comment_approved not in ("trash", "spam"):
                trash_now = True
            else:
                trash_now = False
                post_id = row.comment_post_ID
                await session.execute(
                    update(CommentORM)
                    .where(CommentORM.comment_parent == comment_id)
                    .values(comment_parent=row.comment_parent)
                )
                await session.execute(delete(CommentMetaORM).where(CommentMetaORM.comment_id == comment_id))
                await session.delete(row)
                await session.flush()
                await self._refresh_post_count(session, post_id)
                await session.commit()
                logger.debug("deleted comment %s", comment_id)
        if trash_now:
            return await self.trash(comment_id)
        return True

    async def trash(self, comment_id: int) -> bool:
        return await self._change_approved(comment_id, "trash", remember_previous=True, stamp_time=True)

    async def untrash(self, comment_id: int) -> bool:
        return await self._restore_approved(comment_id)

    async def spam(self, comment_id: int) -> bool:
        return await self._change_approved(comment_id, "spam", remember_previous=True)

    async def unspam(self, comment_id: int) -> bool:
        return await self._restore_approved(comment_id)

    async def set_status(self, comment_id: int, status: str, notify: bool = False) -> StoreError | None:
        value = STATUS_VALUES.get(status)
        if value is None:
            return StoreError("invalid_status", f"Invalid comment status: {status}")
        if not await self._change_approved(comment_id, value):
            return StoreError("db_update_error", "Could not update comment status")
        if notify:
            await self._notify_status_change(comment_id, status)
        return None

    async def get_comment(self, comment_id: int) -> Comment | None:
        async with self._session() as session:
            row = await session.get(CommentORM, comment_id)
            return _orm_to_comment(row) if row is not None else None

    async def count(self, post_id: int = 0) -> dict[str, int]:
        async with self._session() as session:
            q = select(CommentORM.comment_approved, func.count()).group_by(CommentORM.comment_approved)
            if post_id:
                q = q.where(CommentORM.comment_post_ID == post_id)
            result = await session.execute(q)
            rows = [(str(approved), int(num)) for approved, num in result.all()]
        return build_count_summary(rows)

    async def get_status(self, comment_id: int) -> str | None:
        async with self._session() as session:
            approved = await session.scalar(
                select(CommentORM.comment_approved).where(CommentORM.comment_ID == comment_id)
            )
        if approved is None:
            return None
        return DISPLAY_STATUS.get(approved)

    async def query_recent(self, status: str = "approve", limit: int = 1) -> list[Comment]:
        value = STATUS_VALUES.get(status, status)
        async with self._session() as session:
            result = await session.execute(
                select(CommentORM)
                .where(CommentORM.comment_approved == value)
                .order_by(CommentORM.comment_date_gmt.desc(), CommentORM.comment_ID.desc())
                .limit(limit)
            )
            return [_orm_to_comment(r) for r in result.scalars().all()]
