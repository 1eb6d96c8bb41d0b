"""Create posts, comments and commentmeta tables.

Revision ID: 001_comment_tables
Revises:
Create Date: 2026-10-16

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001_comment_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "posts",
        sa.Column("ID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("post_title", sa.Text(), nullable=False, server_default=""),
        sa.Column("post_status", sa.String(20), nullable=False, server_default="publish"),
        sa.Column("comment_count", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_table(
        "comments",
        sa.Column("comment_ID", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("comment_post_ID", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("comment_author", sa.Text(), nullable=False, server_default=""),
        sa.Column("comment_author_email", sa.String(100), nullable=False, server_default=""),
        sa.Column("comment_author_url", sa.String(200), nullable=False, server_default=""),
        sa.Column("comment_author_IP", sa.String(100), nullable=False, server_default=""),
        sa.Column("comment_date", sa.DateTime(), nullable=False),
        sa.Column("comment_date_gmt", sa.DateTime(), nullable=False),
        sa.Column("comment_content", sa.Text(), nullable=False, server_default=""),
        sa.Column("comment_karma", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("comment_approved", sa.String(20), nullable=False, server_default="1"),
        sa.Column("comment_agent", sa.String(255), nullable=False, server_default=""),
        sa.Column("comment_type", sa.String(20), nullable=False, server_default=""),
        sa.Column("comment_parent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("user_id", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_comments_comment_post_ID", "comments", ["comment_post_ID"])
    op.create_index("ix_comments_comment_date_gmt", "comments", ["comment_date_gmt"])
    op.create_index("ix_comments_comment_approved", "comments", ["comment_approved"])
    op.create_index("ix_comments_comment_parent", "comments", ["comment_parent"])
    op.create_table(
        "commentmeta",
        sa.Column("meta_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "comment_id",
            sa.Integer(),
            sa.ForeignKey("comments.comment_ID", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("meta_key", sa.String(255), nullable=False),
        sa.Column("meta_value", sa.Text(), nullable=True),
    )
    op.create_index("ix_commentmeta_comment_id", "commentmeta", ["comment_id"])
    op.create_index("ix_commentmeta_meta_key", "commentmeta", ["meta_key"])


def downgrade() -> None:
    op.drop_index("ix_commentmeta_meta_key", table_name="commentmeta")
    op.drop_index("ix_commentmeta_comment_id", table_name="commentmeta")
    op.drop_table("commentmeta")
    op.drop_index("ix_comments_comment_parent", table_name="comments")
    op.drop_index("ix_comments_comment_approved", table_name="comments")
    op.drop_index("ix_comments_comment_date_gmt", table_name="comments")
    op.drop_index("ix_comments_comment_post_ID", table_name="comments")
    op.drop_table("comments")
    op.drop_table("posts")
