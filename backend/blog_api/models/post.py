"""
Blog API Backend — BlogPost SQLAlchemy Model
==============================================

What:  ORM model representing the `blog_posts` table.
How:   Inherits from SQLAlchemy's DeclarativeBase; `create_tables()` reads
       the shared metadata to bootstrap the schema.
Who:   Used by PostStore for every persistence operation.

Table Design:
    - UUID primary key, generated in Python at insert time
    - author: JSON document {"firstName": ..., "lastName": ...}
      (JSONB on PostgreSQL, JSON text elsewhere)
    - created: UTC with timezone, set once at insert, never updated
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import JSON, DateTime, Index, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from blog_api.database import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BlogPost(Base):
    """
    A single blog entry.

    Lifecycle:
        1. Created by POST /posts or PostStore.insert_many (id, created assigned)
        2. Read by GET /posts and GET /posts/{id}
        3. Partially updated by PUT /posts/{id} (author, title, content only)
        4. Removed by DELETE /posts/{id}
    """

    __tablename__ = "blog_posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # {"firstName": str, "lastName": str}
    author: Mapped[Dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
    )

    # Text, not VARCHAR(n): titles have no length cap at the API
    title: Mapped[str] = mapped_column(Text, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    __table_args__ = (
        Index("idx_blog_posts_created", "created"),
    )

    @property
    def author_name(self) -> str:
        """The author rendered as a single "First Last" string."""
        author = self.author or {}
        parts = (author.get("firstName") or "", author.get("lastName") or "")
        return " ".join(part.strip() for part in parts if part and part.strip())

    def __repr__(self) -> str:
        return f"<BlogPost(id={self.id}, title='{self.title}', created='{self.created}')>"
