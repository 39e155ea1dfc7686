"""
Blog API Backend — Post Store (Persistence Layer)
===================================================

What:  Every database operation on blog posts.
How:   Stateless methods that receive an AsyncSession per call. Mutations
       commit before returning; the session dependency rolls back on error.
Who:   Called by the posts route handlers and by the test harness for
       seeding and teardown.

Error Handling Strategy:
    - Lookups return None for a missing id; the caller decides whether that
      ends the request.
    - update_by_id / delete_by_id raise NotFoundError for a missing id.
    - Any other exception from SQLAlchemy or the driver is logged and
      wrapped in StorageError (→ 500). Nothing is retried.
"""

import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy import asc, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from blog_api.exceptions import BlogAPIError, NotFoundError, StorageError
from blog_api.models.post import BlogPost

logger = logging.getLogger(__name__)

# Fields a patch may touch; id and created are immutable
UPDATABLE_FIELDS = ("author", "title", "content")

PostId = Union[uuid.UUID, str]


def parse_post_id(post_id: PostId) -> Optional[uuid.UUID]:
    """
    Coerce a post id to UUID; malformed ids map to None (no such post).

    Why: ids arrive as path strings in any letter case; comparing parsed
    UUIDs treats "ABC..." and "abc..." as the same post.
    """
    if isinstance(post_id, uuid.UUID):
        return post_id
    try:
        return uuid.UUID(str(post_id))
    except ValueError:
        return None


class PostStore:
    """
    Persistence operations for BlogPost records.

    Responsibilities:
        - insert_many(): bulk create (seeding)
        - find_by_id() / find_one(): single lookups
        - list_all() / count(): collection reads
        - create() / update_by_id() / delete_by_id(): mutations
        - delete_all(): wipe the collection (test teardown)
    """

    async def insert_many(
        self, db: AsyncSession, records: Iterable[Dict[str, Any]]
    ) -> List[BlogPost]:
        """
        Bulk-create posts.

        Args:
            db: Async database session
            records: Dicts with author ({"firstName", "lastName"}), title, content

        Returns:
            The created posts with id and created assigned.
        """
        try:
            posts = [self._new_post(record) for record in records]
            db.add_all(posts)
            await db.flush()
            await db.commit()
            logger.info("Inserted %d posts", len(posts))
            return posts
        except Exception as e:
            raise self._storage_error("insert_many", e)

    async def find_by_id(self, db: AsyncSession, post_id: PostId) -> Optional[BlogPost]:
        """Return the post with the given id, or None."""
        key = parse_post_id(post_id)
        if key is None:
            return None
        try:
            result = await db.execute(select(BlogPost).where(BlogPost.id == key))
            return result.scalar_one_or_none()
        except Exception as e:
            raise self._storage_error("find_by_id", e, post_id=str(post_id))

    async def find_one(self, db: AsyncSession) -> Optional[BlogPost]:
        """Return an arbitrary existing post, or None when the store is empty."""
        try:
            result = await db.execute(select(BlogPost).limit(1))
            return result.scalars().first()
        except Exception as e:
            raise self._storage_error("find_one", e)

    async def list_all(self, db: AsyncSession) -> List[BlogPost]:
        """
        Return every post, oldest first.

        Query plan:
            SELECT * FROM blog_posts ORDER BY created ASC, id ASC
            → Uses idx_blog_posts_created
        """
        try:
            result = await db.execute(
                select(BlogPost).order_by(asc(BlogPost.created), asc(BlogPost.id))
            )
            return list(result.scalars().all())
        except Exception as e:
            raise self._storage_error("list_all", e)

    async def count(self, db: AsyncSession) -> int:
        """Return the total number of posts."""
        try:
            result = await db.execute(select(func.count(BlogPost.id)))
            return result.scalar() or 0
        except Exception as e:
            raise self._storage_error("count", e)

    async def create(self, db: AsyncSession, data: Dict[str, Any]) -> BlogPost:
        """
        Insert one post.

        Args:
            db: Async database session
            data: author ({"firstName", "lastName"}), title, content

        Returns:
            The created post with generated id and created timestamp.
        """
        try:
            post = self._new_post(data)
            db.add(post)
            await db.flush()  # Assigns id and created
            await db.commit()
            logger.info("Post created: %s", post.id)
            return post
        except Exception as e:
            raise self._storage_error("create", e)

    async def update_by_id(
        self, db: AsyncSession, post_id: PostId, patch: Dict[str, Any]
    ) -> BlogPost:
        """
        Apply the supplied fields of `patch` to an existing post.

        Only author, title and content are applied; any other key is ignored.
        Omitted fields keep their stored values.

        Raises:
            NotFoundError: No post with that id, or it was deleted
            between the read and the write (→ 404)
            StorageError: Query execution failed (→ 500)
        """
        post = await self.find_by_id(db, post_id)
        if post is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))

        try:
            changed = []
            for field in UPDATABLE_FIELDS:
                if field in patch:
                    setattr(post, field, patch[field])
                    changed.append(field)
            await db.flush()
            await db.commit()
            logger.info("Post %s updated: %s", post.id, ", ".join(changed) or "no fields")
            return post
        except StaleDataError:
            # UPDATE matched no row: deleted after the read above
            logger.info("Post %s deleted before its update was applied", post_id)
            raise NotFoundError(resource="post", resource_id=str(post_id))
        except Exception as e:
            raise self._storage_error("update_by_id", e, post_id=str(post_id))

    async def delete_by_id(self, db: AsyncSession, post_id: PostId) -> None:
        """
        Permanently remove a post.

        Raises:
            NotFoundError: No post with that id, including one already deleted
            StorageError: Query execution failed
        """
        key = parse_post_id(post_id)
        if key is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))
        try:
            result = await db.execute(delete(BlogPost).where(BlogPost.id == key))
            deleted = result.rowcount
            if deleted:
                await db.commit()
        except Exception as e:
            raise self._storage_error("delete_by_id", e, post_id=str(post_id))

        if deleted == 0:
            raise NotFoundError(resource="post", resource_id=str(post_id))
        logger.info("Post deleted: %s", key)

    async def delete_all(self, db: AsyncSession) -> int:
        """Remove every post. Returns the number of rows deleted."""
        try:
            result = await db.execute(delete(BlogPost))
            deleted = result.rowcount
            await db.commit()
            logger.warning("Deleted all posts (%d rows)", deleted)
            return deleted
        except Exception as e:
            raise self._storage_error("delete_all", e)

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _new_post(data: Dict[str, Any]) -> BlogPost:
        return BlogPost(
            author=data["author"],
            title=data["title"],
            content=data.get("content", ""),
        )

    @staticmethod
    def _storage_error(operation: str, exc: Exception, **context: Any) -> BlogAPIError:
        if isinstance(exc, BlogAPIError):
            return exc
        logger.error("Database error in %s: %s", operation, str(exc), exc_info=True)
        return StorageError(
            context={"operation": operation, "error_type": type(exc).__name__, **context},
        )


# Stateless; one shared instance
post_store = PostStore()
