"""
Blog API Backend — Pydantic Request/Response Schemas
======================================================

What:  Pydantic models defining the wire contract of the posts resource.
How:   FastAPI validates request bodies against these models, serializes
       responses through them, and generates the OpenAPI docs from them.
Who:   Used by route handlers (input/output) and the post store (input).

Wire vs storage:
    The author is stored as {"firstName", "lastName"} but rendered to clients
    as one "First Last" string. Inputs accept either shape.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from blog_api.models.post import BlogPost


def _require_text(value: Optional[str], field: str) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError(f"`{field}` must not be empty")
    return value


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class AuthorName(BaseModel):
    """
    Structured author name.

    Accepts {"firstName": "Mark", "lastName": "Twain"} or the string
    "Mark Twain", which is split on the first run of whitespace.
    """
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")

    @model_validator(mode="before")
    @classmethod
    def parse_full_name(cls, data: Any) -> Any:
        if isinstance(data, str):
            parts = data.strip().split(None, 1)
            return {
                "firstName": parts[0] if parts else "",
                "lastName": parts[1] if len(parts) > 1 else "",
            }
        return data

    @model_validator(mode="after")
    def require_a_name(self) -> "AuthorName":
        if not (self.first_name.strip() or self.last_name.strip()):
            raise ValueError("`author` must include a first or last name")
        return self

    def to_document(self) -> Dict[str, str]:
        """Storage shape of the author."""
        return {
            "firstName": self.first_name.strip(),
            "lastName": self.last_name.strip(),
        }


class PostCreate(BaseModel):
    """
    Body of POST /posts.

    All three fields are required and non-empty. Unknown fields (e.g. a
    client-supplied `id` or `created`) are ignored; the store assigns both.
    """
    author: AuthorName
    title: str
    content: str

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v: str, info) -> str:
        return _require_text(v, info.field_name)

    def to_document(self) -> Dict[str, Any]:
        return {
            "author": self.author.to_document(),
            "title": self.title,
            "content": self.content,
        }


class PostUpdate(BaseModel):
    """
    Body of PUT /posts/{id}.

    Every field is optional; only the supplied ones are applied. `id`, if
    present, must match the path id (checked by the route handler).
    """
    id: Optional[str] = None
    author: Optional[AuthorName] = None
    title: Optional[str] = None
    content: Optional[str] = None

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v: Optional[str], info) -> Optional[str]:
        return _require_text(v, info.field_name)

    def to_patch(self) -> Dict[str, Any]:
        """The updatable fields that were supplied, in storage shape."""
        patch: Dict[str, Any] = {}
        if self.author is not None:
            patch["author"] = self.author.to_document()
        if self.title is not None:
            patch["title"] = self.title
        if self.content is not None:
            patch["content"] = self.content
        return patch


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PostResponse(BaseModel):
    """
    Serialized blog post: {id, author, title, content, created}.

    `author` is the formatted "First Last" string; `created` is ISO-8601 UTC.
    """
    id: str = Field(description="Unique post identifier (UUID)")
    author: str = Field(description='Author rendered as "First Last"')
    title: str
    content: str
    created: datetime = Field(description="When the post was created (UTC ISO 8601)")

    @classmethod
    def from_post(cls, post: BlogPost) -> "PostResponse":
        created = post.created
        # SQLite hands back naive datetimes; every stored value is UTC
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return cls(
            id=str(post.id),
            author=post.author_name,
            title=post.title,
            content=post.content,
            created=created,
        )


class PostListResponse(BaseModel):
    """Response of GET /posts."""
    entries: List[PostResponse]


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "post with ID '...' was not found",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
