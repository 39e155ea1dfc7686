"""
Blog API Backend — Schema and Serialization Tests
===================================================

What:  Wire ↔ storage translation: author parsing, patches, response shape.
"""

import uuid
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from blog_api.models.post import BlogPost
from blog_api.schemas.post import AuthorName, PostCreate, PostResponse, PostUpdate


class TestAuthorName:

    def test_parses_structured_author(self):
        author = AuthorName.model_validate({"firstName": "Mark", "lastName": "Twain"})

        assert author.to_document() == {"firstName": "Mark", "lastName": "Twain"}

    @pytest.mark.parametrize("raw, expected", [
        ("Mark Twain", {"firstName": "Mark", "lastName": "Twain"}),
        ("  Ursula K. Le Guin ", {"firstName": "Ursula", "lastName": "K. Le Guin"}),
        ("Homer", {"firstName": "Homer", "lastName": ""}),
    ])
    def test_parses_full_name_string(self, raw, expected):
        assert AuthorName.model_validate(raw).to_document() == expected

    @pytest.mark.parametrize("raw", ["", "   ", {}, {"firstName": " ", "lastName": ""}])
    def test_rejects_empty_author(self, raw):
        with pytest.raises(PydanticValidationError):
            AuthorName.model_validate(raw)


class TestPostCreate:

    def test_to_document(self):
        payload = PostCreate.model_validate({
            "author": {"firstName": "Mark", "lastName": "Twain"},
            "title": "T",
            "content": "C",
            "id": "ignored",
        })

        assert payload.to_document() == {
            "author": {"firstName": "Mark", "lastName": "Twain"},
            "title": "T",
            "content": "C",
        }

    def test_blank_title_rejected(self):
        with pytest.raises(PydanticValidationError):
            PostCreate.model_validate({"author": "Mark Twain", "title": " ", "content": "C"})


class TestPostUpdate:

    def test_patch_contains_only_supplied_fields(self):
        update = PostUpdate.model_validate({"title": "New"})

        assert update.to_patch() == {"title": "New"}

    def test_patch_converts_author_string(self):
        update = PostUpdate.model_validate({"author": "Mark Twain", "id": "abc"})

        assert update.to_patch() == {"author": {"firstName": "Mark", "lastName": "Twain"}}
        assert update.id == "abc"

    def test_empty_patch(self):
        assert PostUpdate.model_validate({}).to_patch() == {}


class TestPostResponse:

    def _post(self, **overrides):
        fields = {
            "id": uuid.uuid4(),
            "author": {"firstName": "Mark", "lastName": "Twain"},
            "title": "T",
            "content": "C",
            "created": datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc),
        }
        fields.update(overrides)
        return BlogPost(**fields)

    def test_serialized_shape(self):
        post = self._post()

        body = PostResponse.from_post(post).model_dump(mode="json")

        assert body == {
            "id": str(post.id),
            "author": "Mark Twain",
            "title": "T",
            "content": "C",
            "created": "2024-01-15T12:00:00Z",
        }

    def test_naive_created_is_treated_as_utc(self):
        post = self._post(created=datetime(2024, 1, 15, 12, 0))

        body = PostResponse.from_post(post).model_dump(mode="json")

        assert body["created"] == "2024-01-15T12:00:00Z"

    def test_author_name_omits_missing_part(self):
        post = self._post(author={"firstName": "Homer", "lastName": ""})

        assert post.author_name == "Homer"
