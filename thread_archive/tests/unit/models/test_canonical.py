"""Tests for the canonical thread model."""

import pytest
from pydantic import ValidationError

from thread_archive.models.canonical import Author, Comment, Flags, Post


def _comment(comment_id, children=()):
    return Comment(id=comment_id, author=Author(name="someone"), children=list(children))


def test_comment_walk_is_preorder():
    tree = _comment("a", [_comment("b", [_comment("c")]), _comment("d")])
    assert [c.id for c in tree.walk()] == ["a", "b", "c", "d"]


def test_comment_find():
    tree = _comment("a", [_comment("b", [_comment("c")])])
    assert tree.find("c").id == "c"
    assert tree.find("missing") is None


def test_more_stub():
    assert Comment(id="m", kind="more", more_count=7).is_more_stub
    assert not _comment("a").is_more_stub


def test_post_properties():
    post = Post(id="abc", flags=Flags(nsfw=True))
    assert post.nsfw
    assert post.fullname == "t3_abc"


def test_models_are_frozen():
    post = Post(id="abc", permalink="/r/x/comments/abc/")
    with pytest.raises(ValidationError):
        post.permalink = "other.html"

    updated = post.model_copy(update={"permalink": "abc.json"})
    assert updated.permalink == "abc.json"
    assert post.permalink == "/r/x/comments/abc/"
