"""Tests for input format selection and document decoding."""

import pytest

from thread_archive.core.input_format import (
    DecodeOptions,
    InputFormat,
    decode_archive_document,
    decode_document,
    decode_live_document,
    resolve_input_format,
)
from thread_archive.errors import ArchiveDecodeError, LiveDecodeError, UnsupportedInputFormatError
from thread_archive.models.canonical import Preferences
from thread_archive.tests.stubs.thread_stubs import archive_submission, live_comment, live_document


def test_resolve_known_formats():
    assert resolve_input_format("bdfr-self-post") is InputFormat.BDFR_SELF_POST
    assert resolve_input_format("reddit-json") is InputFormat.REDDIT_JSON
    assert InputFormat.names() == ["bdfr-self-post", "reddit-json"]
    assert str(InputFormat.REDDIT_JSON) == "reddit-json"


def test_resolve_unknown_format():
    with pytest.raises(UnsupportedInputFormatError) as excinfo:
        resolve_input_format("xml")
    assert "bdfr-self-post" in str(excinfo.value)


def test_decode_archive_document():
    thread = decode_archive_document(archive_submission())
    assert thread.post.id == "abc123"
    assert [c.id for c in thread.comments] == ["c1", "c3"]
    assert thread.errors == []


def test_decode_live_document_with_options():
    document = live_document([live_comment("a", "x", parent_id="bad"), live_comment("b", "y")])
    options = DecodeOptions(filters=frozenset({"u_user_b"}), prefs=Preferences(theme="light"))
    thread = decode_live_document(document, source="t.json", options=options)

    assert thread.post.id == "abc123"
    assert [(c.id, c.is_filtered) for c in thread.comments] == [("a", False), ("b", True)]
    assert thread.comments[0].prefs.theme == "light"
    assert [e.comment_id for e in thread.errors] == ["a"]


@pytest.mark.parametrize(
    "input_format, document, error",
    [
        (InputFormat.BDFR_SELF_POST, live_document(), ArchiveDecodeError),
        (InputFormat.REDDIT_JSON, archive_submission(), LiveDecodeError),
    ],
)
def test_decode_document_wrong_format(input_format, document, error):
    with pytest.raises(error):
        decode_document(input_format, document, source="x.json")


def test_decode_document_dispatch(archive_document, live_thread_document):
    assert decode_document(InputFormat.BDFR_SELF_POST, archive_document).post.title == "Weekly thread"
    assert decode_document(InputFormat.REDDIT_JSON, live_thread_document).post.community == "test"
