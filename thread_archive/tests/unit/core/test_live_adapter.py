"""Tests for decoding live comment and post nodes."""

from unittest.mock import patch

import pytest

from thread_archive.core.live_adapter import (
    HIDDEN_SCORE,
    CommentContext,
    LiveCommentDecoder,
    build_comment,
    decode_live_post,
    is_removed,
    parse_awards,
    parse_flair_parts,
    score_display,
    split_document,
)
from thread_archive.errors import LiveDecodeError
from thread_archive.models.canonical import Award, Preferences
from thread_archive.models.live_schema import Awarding, FlairRichtextPart
from thread_archive.tests.stubs.thread_stubs import PERMALINK, listing, live_comment, live_document, live_post, more_stub


def decode(raw, context, children=None):
    comment = build_comment(raw, context, children)
    assert comment is not None
    return comment


class TestRemovedComments:

    def test_deleted_and_removed_gets_placeholder(self, comment_context):
        raw = live_comment("gone", "[removed]", author="[deleted]")
        comment = decode(raw, comment_context)
        assert comment.body == (
            '<div class="md"><p>[removed] — '
            f'<a href="https://undelete.pullpush.io{PERMALINK}gone">view removed comment</a>'
            "</p></div>"
        )

    def test_removed_by_reddit_gets_placeholder(self):
        context = CommentContext(post_link=PERMALINK, post_author="op_user", pushshift_frontend="archive.example")
        comment = decode(live_comment("x1", "[ Removed by Reddit ]"), context)
        assert "https://archive.example" + PERMALINK + "x1" in comment.body

    def test_removed_body_with_live_author_is_kept(self, comment_context):
        comment = decode(live_comment("x2", "[removed]"), comment_context)
        assert "view removed comment" not in comment.body
        assert "[removed]" in comment.body

    @pytest.mark.parametrize(
        "author, body, expected",
        [
            ("[deleted]", "[removed]", True),
            ("someone", "[ Removed by Reddit ]", True),
            ("[deleted]", "[deleted]", False),
            ("someone", "[removed]", False),
        ],
    )
    def test_is_removed(self, author, body, expected):
        assert is_removed(author, body) is expected


class TestScore:

    def test_hidden_score_ignores_value(self, comment_context):
        comment = decode(live_comment("h", "hi", score=987654, score_hidden=True), comment_context)
        assert comment.score == HIDDEN_SCORE == ("•", "Hidden")

    def test_visible_score_is_abbreviated(self, comment_context):
        assert decode(live_comment("s", "hi", score=1500), comment_context).score == ("1.5k", "")
        assert decode(live_comment("s", "hi", score=12), comment_context).score == ("12", "")

    def test_score_display(self):
        assert score_display(0, hidden=True) == ("•", "Hidden")
        assert score_display(-4, hidden=False) == ("-4", "")


class TestCollapse:

    @pytest.mark.parametrize(
        "distinguished, stickied, filtered, expected",
        [
            ("moderator", True, False, True),
            ("moderator", False, False, False),
            ("admin", True, False, False),
            (None, True, False, False),
            (None, False, True, True),
            ("moderator", True, True, True),
            (None, False, False, False),
        ],
    )
    def test_collapse_rule(self, distinguished, stickied, filtered, expected):
        filters = frozenset({"u_user_c"}) if filtered else frozenset()
        context = CommentContext(post_link=PERMALINK, post_author="op_user", filters=filters)
        comment = decode(live_comment("c", "text", distinguished=distinguished, stickied=stickied), context)
        assert comment.collapsed is expected
        assert comment.is_filtered is filtered

    def test_filter_matches_exact_username(self):
        context = CommentContext(post_link=PERMALINK, post_author="op_user", filters=frozenset({"u_user_c2"}))
        comment = decode(live_comment("c", "text"), context)
        assert not comment.is_filtered
        assert not comment.collapsed


def test_highlighted_only_for_matching_id():
    context = CommentContext(post_link=PERMALINK, post_author="op_user", highlighted_comment="target")
    assert decode(live_comment("target", "x"), context).highlighted
    assert not decode(live_comment("other", "x"), context).highlighted


def test_no_highlight_without_target(comment_context):
    assert comment_context.highlighted_comment == ""
    assert not decode(live_comment(None, "x"), comment_context).highlighted


def test_more_count_only_on_stubs(comment_context):
    stub = decode(more_stub("m1", "t1_a", 17), comment_context)
    assert stub.kind == "more"
    assert stub.is_more_stub
    assert stub.more_count == 17

    comment = decode(live_comment("c", "x", count=5), comment_context)
    assert comment.more_count == 0


def test_malformed_parent_is_recovered(comment_context):
    decoder = LiveCommentDecoder(comment_context)
    kind, data = decoder.load(live_comment("bad", "text", parent_id="nonsense"))
    comment = decoder.build_comment(kind, data, [])

    assert comment.id == "bad"
    assert comment.parent_id == ""
    assert comment.parent_kind == ""
    assert len(decoder.errors) == 1
    assert decoder.errors[0].comment_id == "bad"
    assert "nonsense" in str(decoder.errors[0])


def test_parent_linkage_and_post_link(comment_context):
    comment = decode(live_comment("c", "x", parent_id="t1_a"), comment_context)
    assert (comment.parent_kind, comment.parent_id) == ("t1", "a")
    assert comment.post_link == PERMALINK
    assert comment.post_author == "op_user"


def test_invalid_node_is_skipped_and_recorded(comment_context):
    decoder = LiveCommentDecoder(comment_context)
    assert decoder.load(live_comment("c", "x", score="many")) is None
    assert [e.comment_id for e in decoder.errors] == ["c"]


def test_edited_and_created_pairs(comment_context):
    comment = decode(live_comment("c", "x", edited=1600003600.0), comment_context)
    assert comment.created == "Sep 13 2020, 12:28:40 UTC"
    assert comment.edited[1] == "Sep 13 2020, 13:26:40 UTC"

    unedited = decode(live_comment("c", "x"), comment_context)
    assert unedited.edited == ("", "")


def test_body_html_preferred_and_emotes_rewritten(comment_context):
    raw = live_comment(
        "c",
        "ignored",
        body_html='<div class="md"><p>nice :1234:</p></div>',
        media_metadata={
            "emote|t5_abc|1234": {
                "e": "Image",
                "id": "emote|t5_abc|1234",
                "s": {"u": "https://emoji.example/1234.png?a=1&amp;b=2"},
            }
        },
    )
    comment = decode(raw, comment_context)
    assert ":1234:" not in comment.body
    assert 'src="https://emoji.example/1234.png?a=1&b=2"' in comment.body


def test_children_keep_order_and_prefs(comment_context):
    prefs = Preferences(theme="dark")
    context = CommentContext(post_link=PERMALINK, post_author="op_user", prefs=prefs)
    children = [decode(live_comment(i, i), context) for i in ("z", "y", "x")]
    parent = decode(live_comment("p", "parent"), context, children)
    assert [c.id for c in parent.children] == ["z", "y", "x"]
    assert parent.prefs.theme == "dark"


def test_author_flair_parts():
    richtext = [
        FlairRichtextPart.model_validate({"e": "emoji", "u": "https://e/1.png"}),
        FlairRichtextPart.model_validate({"e": "text", "t": "Pro"}),
    ]
    parts = parse_flair_parts("richtext", richtext, "Pro")
    assert [(p.flair_part_type, p.value) for p in parts] == [("emoji", "https://e/1.png"), ("text", "Pro")]
    assert [p.value for p in parse_flair_parts("text", None, "Plain")] == ["Plain"]
    assert parse_flair_parts("text", None, "") == []


def test_parse_awards():
    awards = parse_awards([
        Awarding.model_validate(
            {"name": "Gold", "resized_icons": [{"url": "https://a/gold.png"}], "description": "shiny", "count": 2}
        ),
        Awarding.model_validate({"name": "Silver", "icon_url": "https://a/silver.png", "count": None}),
    ])
    assert [(a.name, a.icon_url, a.count) for a in awards] == [
        ("Gold", "https://a/gold.png", 2),
        ("Silver", "https://a/silver.png", 0),
    ]


class TestMalformedNestedFields:
    """Nested fields of the wrong shape fail their own node only."""

    @pytest.mark.parametrize(
        "overrides",
        [
            {"media_metadata": {"m1": {"e": "Image", "s": "oops"}}},
            {"media_metadata": {"m1": "oops"}},
            {"all_awardings": [{"name": "Gold", "count": "lots"}]},
            {"all_awardings": [{"name": "Gold", "resized_icons": ["x"]}]},
            {"author_flair_richtext": ["x"]},
        ],
    )
    def test_node_is_skipped_and_recorded(self, comment_context, overrides):
        decoder = LiveCommentDecoder(comment_context)
        assert decoder.load(live_comment("bad", "x", **overrides)) is None
        assert [e.comment_id for e in decoder.errors] == ["bad"]

    def test_null_nested_fields_take_defaults(self, comment_context):
        comment = decode(
            live_comment("c", "x", media_metadata=None, all_awardings=None, author_flair_richtext=None),
            comment_context,
        )
        assert comment.awards == []

    def test_media_entry_without_source_is_ignored(self, comment_context):
        raw = live_comment(
            "c",
            "x",
            body_html="<p>![img](vid)</p>",
            media_metadata={"vid": {"e": "RedditVideo", "status": "valid"}},
        )
        assert decode(raw, comment_context).body == "<p>![img](vid)</p>"

    def test_build_failure_is_recorded(self, comment_context):
        decoder = LiveCommentDecoder(comment_context)
        kind, data = decoder.load(live_comment("c", "x"))

        with patch("thread_archive.core.live_adapter.parse_awards", side_effect=lambda _: [Award(count="lots")]):
            assert decoder.build_comment(kind, data, []) is None

        assert [e.comment_id for e in decoder.errors] == ["c"]
        assert "could not build comment" in decoder.errors[0].reason

    @pytest.mark.parametrize(
        "overrides",
        [
            {"preview": {"images": ["x"]}},
            {"gallery_data": {"items": "nope"}},
            {"media_metadata": {"m1": {"e": "Image", "s": {"x": "wide"}}}},
        ],
    )
    def test_post_with_bad_nested_field_fails_decode(self, overrides):
        with pytest.raises(LiveDecodeError):
            decode_live_post(live_post(**overrides), source="thread.json")

    def test_post_preview_size(self):
        post = decode_live_post(live_post(
            is_self=False,
            post_hint="image",
            preview={"images": [{"source": {"url": "https://p.example/1.jpg", "width": 800, "height": 600}}]},
        ))
        assert post.post_type == "image"
        assert (post.media.poster, post.media.width, post.media.height) == ("https://p.example/1.jpg", 800, 600)


class TestLivePost:

    def test_split_document(self):
        post_thing, comment_listing = split_document(live_document())
        assert post_thing["data"]["id"] == "abc123"
        assert comment_listing["kind"] == "Listing"

    @pytest.mark.parametrize("document", [{}, [], [listing([])], "text"])
    def test_split_rejects_wrong_shape(self, document):
        with pytest.raises(LiveDecodeError):
            split_document(document, source="thread.json")

    def test_split_rejects_empty_post_listing(self):
        with pytest.raises(LiveDecodeError):
            split_document([listing([]), listing([])])

    def test_decode_post(self):
        post = decode_live_post(live_post())
        assert post.id == "abc123"
        assert post.title == "Weekly thread"
        assert post.score == ("1.2k", "")
        assert post.community == "test"
        assert post.post_type == "self"
        assert post.flair.text == "Discussion"
        assert [p.value for p in post.flair.flair_parts] == ["Discussion"]
        assert post.body == '<div class="md"><p>Hello there</p></div>'
        assert post.thumbnail.url == ""
        assert post.domain == "self.test"

    def test_decode_post_hidden_score(self):
        assert decode_live_post(live_post(hide_score=True)).score == HIDDEN_SCORE

    def test_decode_gallery_post(self):
        post = decode_live_post(live_post(
            is_self=False,
            is_gallery=True,
            gallery_data={"items": [{"media_id": "m1", "caption": "first"}]},
            media_metadata={"m1": {"e": "Image", "s": {"u": "https://i.example/m1.jpg", "x": 640, "y": 480}}},
        ))
        assert post.post_type == "gallery"
        assert [(g.url, g.width, g.height, g.caption) for g in post.gallery] == [
            ("https://i.example/m1.jpg", 640, 480, "first"),
        ]

    def test_decode_post_without_id_fails(self):
        raw = live_post()
        del raw["data"]["id"]
        with pytest.raises(LiveDecodeError):
            decode_live_post(raw, source="thread.json")
