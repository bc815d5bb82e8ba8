"""
Traversals over a live comment listing.

``parse_comments`` rebuilds the full reply tree. ``query_comments`` returns a
flat list of the comments whose body contains a search string; a comment's
matching descendants come before the comment itself and every result has
its children stripped.
"""

import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, List, Pattern
from urllib.parse import parse_qsl

from pydantic import ValidationError

from thread_archive.core.live_adapter import CommentContext, LiveCommentDecoder
from thread_archive.errors import NodeDecodeError
from thread_archive.models.canonical import Comment
from thread_archive.models.live_schema import LiveListing

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def comment_search_pattern() -> Pattern[str]:
    """Compiled once on first use and shared read-only afterwards."""
    return re.compile(r"\?q=(.*)&type=comment")


def comment_query(url: str) -> str:
    """
    Extract the comment search string from a page URL.

    ``https://host/r/sub/comments/id?q=hello%20world&type=comment`` gives
    ``"hello world"``. A URL without the search marker gives ``""``, meaning
    no search is active.
    """
    match = comment_search_pattern().search(url or "")
    if not match:
        return ""

    query_body = match.group(1).replace("%20", " ").replace("+", " ")
    params = dict(parse_qsl(f"q={query_body}&type=comment", keep_blank_values=True))
    return params.get("q", "")


def strip_comment_query(url: str) -> str:
    """Return the URL with a trailing ``?q=...&type=comment`` search suffix removed."""
    if not url:
        return ""
    match = comment_search_pattern().search(url)
    if match and match.end() == len(url):
        return url[: match.start()]
    return url


def listing_children(listing: Any, decoder: LiveCommentDecoder) -> List[Dict[str, Any]]:
    """Raw children of a listing object; anything that is not a listing has none."""
    if not isinstance(listing, dict):
        return []
    try:
        return LiveListing.model_validate(listing).data.children
    except ValidationError as e:
        decoder.record("", f"invalid replies listing: {e.error_count()} validation error(s)")
        return []


def parse_comments(listing: Any, decoder: LiveCommentDecoder) -> List[Comment]:
    """Decode a listing into a tree of comments, preserving source order at every level."""
    comments = []
    for raw_thing in listing_children(listing, decoder):
        loaded = decoder.load(raw_thing)
        if loaded is None:
            continue
        kind, data = loaded
        children = parse_comments(data.reply_listing, decoder) if data.reply_listing else []
        comment = decoder.build_comment(kind, data, children)
        if comment is not None:
            comments.append(comment)
    return comments


def query_comments(listing: Any, decoder: LiveCommentDecoder, query: str) -> List[Comment]:
    """
    Flatten a listing into the comments whose rendered body contains ``query``.

    Matching is case-insensitive. Replies are searched before the comment
    that holds them, so descendants precede their ancestors in the result.
    """
    needle = query.lower()
    results = []

    for raw_thing in listing_children(listing, decoder):
        loaded = decoder.load(raw_thing)
        if loaded is None:
            continue
        kind, data = loaded

        if data.reply_listing:
            results.extend(query_comments(data.reply_listing, decoder, query))

        comment = decoder.build_comment(kind, data, [])
        if comment is not None and needle in comment.body.lower():
            results.append(comment)

    return results


def search_comment_forest(comments: List[Comment], query: str) -> List[Comment]:
    """
    Query mode over an already decoded comment forest.

    Same ordering as ``query_comments``: matching descendants first, then the
    comment itself, each result with its children removed.
    """
    needle = query.lower()
    results = []
    for comment in comments:
        results.extend(search_comment_forest(comment.children, query))
        if needle in comment.body.lower():
            results.append(comment.model_copy(update={"children": []}))
    return results


@dataclass
class CommentTreeResult:
    comments: List[Comment] = field(default_factory=list)
    errors: List[NodeDecodeError] = field(default_factory=list)
    query: str = ""


def build_comment_tree(listing: Any, context: CommentContext, query: str = "") -> CommentTreeResult:
    """
    Decode a comment listing in full mode, or in query mode when ``query`` is set.

    Args:
        listing: Raw comment listing (the second element of a live thread document)
        context: Per-request decoding inputs
        query: Search string; empty means the full tree is returned

    Returns:
        CommentTreeResult with the comments and any recovered node errors
    """
    decoder = LiveCommentDecoder(context)
    if query:
        comments = query_comments(listing, decoder, query)
        logger.debug(f"Comment search for {query!r} matched {len(comments)} comments")
    else:
        comments = parse_comments(listing, decoder)

    return CommentTreeResult(comments=comments, errors=list(decoder.errors), query=query)
