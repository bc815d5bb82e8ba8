"""
Render-ready page values.

A ``PostPage`` is the single value handed to an external renderer. The live
single-request path and the batch static-site path build it through the same
constructor; the batch path simply has no request URL, search query or sort.
"""

import logging
from pathlib import Path
from typing import Any, FrozenSet, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from thread_archive.core.comment_tree import build_comment_tree, comment_query, strip_comment_query
from thread_archive.core.live_adapter import DEFAULT_PUSHSHIFT_FRONTEND, CommentContext, decode_live_post, split_document
from thread_archive.errors import NodeDecodeError
from thread_archive.models.canonical import Comment, Post, Preferences

logger = logging.getLogger(__name__)

ARCHIVE_SORT = "new"
DEFAULT_COMMENT_SORT = "confidence"


class PostPage(BaseModel):
    """Everything a renderer needs to draw one thread page."""

    model_config = ConfigDict(frozen=True)

    post: Post
    comments: List[Comment] = Field(default_factory=list)
    sort: str = ""
    prefs: Preferences = Field(default_factory=Preferences)
    single_thread: bool = False
    url: str = ""
    url_without_query: str = ""
    comment_query: str = ""

    @classmethod
    def new(
        cls,
        post: Post,
        comments: List[Comment],
        sort: str,
        prefs: Preferences,
        single_thread: bool,
        url: str,
        comment_query: str,
    ) -> "PostPage":
        """
        Assemble a page, deriving ``url_without_query`` from ``url``.

        Args:
            post: The thread's root post
            comments: Comment forest (full tree) or flat search results
            sort: Comment sort order tag, e.g. "confidence" or "new"
            prefs: Viewer preferences
            single_thread: True when the viewer opened one specific comment
            url: Current page URL ("" for the batch path)
            comment_query: Active comment search ("" when not searching)
        """
        return cls(
            post=post,
            comments=comments,
            sort=sort,
            prefs=prefs,
            single_thread=single_thread,
            url=url,
            url_without_query=strip_comment_query(url),
            comment_query=comment_query,
        )


class ArchiveIndex(BaseModel):
    """Aggregate document listing every post of a generated site."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    description: str = ""
    posts: List[Post] = Field(default_factory=list)
    prefs: Preferences = Field(default_factory=Preferences)

    @property
    def no_posts(self) -> bool:
        return not self.posts


def output_path(input_path: Union[str, Path], out_dir: Union[str, Path], extension: str) -> Path:
    """
    Output file for an input document: ``out_dir / <input stem>.<extension>``.

    Two inputs sharing a stem map to the same output file.
    """
    input_path = Path(input_path)
    if not input_path.stem:
        raise ValueError(f"Invalid input filename: {input_path}")
    return Path(out_dir) / f"{input_path.stem}.{extension.lstrip('.')}"


def archive_post_page(post: Post, comments: List[Comment], out_path: Path, prefs: Optional[Preferences] = None) -> PostPage:
    """
    Build the page for one archived thread in a static site.

    The post permalink is replaced with the output file name so that index
    links resolve within the generated site.
    """
    post = post.model_copy(update={"permalink": out_path.name})
    return PostPage.new(
        post,
        comments,
        ARCHIVE_SORT,
        prefs or Preferences(),
        False,
        "",
        "",
    )


def build_index(posts: Iterable[Post], title: str, description: str, prefs: Optional[Preferences] = None) -> ArchiveIndex:
    posts = list(posts)
    logger.info(f"Creating archive index with {len(posts)} posts")
    return ArchiveIndex(title=title, description=description, posts=posts, prefs=prefs or Preferences())


class LivePage(BaseModel):
    """A live thread page plus the comment nodes that had to be recovered."""

    model_config = ConfigDict(frozen=True)

    page: PostPage
    errors: List[NodeDecodeError] = Field(default_factory=list)


def live_post_page(
    document: Any,
    url: str,
    sort: str = "",
    prefs: Optional[Preferences] = None,
    highlighted_comment: str = "",
    filters: FrozenSet[str] = frozenset(),
    pushshift_frontend: str = DEFAULT_PUSHSHIFT_FRONTEND,
) -> LivePage:
    """
    Build the page for a live thread response.

    A ``?q=...&type=comment`` suffix on ``url`` switches the comments to the
    flat search results; a ``highlighted_comment`` marks the page as a
    single thread view. Without an explicit ``sort`` the viewer's stored
    ``comment_sort`` preference applies, then ``DEFAULT_COMMENT_SORT``.

    Raises:
        LiveDecodeError: If the document is not a live thread
    """
    prefs = prefs or Preferences()
    sort = sort or prefs.comment_sort or DEFAULT_COMMENT_SORT
    post_thing, comment_listing = split_document(document, source=url or None)
    post = decode_live_post(post_thing, source=url or None)

    context = CommentContext(
        post_link=post.permalink,
        post_author=post.author.name,
        highlighted_comment=highlighted_comment,
        filters=frozenset(filters),
        prefs=prefs,
        pushshift_frontend=pushshift_frontend,
    )
    query = comment_query(url)
    tree = build_comment_tree(comment_listing, context, query)

    page = PostPage.new(
        post,
        tree.comments,
        sort,
        prefs,
        bool(highlighted_comment),
        url,
        query,
    )
    return LivePage(page=page, errors=tree.errors)
