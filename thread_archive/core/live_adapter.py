"""
Decoding of the live API's listing JSON into canonical Posts and Comments.

Comment nodes are decoded one at a time by ``LiveCommentDecoder``. A node
with a malformed ``parent_id`` is still decoded (its parent linkage is left
empty) and the problem is recorded on the decoder so callers can report it
without losing the rest of the thread.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from thread_archive.errors import LiveDecodeError, NodeDecodeError
from thread_archive.models import fullname as fullnames
from thread_archive.models.canonical import (
    Author,
    Award,
    Comment,
    Flags,
    Flair,
    FlairPart,
    GalleryMedia,
    Media,
    Post,
    Preferences,
    ScorePair,
)
from thread_archive.models.live_schema import (
    Awarding,
    FlairRichtextPart,
    LiveCommentData,
    LiveListing,
    LivePostData,
    LiveThing,
    MediaSource,
    Preview,
)
from thread_archive.utils.formatting import format_num, format_selftext, rewrite_emotes, time

logger = logging.getLogger(__name__)

DEFAULT_PUSHSHIFT_FRONTEND = "undelete.pullpush.io"

HIDDEN_SCORE: ScorePair = ("•", "Hidden")
MORE_KIND = "more"


@dataclass(frozen=True)
class CommentContext:
    """
    Per-request inputs every comment node is decoded against.

    Attributes:
        post_link: Permalink of the thread's post
        post_author: Username of the post's author
        highlighted_comment: Id of the comment the viewer navigated to, if any
        filters: Filter entries such as ``"u_someone"``
        prefs: Viewer preferences copied onto every comment
        pushshift_frontend: Domain of the archive viewer linked from removed comments
    """

    post_link: str
    post_author: str
    highlighted_comment: str = ""
    filters: FrozenSet[str] = frozenset()
    prefs: Preferences = field(default_factory=Preferences)
    pushshift_frontend: str = DEFAULT_PUSHSHIFT_FRONTEND


def is_removed(author: str, body: str) -> bool:
    return (author == "[deleted]" and body == "[removed]") or body == "[ Removed by Reddit ]"


def removed_placeholder(frontend: str, post_link: str, comment_id: str) -> str:
    return (
        '<div class="md"><p>[removed] — '
        f'<a href="https://{frontend}{post_link}{comment_id}">view removed comment</a>'
        "</p></div>"
    )


def score_display(score: int, hidden: bool) -> ScorePair:
    if hidden:
        return HIDDEN_SCORE
    return format_num(score), ""


def parse_flair_parts(flair_type: str, richtext: Optional[Iterable[FlairRichtextPart]], text: str) -> List[FlairPart]:
    """Split a flair into text and emoji parts according to its type."""
    if flair_type == "richtext":
        parts = []
        for part in richtext or []:
            if part.e == "text" and part.t:
                parts.append(FlairPart(flair_part_type="text", value=part.t))
            elif part.e == "emoji" and part.u:
                parts.append(FlairPart(flair_part_type="emoji", value=part.u))
        return parts
    if flair_type == "text" and text:
        return [FlairPart(flair_part_type="text", value=text)]
    return []


def parse_awards(awardings: Optional[Iterable[Awarding]]) -> List[Award]:
    awards = []
    for award in awardings or []:
        icon_url = award.resized_icons[0].url if award.resized_icons else award.icon_url
        awards.append(
            Award(
                name=award.name,
                icon_url=icon_url,
                description=award.description,
                count=award.count,
            )
        )
    return awards


class LiveCommentDecoder:
    """Decodes live comment things against one CommentContext, collecting node errors."""

    def __init__(self, context: CommentContext):
        self.context = context
        self.errors: List[NodeDecodeError] = []

    def record(self, comment_id: str, reason: str) -> None:
        error = NodeDecodeError(comment_id=comment_id, reason=reason)
        logger.warning(f"Recovered from bad comment node: {error}")
        self.errors.append(error)

    def load(self, raw_thing: Dict[str, Any]) -> Optional[Tuple[str, LiveCommentData]]:
        """
        Validate one raw listing child.

        Returns:
            Tuple of (kind, data), or None if the node cannot be decoded at all
        """
        try:
            thing = LiveThing.model_validate(raw_thing)
            return thing.kind, LiveCommentData.model_validate(thing.data)
        except ValidationError as e:
            comment_id = ""
            if isinstance(raw_thing, dict) and isinstance(raw_thing.get("data"), dict):
                comment_id = str(raw_thing["data"].get("id") or "")
            self.record(comment_id, f"invalid comment data: {e.error_count()} validation error(s)")
            return None

    def build_comment(self, kind: str, data: LiveCommentData, children: List[Comment]) -> Optional[Comment]:
        """
        Build a canonical Comment from a validated node and its decoded children.

        Args:
            kind: The thing kind, "t1" or "more"
            data: Validated comment fields
            children: Already decoded child comments, in source order

        Returns:
            The Comment, or None if it could not be built (the failure is recorded)
        """
        try:
            return self._build_comment(kind, data, children)
        except ValidationError as e:
            self.record(data.id, f"could not build comment: {e.error_count()} validation error(s)")
            return None

    def _build_comment(self, kind: str, data: LiveCommentData, children: List[Comment]) -> Comment:
        ctx = self.context

        if is_removed(data.author, data.body):
            body = removed_placeholder(ctx.pushshift_frontend, ctx.post_link, data.id)
        else:
            body = rewrite_emotes(data.media_metadata, data.body_html or format_selftext(data.body))

        rel_time, created = time(data.created_utc)
        edited_ts = data.edited_ts
        edited = time(edited_ts) if edited_ts is not None else ("", "")

        # Only "more" stubs carry a count of unsent replies.
        more_count = data.count if kind == MORE_KIND and data.count is not None else 0

        parent = fullnames.parse(data.parent_id)
        if parent is None:
            self.record(data.id, f"malformed parent_id {data.parent_id!r}")
            parent_kind, parent_id = "", ""
        else:
            parent_kind, parent_id = parent.kind.value, parent.id

        author = Author(
            name=data.author,
            flair=Flair(
                flair_parts=parse_flair_parts(
                    data.author_flair_type,
                    data.author_flair_richtext,
                    data.author_flair_text,
                ),
                text=data.author_flair_text,
                background_color=data.author_flair_background_color,
                foreground_color=data.author_flair_text_color,
            ),
            distinguished=data.distinguished,
        )

        is_filtered = f"u_{author.name}" in ctx.filters
        is_moderator_comment = data.distinguished == "moderator"
        collapsed = (is_moderator_comment and data.stickied) or is_filtered

        return Comment(
            id=data.id,
            kind=kind,
            parent_id=parent_id,
            parent_kind=parent_kind,
            post_link=ctx.post_link,
            post_author=ctx.post_author,
            body=body,
            author=author,
            score=score_display(data.score, data.score_hidden),
            rel_time=rel_time,
            created=created,
            created_ts=data.created_utc,
            edited=edited,
            children=children,
            highlighted=bool(ctx.highlighted_comment) and data.id == ctx.highlighted_comment,
            stickied=data.stickied,
            collapsed=collapsed,
            is_filtered=is_filtered,
            awards=parse_awards(data.all_awardings),
            more_count=more_count,
            prefs=ctx.prefs,
        )


def build_comment(raw_thing: Dict[str, Any], context: CommentContext, children: Optional[List[Comment]] = None) -> Optional[Comment]:
    """Decode a single raw comment thing without collecting node errors."""
    decoder = LiveCommentDecoder(context)
    loaded = decoder.load(raw_thing)
    if loaded is None:
        return None
    kind, data = loaded
    return decoder.build_comment(kind, data, children or [])


def split_document(document: Any, source: Optional[str] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Split a live thread document into its post thing and its comment listing.

    Raises:
        LiveDecodeError: If the document is not ``[post_listing, comment_listing]``
            or the post listing holds no post
    """
    if not isinstance(document, list) or len(document) != 2:
        raise LiveDecodeError("expected a [post_listing, comment_listing] array", source=source)

    try:
        post_listing = LiveListing.model_validate(document[0])
        LiveListing.model_validate(document[1])
    except ValidationError as e:
        raise LiveDecodeError(f"invalid listing: {e}", source=source) from e

    if not post_listing.data.children:
        raise LiveDecodeError("post listing is empty", source=source)

    return post_listing.data.children[0], document[1]


def _preview_size(preview: Preview) -> Tuple[str, int, int]:
    if not preview.images:
        return "", 0, 0
    source = preview.images[0].source
    return source.url, source.width, source.height


def _post_type(data: LivePostData) -> str:
    if data.is_gallery:
        return "gallery"
    if data.is_self:
        return "self"
    if data.is_video or data.post_hint == "hosted:video":
        return "video"
    if data.post_hint == "image":
        return "image"
    return "link"


def _gallery(data: LivePostData) -> List[GalleryMedia]:
    gallery = []
    for item in data.gallery_data.items:
        metadata = data.media_metadata.get(item.media_id)
        source = metadata.s if metadata is not None else MediaSource()
        gallery.append(
            GalleryMedia(
                url=source.url,
                width=source.x,
                height=source.y,
                caption=item.caption,
                outbound_url=item.outbound_url,
            )
        )
    return gallery


def decode_live_post(raw_thing: Dict[str, Any], source: Optional[str] = None) -> Post:
    """
    Decode the ``t3`` thing at the head of a live thread document.

    Raises:
        LiveDecodeError: If the post data does not match the schema
    """
    try:
        thing = LiveThing.model_validate(raw_thing)
        data = LivePostData.model_validate(thing.data)
    except ValidationError as e:
        raise LiveDecodeError(f"invalid post data: {e}", source=source) from e

    if data.selftext_html:
        body = rewrite_emotes(data.media_metadata, data.selftext_html)
    else:
        body = format_selftext(data.selftext)

    preview_url, width, height = _preview_size(data.preview)
    rel_time, created = time(data.created_utc)
    thumbnail_url = data.thumbnail if data.thumbnail.startswith("http") else ""

    return Post(
        id=data.id,
        title=data.title,
        url=data.url,
        body=body,
        selftext=data.selftext,
        score=score_display(data.score, data.hide_score),
        upvote_ratio=data.upvote_ratio,
        permalink=data.permalink,
        community=data.subreddit,
        author=Author(
            name=data.author,
            flair=Flair(
                flair_parts=parse_flair_parts(
                    data.author_flair_type,
                    data.author_flair_richtext,
                    data.author_flair_text,
                ),
                text=data.author_flair_text,
                background_color=data.author_flair_background_color,
                foreground_color=data.author_flair_text_color,
            ),
            distinguished=data.distinguished,
        ),
        flair=Flair(
            flair_parts=parse_flair_parts(
                data.link_flair_type,
                data.link_flair_richtext,
                data.link_flair_text,
            ),
            text=data.link_flair_text,
            background_color=data.link_flair_background_color,
            foreground_color=data.link_flair_text_color,
        ),
        post_type=_post_type(data),
        flags=Flags(nsfw=data.over_18, spoiler=data.spoiler, stickied=data.stickied),
        locked=data.locked,
        media=Media(
            url=data.url,
            alt_url=preview_url or data.url,
            width=width,
            height=height,
            poster=preview_url,
        ),
        thumbnail=Media(
            url=thumbnail_url,
            width=data.thumbnail_width,
            height=data.thumbnail_height,
        ),
        domain=data.domain,
        rel_time=rel_time,
        created=created,
        created_ts=data.created_utc,
        num_comments=data.num_comments,
        awards=parse_awards(data.all_awardings),
        gallery=_gallery(data),
    )
