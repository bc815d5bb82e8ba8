"""
Conversion between the archival (bulk-downloader) format and the canonical model.

Decoding is strict about thread linkage: archival parent ids must be valid
fullnames, and a malformed one is reported as an ArchiveDecodeError for the
whole document. Encoding is lossy: gallery, awards, domain and other fields
the archival schema has no slot for are dropped.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from thread_archive.errors import ArchiveDecodeError
from thread_archive.models import fullname as fullnames
from thread_archive.models.archive_schema import CommentArchiveEntry, SubmissionArchiveEntry
from thread_archive.models.canonical import Author, Comment, Flags, Flair, Media, Post, ScorePair
from thread_archive.utils.formatting import format_selftext, strtime

logger = logging.getLogger(__name__)

ArchiveInput = Union[Dict[str, Any], SubmissionArchiveEntry]


def load_submission(data: ArchiveInput, source: Optional[str] = None) -> SubmissionArchiveEntry:
    """
    Validate raw JSON against the archival submission schema.

    Raises:
        ArchiveDecodeError: If the document does not match the schema
    """
    if isinstance(data, SubmissionArchiveEntry):
        return data
    try:
        return SubmissionArchiveEntry.model_validate(data)
    except ValidationError as e:
        raise ArchiveDecodeError(f"invalid archival submission: {e}", source=source) from e


def decode_submission(data: ArchiveInput, source: Optional[str] = None) -> Tuple[Post, List[Comment]]:
    """
    Decode an archival submission into a Post and its comment forest.

    Args:
        data: Parsed JSON object (or an already validated entry)
        source: Label used in error messages, usually the input path

    Returns:
        Tuple of (post, top-level comments with nested children)

    Raises:
        ArchiveDecodeError: If the schema does not match or a parent id is malformed
    """
    entry = load_submission(data, source)
    logger.debug(f"Decoding archived submission {entry.id} ({len(entry.comments)} top-level comments)")

    post = submission_to_post(entry)
    try:
        comments = submission_comments(entry)
    except ArchiveDecodeError as e:
        if source and not e.source:
            raise ArchiveDecodeError(str(e), source=source) from e
        raise
    return post, comments


def submission_to_post(entry: SubmissionArchiveEntry) -> Post:
    """Build the canonical Post for an archival submission."""
    media = Media(
        url=entry.url,
        alt_url=entry.url,
        poster=entry.author,
    )
    created = strtime(entry.created_utc)

    return Post(
        id=entry.id,
        title=entry.title,
        url=entry.url,
        body=format_selftext(entry.selftext),
        selftext=entry.selftext,
        score=(str(entry.score), ""),
        upvote_ratio=entry.upvote_ratio,
        permalink=entry.permalink,
        author=Author(
            name=entry.author,
            distinguished=entry.distinguished or "",
        ),
        flair=Flair(text=entry.link_flair_text or ""),
        post_type="self" if entry.selftext.strip() else "link",
        flags=Flags(
            nsfw=entry.over_18,
            spoiler=entry.spoiler,
            stickied=entry.pinned,
        ),
        locked=entry.locked,
        media=media,
        thumbnail=media,
        rel_time=created,
        created=created,
        created_ts=entry.created_utc,
        num_comments=entry.num_comments,
    )


def submission_comments(entry: SubmissionArchiveEntry) -> List[Comment]:
    return [entry_to_comment(reply, entry) for reply in entry.comments]


def entry_to_comment(entry: CommentArchiveEntry, submission: SubmissionArchiveEntry) -> Comment:
    """
    Recursively convert a reply record and its replies to a Comment tree.

    Raises:
        ArchiveDecodeError: If ``parent_id`` is not a valid fullname
    """
    parent = fullnames.parse(entry.parent_id)
    if parent is None:
        raise ArchiveDecodeError(
            f"comment {entry.id} has malformed parent_id {entry.parent_id!r}"
        )

    created = strtime(entry.created_utc)

    return Comment(
        id=entry.id,
        kind=fullnames.ThingKind.COMMENT.value,
        parent_id=parent.id,
        parent_kind=parent.kind.value,
        post_link=submission.permalink,
        post_author=submission.author,
        body=entry.body,
        author=Author(
            name=entry.author,
            flair=Flair(text=entry.author_flair or ""),
            distinguished=entry.distinguished or "",
        ),
        score=(str(entry.score), ""),
        rel_time=created,
        created=created,
        created_ts=entry.created_utc,
        children=[entry_to_comment(reply, submission) for reply in entry.replies],
        stickied=entry.stickied,
    )


def parse_score(score: ScorePair) -> int:
    """Recover the integer score from a display pair, 0 if it is not a plain integer."""
    try:
        return int(score[0])
    except (TypeError, ValueError, IndexError):
        return 0


def post_to_submission(post: Post, comments: List[Comment]) -> SubmissionArchiveEntry:
    """Build an archival submission record from a Post and its comments."""
    return SubmissionArchiveEntry(
        id=post.id,
        title=post.title,
        name=post.fullname,
        url=post.url,
        selftext=post.selftext,
        score=parse_score(post.score),
        upvote_ratio=post.upvote_ratio,
        permalink=post.permalink,
        author=post.author.name,
        link_flair_text=post.flair.text or None,
        num_comments=post.num_comments,
        over_18=post.flags.nsfw,
        spoiler=post.flags.spoiler,
        pinned=post.flags.stickied,
        locked=post.locked,
        distinguished=post.author.distinguished or None,
        created_utc=post.created_ts,
        comments=[comment_to_entry(comment, post) for comment in comments],
    )


def comment_to_entry(comment: Comment, post: Post) -> CommentArchiveEntry:
    parent_id = ""
    if comment.parent_kind and comment.parent_id:
        parent_id = f"{comment.parent_kind}_{comment.parent_id}"

    return CommentArchiveEntry(
        id=comment.id,
        parent_id=parent_id,
        author=comment.author.name,
        score=parse_score(comment.score),
        author_flair=comment.author.flair.text or None,
        submission=post.id,
        stickied=comment.stickied,
        body=comment.body,
        is_submitter=comment.author.name == post.author.name,
        distinguished=comment.author.distinguished or None,
        created_utc=comment.created_ts,
        replies=[comment_to_entry(reply, post) for reply in comment.children],
    )


def encode_submission(post: Post, comments: List[Comment]) -> Dict[str, Any]:
    """Encode a Post and comments as an archival JSON object."""
    return post_to_submission(post, comments).model_dump(mode="json")
