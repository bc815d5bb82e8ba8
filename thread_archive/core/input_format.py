"""Input format selection and per-format document decoding."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from thread_archive.core.archive_adapter import decode_submission
from thread_archive.core.comment_tree import build_comment_tree
from thread_archive.core.live_adapter import DEFAULT_PUSHSHIFT_FRONTEND, CommentContext, decode_live_post, split_document
from thread_archive.errors import NodeDecodeError, UnsupportedInputFormatError
from thread_archive.models.canonical import Comment, Post, Preferences

logger = logging.getLogger(__name__)


class InputFormat(str, Enum):
    """Format of the JSON files in an input directory."""

    # Text posts saved by bulk-downloader-for-reddit
    BDFR_SELF_POST = "bdfr-self-post"
    # Thread responses from the live API
    REDDIT_JSON = "reddit-json"

    @classmethod
    def names(cls) -> List[str]:
        return [member.value for member in cls]

    def __str__(self) -> str:
        return self.value


@dataclass
class DecodeOptions:
    """Viewer-side inputs applied while decoding live comments."""

    filters: FrozenSet[str] = frozenset()
    prefs: Preferences = field(default_factory=Preferences)
    pushshift_frontend: str = DEFAULT_PUSHSHIFT_FRONTEND


@dataclass
class DecodedThread:
    post: Post
    comments: List[Comment] = field(default_factory=list)
    errors: List[NodeDecodeError] = field(default_factory=list)


def decode_archive_document(
    document: Any,
    source: Optional[str] = None,
    options: Optional[DecodeOptions] = None,
) -> DecodedThread:
    """
    Decode a bulk-downloader submission document.

    Raises:
        ArchiveDecodeError: If the schema does not match or a parent id is malformed
    """
    post, comments = decode_submission(document, source=source)
    return DecodedThread(post=post, comments=comments)


def decode_live_document(
    document: Any,
    source: Optional[str] = None,
    options: Optional[DecodeOptions] = None,
) -> DecodedThread:
    """
    Decode a full ``[post_listing, comment_listing]`` live thread document.

    Comment nodes with a malformed parent id are kept and reported in
    ``DecodedThread.errors``.

    Raises:
        LiveDecodeError: If the document does not have the live thread shape
    """
    options = options or DecodeOptions()
    post_thing, comment_listing = split_document(document, source=source)
    post = decode_live_post(post_thing, source=source)
    context = CommentContext(
        post_link=post.permalink,
        post_author=post.author.name,
        filters=options.filters,
        prefs=options.prefs,
        pushshift_frontend=options.pushshift_frontend,
    )
    tree = build_comment_tree(comment_listing, context)
    return DecodedThread(post=post, comments=tree.comments, errors=tree.errors)


Decoder = Callable[[Any, Optional[str], Optional[DecodeOptions]], DecodedThread]

DECODERS: Dict[InputFormat, Decoder] = {
    InputFormat.BDFR_SELF_POST: decode_archive_document,
    InputFormat.REDDIT_JSON: decode_live_document,
}


def resolve_input_format(name: str) -> InputFormat:
    """
    Map a format name to a decodable InputFormat.

    Raises:
        UnsupportedInputFormatError: If the name is unknown or has no decoder
    """
    try:
        input_format = InputFormat(name)
    except ValueError:
        raise UnsupportedInputFormatError(
            f"Unknown input format '{name}' (expected one of: {', '.join(InputFormat.names())})"
        )
    if input_format not in DECODERS:
        raise UnsupportedInputFormatError(f"Input format '{name}' is not supported yet")
    return input_format


def decode_document(
    input_format: InputFormat,
    document: Any,
    source: Optional[str] = None,
    options: Optional[DecodeOptions] = None,
) -> DecodedThread:
    """
    Decode one parsed JSON document in the given format.

    Raises:
        DecodeError: If the document does not match the format's schema
    """
    decoder = DECODERS.get(input_format)
    if decoder is None:
        raise UnsupportedInputFormatError(f"Input format '{input_format}' is not supported yet")
    logger.debug(f"Decoding {source or 'document'} as {input_format}")
    return decoder(document, source, options or DecodeOptions())
