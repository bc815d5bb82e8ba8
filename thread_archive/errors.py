"""Exception types raised by the thread_archive adapters and generator."""

from dataclasses import dataclass
from typing import Optional


class ThreadArchiveError(Exception):
    """Base class for all thread_archive errors."""


class DecodeError(ThreadArchiveError):
    """
    A JSON document did not match the schema expected by an adapter.

    Decode errors are reported per document so a batch run can carry on
    past a single malformed input.
    """

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class ArchiveDecodeError(DecodeError):
    """An archival (bulk-downloader) record violates the archival schema."""


class LiveDecodeError(DecodeError):
    """A live API document is not a ``[post_listing, comment_listing]`` pair."""


class UnsupportedInputFormatError(ThreadArchiveError):
    """The configured input format is unknown or has no decoder."""


@dataclass(frozen=True)
class NodeDecodeError:
    """
    A recoverable problem with a single comment node of a live thread.

    These are collected rather than raised: the node is still decoded with
    its parent linkage marked unknown.
    """

    comment_id: str
    reason: str

    def __str__(self) -> str:
        return f"comment {self.comment_id or '<unknown>'}: {self.reason}"
