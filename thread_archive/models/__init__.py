"""
Models package for thread_archive.

Contains the canonical thread model, the fullname identity model and the
schema models for the two supported input formats.
"""

from .archive_schema import CommentArchiveEntry, SubmissionArchiveEntry
from .canonical import (
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
)
from .fullname import Fullname, ThingKind
from .live_schema import LiveCommentData, LiveListing, LivePostData, LiveThing

__all__ = [
    # Identity
    "Fullname",
    "ThingKind",
    # Canonical
    "Author",
    "Award",
    "Comment",
    "Flags",
    "Flair",
    "FlairPart",
    "GalleryMedia",
    "Media",
    "Post",
    "Preferences",
    # Input schemas
    "CommentArchiveEntry",
    "SubmissionArchiveEntry",
    "LiveCommentData",
    "LiveListing",
    "LivePostData",
    "LiveThing",
]
