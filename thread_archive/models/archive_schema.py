"""
Schema models for the archival format written by bulk-downloader-for-reddit.

One JSON file holds one submission with its comment tree nested under
``comments`` and, recursively, under each comment's ``replies``. Every field
that may be absent in an export has its default spelled out here instead of
at the point of use.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CommentArchiveEntry(BaseModel):
    """One reply record and, recursively, its replies."""

    model_config = ConfigDict(extra="ignore")

    id: str
    parent_id: str  # fullname of the post or comment replied to, e.g. "t1_abcdef"
    author: str = "[deleted]"
    score: int = 0
    author_flair: Optional[str] = None
    submission: str = ""  # id of the post this thread belongs to
    stickied: bool = False
    body: str = ""
    is_submitter: bool = False
    distinguished: Optional[str] = None
    created_utc: float = 0.0
    replies: List["CommentArchiveEntry"] = Field(default_factory=list)


class SubmissionArchiveEntry(BaseModel):
    """A submission record with its threaded comments."""

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str = ""
    name: str = ""  # fullname, e.g. "t3_abcdef"
    url: str = ""
    selftext: str = ""
    score: int = 0
    upvote_ratio: float = 0.0
    permalink: str = ""
    author: str = "[deleted]"
    link_flair_text: Optional[str] = None
    num_comments: int = 0
    over_18: bool = False
    spoiler: bool = False
    pinned: bool = False
    locked: bool = False
    distinguished: Optional[str] = None
    created_utc: float = 0.0
    comments: List[CommentArchiveEntry] = Field(default_factory=list)


CommentArchiveEntry.model_rebuild()
