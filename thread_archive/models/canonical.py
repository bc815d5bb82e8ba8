"""
Canonical thread model shared by every adapter and consumer.

Both the live API adapter and the archival adapter converge on these types,
and the render layer consumes nothing else. All models are frozen: adapters
build new values instead of mutating existing ones.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

# (value, qualifier): the qualifier is only set when the value is a placeholder
ScorePair = Tuple[str, str]
# (relative time, absolute time)
TimePair = Tuple[str, str]


class FlairPart(BaseModel):
    """One segment of a rich flair: plain text or an emoji image."""

    model_config = ConfigDict(frozen=True)

    flair_part_type: str = "text"  # "text" | "emoji"
    value: str = ""


class Flair(BaseModel):
    model_config = ConfigDict(frozen=True)

    flair_parts: List[FlairPart] = Field(default_factory=list)
    text: str = ""
    background_color: str = ""
    foreground_color: str = ""


class Author(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    flair: Flair = Field(default_factory=Flair)
    distinguished: str = ""  # empty string means not distinguished


class Award(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    icon_url: str = ""
    description: str = ""
    count: int = 0


class Media(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str = ""
    alt_url: str = ""
    width: int = 0
    height: int = 0
    poster: str = ""
    download_name: str = ""


class GalleryMedia(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str = ""
    width: int = 0
    height: int = 0
    caption: str = ""
    outbound_url: str = ""


class Flags(BaseModel):
    model_config = ConfigDict(frozen=True)

    nsfw: bool = False
    spoiler: bool = False
    stickied: bool = False


class Preferences(BaseModel):
    """Snapshot of the viewer's display preferences."""

    model_config = ConfigDict(frozen=True)

    theme: str = "system"
    layout: str = "card"
    wide: bool = False
    show_nsfw: bool = False
    blur_spoiler: bool = False
    hide_hls_notification: bool = False
    use_hls: bool = False
    autoplay_videos: bool = False
    disable_visit_reddit_confirmation: bool = False
    comment_sort: str = ""
    post_sort: str = ""
    hide_awards: bool = False
    hide_score: bool = False
    filters: List[str] = Field(default_factory=list)


class Post(BaseModel):
    """The root item of a thread."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    url: str = ""
    body: str = ""
    selftext: str = ""  # unformatted source of ``body``
    score: ScorePair = ("0", "")
    upvote_ratio: float = 0.0
    permalink: str = ""
    community: str = ""
    author: Author = Field(default_factory=lambda: Author(name=""))
    flair: Flair = Field(default_factory=Flair)  # link flair
    post_type: str = "link"
    flags: Flags = Field(default_factory=Flags)
    locked: bool = False
    media: Media = Field(default_factory=Media)
    thumbnail: Media = Field(default_factory=Media)
    domain: str = ""
    rel_time: str = ""
    created: str = ""
    created_ts: float = 0.0
    num_comments: int = 0
    awards: List[Award] = Field(default_factory=list)
    gallery: List[GalleryMedia] = Field(default_factory=list)

    @property
    def nsfw(self) -> bool:
        return self.flags.nsfw

    @property
    def fullname(self) -> str:
        return f"t3_{self.id}"


class Comment(BaseModel):
    """
    A reply node. Each comment owns its ``children``; order is source order.

    ``parent_id``/``parent_kind`` hold the split parent fullname. Both are
    empty when the source parent id could not be parsed.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    kind: str = "t1"
    parent_id: str = ""
    parent_kind: str = ""
    post_link: str = ""
    post_author: str = ""
    body: str = ""
    author: Author = Field(default_factory=lambda: Author(name=""))
    score: ScorePair = ("0", "")
    rel_time: str = ""
    created: str = ""
    created_ts: float = 0.0
    edited: TimePair = ("", "")
    children: List["Comment"] = Field(default_factory=list)
    highlighted: bool = False
    stickied: bool = False
    collapsed: bool = False
    is_filtered: bool = False
    awards: List[Award] = Field(default_factory=list)
    more_count: int = 0
    prefs: Preferences = Field(default_factory=Preferences)

    @property
    def is_more_stub(self) -> bool:
        return self.kind == "more"

    def walk(self):
        """Yield this comment and all of its descendants in pre-order."""
        yield self
        for reply in self.children:
            yield from reply.walk()

    def find(self, comment_id: str) -> Optional["Comment"]:
        for comment in self.walk():
            if comment.id == comment_id:
                return comment
        return None


Comment.model_rebuild()
