"""
Schema models for the live API's nested listing JSON.

A thread document is a two element array ``[post_listing, comment_listing]``.
Each listing wraps ``{"kind": ..., "data": {...}}`` things; a comment's
``replies`` is another listing, or an empty string / null on a leaf.

Things are validated one at a time (see ``LiveThing``) so that a single bad
node does not invalidate the rest of a thread.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from typing_extensions import Annotated


def _none_to(default: Any):
    return BeforeValidator(lambda value: default if value is None else value)


# The API sends null for many absent values; these coerce null to a default.
NullableStr = Annotated[str, _none_to("")]
NullableInt = Annotated[int, _none_to(0)]
NullableFloat = Annotated[float, _none_to(0.0)]
NullableBool = Annotated[bool, _none_to(False)]
NullableDict = Annotated[Dict[str, Any], _none_to({})]


class FlairRichtextPart(BaseModel):
    """One element of a richtext flair: ``e`` is "text" (``t``) or "emoji" (``u``)."""

    model_config = ConfigDict(extra="ignore")

    e: NullableStr = ""
    t: NullableStr = ""
    u: NullableStr = ""


class MediaSource(BaseModel):
    model_config = ConfigDict(extra="ignore")

    u: NullableStr = ""
    gif: NullableStr = ""
    x: NullableInt = 0
    y: NullableInt = 0

    @property
    def url(self) -> str:
        return self.u or self.gif


class MediaMetadataItem(BaseModel):
    """An entry of ``media_metadata``; only ``e == "Image"`` entries carry a usable source."""

    model_config = ConfigDict(extra="ignore")

    e: NullableStr = ""
    id: NullableStr = ""
    status: NullableStr = ""
    s: Annotated[MediaSource, _none_to({})] = Field(default_factory=MediaSource)


class PreviewSource(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: NullableStr = ""
    width: NullableInt = 0
    height: NullableInt = 0


class PreviewImage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    source: Annotated[PreviewSource, _none_to({})] = Field(default_factory=PreviewSource)


class Preview(BaseModel):
    model_config = ConfigDict(extra="ignore")

    images: Annotated[List[PreviewImage], _none_to([])] = Field(default_factory=list)
    enabled: NullableBool = False


class GalleryItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    media_id: NullableStr = ""
    caption: NullableStr = ""
    outbound_url: NullableStr = ""


class GalleryData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    items: Annotated[List[GalleryItem], _none_to([])] = Field(default_factory=list)


class AwardIcon(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: NullableStr = ""
    width: NullableInt = 0
    height: NullableInt = 0


class Awarding(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: NullableStr = ""
    description: NullableStr = ""
    icon_url: NullableStr = ""
    count: NullableInt = 0
    resized_icons: Annotated[List[AwardIcon], _none_to([])] = Field(default_factory=list)


RichtextList = Annotated[List[FlairRichtextPart], _none_to([])]
AwardingList = Annotated[List[Awarding], _none_to([])]
MediaMetadata = Annotated[Dict[str, MediaMetadataItem], _none_to({})]


class LiveThing(BaseModel):
    """Envelope of a listing child; ``data`` is validated separately per kind."""

    model_config = ConfigDict(extra="ignore")

    kind: NullableStr = ""
    data: NullableDict = Field(default_factory=dict)


class LiveListingData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    children: List[Dict[str, Any]] = Field(default_factory=list)
    after: Optional[str] = None
    before: Optional[str] = None


class LiveListing(BaseModel):
    model_config = ConfigDict(extra="ignore")

    kind: NullableStr = "Listing"
    data: LiveListingData = Field(default_factory=LiveListingData)


class LiveCommentData(BaseModel):
    """Fields of a ``t1`` comment or a ``more`` stub."""

    model_config = ConfigDict(extra="ignore")

    id: NullableStr = ""
    name: NullableStr = ""
    author: NullableStr = ""
    body: NullableStr = ""
    body_html: NullableStr = ""
    parent_id: NullableStr = ""
    link_id: NullableStr = ""
    created_utc: NullableFloat = 0.0
    # A float timestamp when edited, otherwise ``false``
    edited: Union[bool, float, None] = False
    score: NullableInt = 0
    score_hidden: NullableBool = False
    distinguished: NullableStr = ""
    stickied: NullableBool = False
    is_submitter: NullableBool = False
    link_flair_text: NullableStr = ""
    author_flair_type: NullableStr = ""
    author_flair_text: NullableStr = ""
    author_flair_richtext: RichtextList = Field(default_factory=list)
    author_flair_background_color: NullableStr = ""
    author_flair_text_color: NullableStr = ""
    all_awardings: AwardingList = Field(default_factory=list)
    media_metadata: MediaMetadata = Field(default_factory=dict)
    # Only present on "more" stubs; known to be wrong at times upstream.
    count: Optional[int] = None
    depth: NullableInt = 0
    replies: Any = None

    @property
    def edited_ts(self) -> Optional[float]:
        if isinstance(self.edited, bool) or self.edited is None:
            return None
        return float(self.edited)

    @property
    def reply_listing(self) -> Optional[Dict[str, Any]]:
        """The raw replies listing, or None for a leaf."""
        return self.replies if isinstance(self.replies, dict) else None


class LivePostData(BaseModel):
    """Fields of a ``t3`` link (the thread's root post)."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: NullableStr = ""
    title: NullableStr = ""
    url: NullableStr = ""
    selftext: NullableStr = ""
    selftext_html: NullableStr = ""
    score: NullableInt = 0
    hide_score: NullableBool = False
    upvote_ratio: NullableFloat = 0.0
    permalink: NullableStr = ""
    subreddit: NullableStr = ""
    author: NullableStr = ""
    author_flair_type: NullableStr = ""
    author_flair_text: NullableStr = ""
    author_flair_richtext: RichtextList = Field(default_factory=list)
    author_flair_background_color: NullableStr = ""
    author_flair_text_color: NullableStr = ""
    distinguished: NullableStr = ""
    link_flair_type: NullableStr = ""
    link_flair_text: NullableStr = ""
    link_flair_richtext: RichtextList = Field(default_factory=list)
    link_flair_background_color: NullableStr = ""
    link_flair_text_color: NullableStr = ""
    post_hint: NullableStr = ""
    is_self: NullableBool = False
    is_gallery: NullableBool = False
    is_video: NullableBool = False
    over_18: NullableBool = False
    spoiler: NullableBool = False
    stickied: NullableBool = False
    locked: NullableBool = False
    created_utc: NullableFloat = 0.0
    num_comments: NullableInt = 0
    domain: NullableStr = ""
    thumbnail: NullableStr = ""
    thumbnail_width: NullableInt = 0
    thumbnail_height: NullableInt = 0
    all_awardings: AwardingList = Field(default_factory=list)
    media_metadata: MediaMetadata = Field(default_factory=dict)
    gallery_data: Annotated[GalleryData, _none_to({})] = Field(default_factory=GalleryData)
    preview: Annotated[Preview, _none_to({})] = Field(default_factory=Preview)
