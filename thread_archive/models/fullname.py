"""Fullname identifiers ("t1_abc123") that link a thread item to its parent."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ThingKind(str, Enum):
    """Type tag carried in the prefix of a fullname."""

    LISTING = "Listing"
    COMMENT = "t1"
    ACCOUNT = "t2"
    LINK = "t3"
    MESSAGE = "t4"
    SUBREDDIT = "t5"
    AWARD = "t6"
    PROMO_CAMPAIGN = "t8"

    @classmethod
    def from_tag(cls, tag: str) -> Optional["ThingKind"]:
        """Return the kind for a tag such as ``"t3"``, or None if unrecognized."""
        try:
            return cls(tag)
        except ValueError:
            return None

    @classmethod
    def from_fullname(cls, fullname: str) -> Optional["ThingKind"]:
        """Return only the kind part of a fullname, or None if it is malformed."""
        parsed = parse(fullname)
        return parsed.kind if parsed else None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Fullname:
    """A ``{kind}_{id}`` reference to a post, comment, account, etc."""

    kind: ThingKind
    id: str

    def __post_init__(self) -> None:
        # An empty id or an id containing the separator would not parse back.
        if not self.id or "_" in self.id:
            raise ValueError(f"Invalid thing id for fullname: {self.id!r}")

    def __str__(self) -> str:
        return format(self)


def parse(fullname: str) -> Optional[Fullname]:
    """
    Parse a fullname string into its kind and id.

    Args:
        fullname: String such as ``"t1_abc123"``

    Returns:
        The parsed Fullname, or None when the string does not split into
        exactly two ``_``-separated parts or the kind tag is unknown.
    """
    if not isinstance(fullname, str):
        return None

    parts = fullname.split("_")
    if len(parts) != 2 or not parts[1]:
        return None

    kind = ThingKind.from_tag(parts[0])
    if kind is None:
        return None

    return Fullname(kind=kind, id=parts[1])


def format(fullname: Fullname) -> str:  # noqa: A001
    """Render a Fullname back to its ``{kind}_{id}`` string form."""
    return f"{fullname.kind.value}_{fullname.id}"
