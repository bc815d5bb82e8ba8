"""
Small pure formatting helpers used by the adapters.

These produce display strings only; none of them raise on bad input; a
value that cannot be formatted falls back to its raw representation.
"""

import html
import logging
import re
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Mapping, Optional, Tuple

from thread_archive.models.live_schema import MediaMetadataItem

logger = logging.getLogger(__name__)

ABSOLUTE_TIME_FORMAT = "%b %d %Y, %H:%M:%S UTC"
OLD_TIME_FORMAT = "%b %d '%y"


def _raw_number(value: float) -> str:
    """Render a float without a trailing ``.0`` when it is integral."""
    try:
        if float(value).is_integer():
            return str(int(value))
    except (TypeError, ValueError, OverflowError):
        pass
    return str(value)


def format_num(num: int) -> str:
    """Abbreviate large magnitudes: 999 -> "999", 1234 -> "1.2k", 2500000 -> "2.5m"."""
    magnitude = abs(num)
    if magnitude >= 1_000_000:
        return f"{num / 1_000_000:.1f}m"
    if magnitude >= 1_000:
        return f"{num / 1_000:.1f}k"
    return str(num)


def time(created: float, now: Optional[datetime] = None) -> Tuple[str, str]:
    """
    Format a Unix timestamp as a (relative, absolute) pair.

    Args:
        created: Unix timestamp in seconds (UTC)
        now: Reference time for the relative string (defaults to current UTC time)

    Returns:
        Tuple such as ``("3h ago", "Sep 13 2020, 12:26:40 UTC")``. Older than
        30 days renders the date instead of a relative distance.
    """
    try:
        moment = datetime.fromtimestamp(round(created), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        logger.debug(f"Could not format timestamp {created!r}")
        raw = _raw_number(created)
        return raw, raw

    now = now or datetime.now(timezone.utc)
    delta = abs(now - moment)
    suffix = "ago" if moment <= now else "left"

    if delta.days > 30:
        rel_time = moment.strftime(OLD_TIME_FORMAT)
    elif delta.days > 0:
        rel_time = f"{delta.days}d {suffix}"
    elif delta.seconds >= 3600:
        rel_time = f"{delta.seconds // 3600}h {suffix}"
    else:
        rel_time = f"{delta.seconds // 60}m {suffix}"

    return rel_time, moment.strftime(ABSOLUTE_TIME_FORMAT)


def strtime(timestamp: float) -> str:
    """RFC 2822 date for a Unix timestamp, or the raw number if it cannot be converted."""
    try:
        return format_datetime(datetime.fromtimestamp(int(timestamp), tz=timezone.utc))
    except (TypeError, ValueError, OverflowError, OSError):
        return _raw_number(timestamp)


def format_selftext(text: str) -> str:
    """Wrap plain/markdown post text into escaped HTML paragraphs."""
    if not text or not text.strip():
        return ""

    paragraphs = [p.strip() for p in re.split(r"\n\s*\n", text) if p.strip()]
    rendered = "".join(
        "<p>{}</p>".format(html.escape(paragraph).replace("\n", "<br>"))
        for paragraph in paragraphs
    )
    return f'<div class="md">{rendered}</div>'


def rewrite_emotes(media_metadata: Optional[Mapping[str, MediaMetadataItem]], body_html: str) -> str:
    """
    Replace media placeholders in a body with inline images.

    ``media_metadata`` maps media ids to decoded entries; only entries with
    ``e == "Image"`` and a source url (``s.u``, or ``s.gif`` for animated
    media) are used. Two placeholder forms are rewritten: ``![img](<media id>)``
    and, for emote ids such as ``"emote|t5_xxx|1234"``, the ``:1234:`` marker.
    """
    if not media_metadata:
        return body_html

    for key, item in media_metadata.items():
        if item.e != "Image":
            continue

        url = html.unescape(item.s.url)
        if not url:
            continue

        media_id = item.id or key
        body_html = body_html.replace(
            f"![img]({media_id})",
            f'<img loading="lazy" src="{url}">',
        )

        if "|" in media_id:
            emote_name = media_id.split("|")[-1]
            image = (
                f'<img loading="lazy" src="{url}" '
                f'width="20" height="20" style="vertical-align:text-bottom">'
            )
            body_html = body_html.replace(f":{emote_name}:", image)

    return body_html
