"""
Displayable segments.

A tool result or a finished task payload becomes an ordered list of
text and media segments that a channel can send one by one.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from ..tools.base import ToolResult

MEDIA_KINDS = ("image", "video", "audio")

_EXTENSIONS = {"image": "png", "video": "mp4", "audio": "mp3"}


class Segment(BaseModel):
    kind: str  # text | image | video | audio
    text: Optional[str] = None
    url: Optional[str] = None
    caption: Optional[str] = None
    filename: Optional[str] = None

    @classmethod
    def text_segment(cls, text: str) -> "Segment":
        return cls(kind="text", text=text)

    @classmethod
    def media(cls, kind: str, url: str, caption: Optional[str] = None) -> "Segment":
        name = url.rsplit("/", 1)[-1].split("?", 1)[0]
        if "." not in name:
            name = f"{kind}.{_EXTENSIONS.get(kind, 'bin')}"
        return cls(kind=kind, url=url, caption=caption, filename=name)


def segments_from_result(result: ToolResult) -> List[Segment]:
    """
    Media first (image, video, audio), then text.

    A failed result yields its error text. Pending async results yield
    nothing here; their media arrives through the delivery path.
    """
    if not result.success:
        return [Segment.text_segment(result.error)] if result.error else []
    if getattr(result, "pending", False):
        return []

    segments: List[Segment] = []
    caption = result.caption
    if result.media_urls:
        for kind, url in result.media_urls.items():
            segments.append(Segment.media(kind, url, caption))
            caption = None  # caption rides on the first media item only

    text = result.data if isinstance(result.data, str) else None
    if text and text.strip() and not result.media_urls:
        segments.append(Segment.text_segment(text))
    elif caption:
        segments.append(Segment.text_segment(caption))
    return segments


def segments_from_payload(payload: Dict[str, Any]) -> List[Segment]:
    return segments_from_result(ToolResult.from_any(payload))
