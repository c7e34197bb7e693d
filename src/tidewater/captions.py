"""Caption helpers shared by provider plugins and the runner."""
from __future__ import annotations
from typing import Iterable, Optional

from .base import Caption

CAPTION_TYPES = ("srt", "vtt")


def get_caption_type_from_url(url: str) -> Optional[str]:
    """Caption type from the file extension, or None if unsupported."""
    path = url.split("?", 1)[0].lower()
    for ext in CAPTION_TYPES:
        if path.endswith(f".{ext}"):
            return ext
    return None


def remove_duplicated_languages(captions: Iterable[Caption]) -> list[Caption]:
    """Keep the first caption of each language, in discovery order."""
    seen: set[str] = set()
    out = []
    for caption in captions:
        if caption.language in seen:
            continue
        seen.add(caption.language)
        out.append(caption)
    return out
