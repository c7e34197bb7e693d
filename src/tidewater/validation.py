"""Stream validation and per-stream feature filtering."""
from __future__ import annotations
import dataclasses
from typing import Iterable

from .base import FileStream, HlsStream, Stream
from .captions import remove_duplicated_languages
from .flags import FeatureSet, flags_allowed_in_features


def is_valid_stream(stream: Stream) -> bool:
    if isinstance(stream, HlsStream):
        return bool(stream.playlist)
    if isinstance(stream, FileStream):
        return any(q.url for q in stream.qualities.values())
    return False


def filter_streams(streams: Iterable[Stream], features: FeatureSet) -> list[Stream]:
    """Drop invalid streams and streams the target can't play.

    Flags are checked per stream; they can differ from the provider's own.
    Surviving streams get their captions de-duplicated by language.
    """
    out = []
    for stream in streams or ():
        if not is_valid_stream(stream):
            continue
        if not flags_allowed_in_features(features, stream.flags):
            continue
        captions = remove_duplicated_languages(stream.captions)
        if len(captions) != len(stream.captions):
            stream = dataclasses.replace(stream, captions=captions)
        out.append(stream)
    return out
