"""
Sorting for master playlists.

Each record collection is reordered by a (primary, secondary) pair of fields.
The sort is stable, so records that tie on both keys keep their order.
Absent optional values sort before present ones.
"""
from __future__ import annotations
import math
from enum import Enum
from functools import cmp_to_key
from operator import attrgetter
from typing import Any, Callable, Dict, List, Sequence, Tuple, Type, TypeVar

from .models import MasterPlaylist


class SortStreamBy(Enum):
    BANDWIDTH = "bandwidth"
    AVERAGE_BANDWIDTH = "average-bandwidth"
    CODECS = "codecs"
    RESOLUTION = "resolution"
    FRAME_RATE = "frame-rate"
    VIDEO_RANGE = "video-range"
    AUDIO = "audio"
    CLOSED_CAPTIONS = "closed-captions"
    URI = "uri"


class SortMediaBy(Enum):
    GROUP_ID = "group-id"
    TYPE = "type"
    NAME = "name"
    LANGUAGE = "language"
    DEFAULT = "default"
    AUTOSELECT = "auto-select"
    CHANNELS = "channels"
    URI = "uri"


class SortIFrameBy(Enum):
    BANDWIDTH = "bandwidth"
    CODECS = "codecs"
    RESOLUTION = "resolution"
    VIDEO_RANGE = "video-range"
    URI = "uri"


E = TypeVar("E", bound=Enum)

_STREAM_FIELDS: Dict[SortStreamBy, Callable[[Any], Any]] = {
    SortStreamBy.BANDWIDTH: attrgetter("bandwidth"),
    SortStreamBy.AVERAGE_BANDWIDTH: attrgetter("average_bandwidth"),
    SortStreamBy.CODECS: attrgetter("codecs"),
    SortStreamBy.RESOLUTION: attrgetter("resolution"),
    SortStreamBy.FRAME_RATE: attrgetter("frame_rate"),
    SortStreamBy.VIDEO_RANGE: attrgetter("video_range"),
    SortStreamBy.AUDIO: attrgetter("audio"),
    SortStreamBy.CLOSED_CAPTIONS: attrgetter("closed_captions"),
    SortStreamBy.URI: attrgetter("uri"),
}

_MEDIA_FIELDS: Dict[SortMediaBy, Callable[[Any], Any]] = {
    SortMediaBy.GROUP_ID: attrgetter("group_id"),
    SortMediaBy.TYPE: attrgetter("track_type"),
    SortMediaBy.NAME: attrgetter("name"),
    SortMediaBy.LANGUAGE: attrgetter("language"),
    SortMediaBy.DEFAULT: attrgetter("default"),
    SortMediaBy.AUTOSELECT: attrgetter("autoselect"),
    SortMediaBy.CHANNELS: attrgetter("channels"),
    SortMediaBy.URI: attrgetter("uri"),
}

_IFRAME_FIELDS: Dict[SortIFrameBy, Callable[[Any], Any]] = {
    SortIFrameBy.BANDWIDTH: attrgetter("bandwidth"),
    SortIFrameBy.CODECS: attrgetter("codecs"),
    SortIFrameBy.RESOLUTION: attrgetter("resolution"),
    SortIFrameBy.VIDEO_RANGE: attrgetter("video_range"),
    SortIFrameBy.URI: attrgetter("uri"),
}


def compare_values(a: Any, b: Any) -> int:
    """
    Three-way comparison of two field values.
    None sorts first; a comparison involving NaN counts as equal.
    """
    if a is None or b is None:
        if a is None and b is None:
            return 0
        return -1 if a is None else 1
    if (isinstance(a, float) and math.isnan(a)) or (isinstance(b, float) and math.isnan(b)):
        return 0
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def _sort_records(records: List[Any], sort_by: Tuple[Any, Any], table: Dict[Any, Callable[[Any], Any]]) -> None:
    primary, secondary = sort_by
    get_primary = table[primary]
    get_secondary = table[secondary]

    def compare(a: Any, b: Any) -> int:
        result = compare_values(get_primary(a), get_primary(b))
        if result == 0:
            result = compare_values(get_secondary(a), get_secondary(b))
        return result

    records.sort(key=cmp_to_key(compare))


def sort_stream(playlist: MasterPlaylist, sort_by: Tuple[SortStreamBy, SortStreamBy]) -> None:
    _sort_records(playlist.variants, sort_by, _STREAM_FIELDS)


def sort_media(playlist: MasterPlaylist, sort_by: Tuple[SortMediaBy, SortMediaBy]) -> None:
    _sort_records(playlist.media, sort_by, _MEDIA_FIELDS)


def sort_iframe(playlist: MasterPlaylist, sort_by: Tuple[SortIFrameBy, SortIFrameBy]) -> None:
    _sort_records(playlist.frames, sort_by, _IFRAME_FIELDS)


def sort_playlist(
    playlist: MasterPlaylist,
    stream_by: Tuple[SortStreamBy, SortStreamBy],
    media_by: Tuple[SortMediaBy, SortMediaBy],
    iframe_by: Tuple[SortIFrameBy, SortIFrameBy],
) -> None:
    sort_stream(playlist, stream_by)
    sort_media(playlist, media_by)
    sort_iframe(playlist, iframe_by)


def default_field(enum_cls: Type[E]) -> E:
    return next(iter(enum_cls))


def get_sort_order(fields: Sequence[E], enum_cls: Type[E]) -> Tuple[E, E]:
    """
    (primary, secondary) from the fields picked on the command line.
    Missing entries fall back to the first member of `enum_cls`; extra entries are ignored.
    """
    default = default_field(enum_cls)
    primary = fields[0] if len(fields) > 0 else default
    secondary = fields[1] if len(fields) > 1 else default
    return primary, secondary


def parse_sort_fields(value: str, enum_cls: Type[E]) -> List[E]:
    """
    "resolution,average-bandwidth" -> [SortStreamBy.RESOLUTION, SortStreamBy.AVERAGE_BANDWIDTH]
    """
    fields: List[E] = []
    for name in value.split(","):
        name = name.strip().lower()
        if not name:
            continue
        try:
            member = enum_cls(name)
        except ValueError:
            choices = ", ".join(m.value for m in enum_cls)
            raise ValueError(f"invalid sort field {name!r} (choose from {choices})") from None
        fields.append(member)
    return fields
