from __future__ import annotations
import logging
import re
from pathlib import Path
from typing import List, Optional, Tuple

from .attributes import AttributePair, parse_attribute_list, scan_attribute_list
from .errors import IncompleteInput, ParseError
from .models import IFrameStream, MasterPlaylist, MediaTrack, Resolution, StreamVariant

logger = logging.getLogger("hls_sort.parse")

EXTM3U = "#EXTM3U"
INDEPENDENT_SEGMENTS = "#EXT-X-INDEPENDENT-SEGMENTS"
STREAM_INF = "#EXT-X-STREAM-INF"
MEDIA = "#EXT-X-MEDIA"
IFRAME_STREAM_INF = "#EXT-X-I-FRAME-STREAM-INF"

_INT_RE = re.compile(r"\+?[0-9]+")


def _split_line(text: str) -> Tuple[str, str, bool]:
    """
    Split off the first line of `text`.
    Returns (line without terminator, text after the terminator, whether a terminator was found).
    """
    idx = text.find("\n")
    if idx == -1:
        return text, "", False
    line = text[:idx]
    if line.endswith("\r"):
        line = line[:-1]
    return line, text[idx + 1:], True


def _tag_name(text: str) -> str:
    # "#EXT-X-MEDIA:TYPE=..." -> "#EXT-X-MEDIA"; keeps #EXT-X-MEDIA-SEQUENCE and
    # #EXT-X-I-FRAME-STREAM-INF from being mistaken for a modeled prefix
    line, _, _ = _split_line(text)
    return line.split(":", 1)[0].rstrip()


def _expect_tag(text: str, tag: str) -> str:
    if not text.startswith(tag):
        raise ParseError(text, f"tag:{tag}")
    return text[len(tag):]


def _parse_int(value: str) -> int:
    # lenient: anything that isn't a plain unsigned integer becomes 0
    if _INT_RE.fullmatch(value):
        return int(value)
    return 0


def _parse_float(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0.0


def _parse_resolution(value: str) -> Optional[Resolution]:
    parts = value.split("x")
    if len(parts) != 2:
        return None
    width, height = parts
    if not (_INT_RE.fullmatch(width) and _INT_RE.fullmatch(height)):
        return None
    return int(width), int(height)


def _fold_stream_variant(pairs: List[AttributePair]) -> StreamVariant:
    variant = StreamVariant()
    for key, value in pairs:
        if key == "BANDWIDTH":
            variant.bandwidth = _parse_int(value)
        elif key == "AVERAGE-BANDWIDTH":
            variant.average_bandwidth = _parse_int(value)
        elif key == "CODECS":
            variant.codecs = value
        elif key == "RESOLUTION":
            res = _parse_resolution(value)
            if res is not None:
                variant.resolution = res
        elif key == "FRAME-RATE":
            variant.frame_rate = _parse_float(value)
        elif key == "VIDEO-RANGE":
            variant.video_range = value
        elif key == "AUDIO":
            variant.audio = value
        elif key == "CLOSED-CAPTIONS":
            variant.closed_captions = value
    return variant


_MEDIA_FIELDS = {
    "TYPE": "track_type",
    "GROUP-ID": "group_id",
    "NAME": "name",
    "LANGUAGE": "language",
    "DEFAULT": "default",
    "AUTOSELECT": "autoselect",
    "CHANNELS": "channels",
    "URI": "uri",
}


def _fold_media_track(pairs: List[AttributePair]) -> MediaTrack:
    track = MediaTrack()
    for key, value in pairs:
        attr = _MEDIA_FIELDS.get(key)
        if attr:
            setattr(track, attr, value)
    return track


def _fold_iframe_stream(pairs: List[AttributePair]) -> IFrameStream:
    frame = IFrameStream()
    for key, value in pairs:
        if key == "BANDWIDTH":
            frame.bandwidth = _parse_int(value)
        elif key == "CODECS":
            frame.codecs = value
        elif key == "RESOLUTION":
            res = _parse_resolution(value)
            if res is not None:
                frame.resolution = res
        elif key == "VIDEO-RANGE":
            frame.video_range = value
        elif key == "URI":
            frame.uri = value
    return frame


def parse_stream_variant(text: str) -> Tuple[StreamVariant, str]:
    """
    Parse an #EXT-X-STREAM-INF tag line and the URI line below it.
    Returns the variant and the text following the URI line.
    """
    rest = _expect_tag(text, STREAM_INF + ":")
    section, rest, terminated = _split_line(rest)
    variant = _fold_stream_variant(parse_attribute_list(section))

    if not terminated or not rest:
        raise IncompleteInput(f"a URI line after {STREAM_INF}")
    uri, after, _ = _split_line(rest)
    if not uri.strip():
        raise ParseError(rest, "uri")
    variant.uri = uri
    return variant, after


def parse_media_track(text: str) -> Tuple[MediaTrack, str]:
    rest = _expect_tag(text, MEDIA + ":")
    pairs, rest = scan_attribute_list(rest)
    trailing, _, _ = _split_line(rest)
    if trailing.strip():
        logger.debug("Ignoring text after attributes: %s", trailing)
    rest = rest[len(trailing):]
    return _fold_media_track(pairs), rest


def parse_iframe_stream(text: str) -> Tuple[IFrameStream, str]:
    rest = _expect_tag(text, IFRAME_STREAM_INF + ":")
    section, rest, _ = _split_line(rest)
    return _fold_iframe_stream(parse_attribute_list(section)), rest


def _parse_header(text: str) -> Tuple[bool, str]:
    if not text:
        raise IncompleteInput(f"the {EXTM3U} header")
    rest = _expect_tag(text, EXTM3U)
    line, rest, _ = _split_line(rest)
    if line.strip():
        raise ParseError(line, "line-ending")

    line, after, _ = _split_line(rest)
    if line.rstrip() == INDEPENDENT_SEGMENTS:
        return True, after
    return False, rest


def parse_playlist(text: str) -> MasterPlaylist:
    """
    Parse a complete master playlist.

    Records are appended in the order they appear. Lines other than the
    modeled tags (comments, blank lines, other tags) are skipped.
    Any parse failure aborts the whole document.
    """
    text = text.lstrip("\ufeff")
    independent_segments, rest = _parse_header(text)
    playlist = MasterPlaylist(independent_segments=independent_segments)

    while rest:
        tag = _tag_name(rest)
        if tag == IFRAME_STREAM_INF:
            frame, rest = parse_iframe_stream(rest)
            playlist.frames.append(frame)
        elif tag == STREAM_INF:
            variant, rest = parse_stream_variant(rest)
            playlist.variants.append(variant)
        elif tag == MEDIA:
            track, rest = parse_media_track(rest)
            playlist.media.append(track)
        else:
            line, rest, _ = _split_line(rest)
            if line.strip():
                logger.debug("Skipping line: %s", line)

    logger.info(
        "Parsed playlist: %d media, %d variants, %d i-frame streams",
        len(playlist.media), len(playlist.variants), len(playlist.frames),
    )
    return playlist


def read_playlist(path: Path) -> MasterPlaylist:
    with path.open("r", encoding="utf-8-sig") as f:
        return parse_playlist(f.read())
