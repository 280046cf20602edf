from __future__ import annotations
import io
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, TextIO, Tuple

Resolution = Tuple[int, int]


def _format_decimal(value: float) -> str:
    """Shortest plain decimal that reads back as `value`; integral values lose the '.0'."""
    text = format(Decimal(repr(value)), "f")
    if text.endswith(".0"):
        text = text[:-2]
    return text


def _format_resolution(resolution: Resolution) -> str:
    width, height = resolution
    return f"{width}x{height}"


@dataclass
class StreamVariant:
    """
    An #EXT-X-STREAM-INF entry: a Variant Stream plus the URI line that
    follows the tag.
    """
    bandwidth: int = 0
    average_bandwidth: Optional[int] = None
    codecs: Optional[str] = None
    resolution: Optional[Resolution] = None
    frame_rate: Optional[float] = None
    video_range: Optional[str] = None
    audio: Optional[str] = None
    closed_captions: Optional[str] = None
    uri: str = ""

    def to_m3u8(self) -> str:
        parts = [f"BANDWIDTH={self.bandwidth}"]
        if self.average_bandwidth is not None:
            parts.append(f"AVERAGE-BANDWIDTH={self.average_bandwidth}")
        if self.codecs is not None:
            parts.append(f'CODECS="{self.codecs}"')
        if self.resolution is not None:
            parts.append(f"RESOLUTION={_format_resolution(self.resolution)}")
        if self.frame_rate is not None:
            parts.append(f"FRAME-RATE={_format_decimal(self.frame_rate)}")
        if self.video_range is not None:
            parts.append(f"VIDEO-RANGE={self.video_range}")
        if self.audio is not None:
            parts.append(f'AUDIO="{self.audio}"')
        if self.closed_captions is not None:
            parts.append(f"CLOSED-CAPTIONS={self.closed_captions}")
        return f"#EXT-X-STREAM-INF:{','.join(parts)}\n{self.uri}"

    def __str__(self) -> str:
        return self.to_m3u8()


@dataclass
class MediaTrack:
    """
    An #EXT-X-MEDIA entry (alternative rendition).

    DEFAULT and AUTOSELECT are kept as the raw tokens from the source so they
    are written back exactly as read.
    """
    track_type: Optional[str] = None
    group_id: Optional[str] = None
    name: Optional[str] = None
    language: Optional[str] = None
    default: Optional[str] = None
    autoselect: Optional[str] = None
    channels: Optional[str] = None
    uri: Optional[str] = None

    def to_m3u8(self) -> str:
        parts = []
        if self.track_type is not None:
            parts.append(f"TYPE={self.track_type}")
        if self.group_id is not None:
            parts.append(f'GROUP-ID="{self.group_id}"')
        if self.name is not None:
            parts.append(f'NAME="{self.name}"')
        if self.language is not None:
            parts.append(f'LANGUAGE="{self.language}"')
        if self.default is not None:
            parts.append(f"DEFAULT={self.default}")
        if self.autoselect is not None:
            parts.append(f"AUTOSELECT={self.autoselect}")
        if self.channels is not None:
            parts.append(f'CHANNELS="{self.channels}"')
        if self.uri is not None:
            parts.append(f'URI="{self.uri}"')
        return f"#EXT-X-MEDIA:{','.join(parts)}"

    def __str__(self) -> str:
        return self.to_m3u8()


@dataclass
class IFrameStream:
    bandwidth: int = 0
    codecs: Optional[str] = None
    resolution: Optional[Resolution] = None
    video_range: Optional[str] = None
    uri: str = ""

    def to_m3u8(self) -> str:
        parts = [f"BANDWIDTH={self.bandwidth}"]
        if self.codecs is not None:
            parts.append(f'CODECS="{self.codecs}"')
        if self.resolution is not None:
            parts.append(f"RESOLUTION={_format_resolution(self.resolution)}")
        if self.video_range is not None:
            parts.append(f"VIDEO-RANGE={self.video_range}")
        parts.append(f'URI="{self.uri}"')
        return f"#EXT-X-I-FRAME-STREAM-INF:{','.join(parts)}"

    def __str__(self) -> str:
        return self.to_m3u8()


@dataclass
class MasterPlaylist:
    independent_segments: bool = False
    variants: List[StreamVariant] = field(default_factory=list)
    media: List[MediaTrack] = field(default_factory=list)
    frames: List[IFrameStream] = field(default_factory=list)

    def write_to(self, out: TextIO) -> None:
        """
        Write the playlist in normalized order:
          header, independent-segments flag, media tracks,
          stream variants, I-frame streams (blank line between sections).
        """
        out.write("#EXTM3U\n")
        if self.independent_segments:
            out.write("#EXT-X-INDEPENDENT-SEGMENTS\n")
        out.write("\n")

        for track in self.media:
            out.write(track.to_m3u8() + "\n")
        out.write("\n")

        for variant in self.variants:
            out.write(variant.to_m3u8() + "\n")
        out.write("\n")

        for frame in self.frames:
            out.write(frame.to_m3u8() + "\n")

    def dumps(self) -> str:
        buf = io.StringIO()
        self.write_to(buf)
        return buf.getvalue()
