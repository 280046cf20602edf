from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional, Type

from .errors import PlaylistError
from .fetch import FetchSettings, fetch_playlist, load_settings
from .sort import (
    SortIFrameBy,
    SortMediaBy,
    SortStreamBy,
    get_sort_order,
    parse_sort_fields,
    sort_playlist,
)


def _sort_fields(enum_cls: Type) -> Callable[[str], List]:
    def convert(value: str) -> List:
        try:
            return parse_sort_fields(value, enum_cls)
        except ValueError as e:
            raise argparse.ArgumentTypeError(str(e)) from e
    convert.__name__ = enum_cls.__name__
    return convert


def _choices(enum_cls: Type) -> str:
    return ", ".join(m.value for m in enum_cls)


def _setup_logging(verbose: bool) -> logging.Logger:
    logger = logging.getLogger("hls_sort")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    if not logger.handlers:
        logger.addHandler(ch)
    return logger


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        prog="hls-sort",
        description="Sort an HLS master playlist from a URL or file and write it to stdout.",
    )
    ap.add_argument(
        "playlist_location",
        help="Playlist file path or http(s) URL, e.g. /path/to/playlist.m3u8 or http://example.com/playlist.m3u8",
    )
    ap.add_argument(
        "--sort-stream-by", "-s", action="extend", default=[], type=_sort_fields(SortStreamBy),
        metavar="PRIMARY[,SECONDARY]",
        help=f"Sort #EXT-X-STREAM-INF entries ({_choices(SortStreamBy)})",
    )
    ap.add_argument(
        "--sort-media-by", "-m", action="extend", default=[], type=_sort_fields(SortMediaBy),
        metavar="PRIMARY[,SECONDARY]",
        help=f"Sort #EXT-X-MEDIA entries ({_choices(SortMediaBy)})",
    )
    ap.add_argument(
        "--sort-iframe-by", "-i", action="extend", default=[], type=_sort_fields(SortIFrameBy),
        metavar="PRIMARY[,SECONDARY]",
        help=f"Sort #EXT-X-I-FRAME-STREAM-INF entries ({_choices(SortIFrameBy)})",
    )
    ap.add_argument("--config", "-c", type=Path, default=None, help="YAML file with fetch settings")
    ap.add_argument("--verbose", "-v", action="store_true")
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logger = _setup_logging(args.verbose)

    try:
        settings = load_settings(args.config) if args.config else FetchSettings()
    except PlaylistError as e:
        logger.error("Failed to load settings: %s", e)
        return 1

    for opt, fields in (
        ("--sort-stream-by", args.sort_stream_by),
        ("--sort-media-by", args.sort_media_by),
        ("--sort-iframe-by", args.sort_iframe_by),
    ):
        if len(fields) > 2:
            logger.warning("%s takes a primary and a secondary field; ignoring %d extra", opt, len(fields) - 2)

    try:
        playlist = fetch_playlist(args.playlist_location, settings, logger.getChild("fetch"))
    except PlaylistError as e:
        logger.error("Failed to fetch or parse playlist: %s", e)
        return 1

    sort_playlist(
        playlist,
        get_sort_order(args.sort_stream_by, SortStreamBy),
        get_sort_order(args.sort_media_by, SortMediaBy),
        get_sort_order(args.sort_iframe_by, SortIFrameBy),
    )

    playlist.write_to(sys.stdout)
    logger.info("Playlist successfully written to output.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
