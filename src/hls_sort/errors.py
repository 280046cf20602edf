from __future__ import annotations


class PlaylistError(Exception):
    """Base class for everything that can go wrong fetching or parsing a playlist."""


class FetchError(PlaylistError):
    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"Failed to fetch the playlist: {location}: {reason}")


class PlaylistIOError(PlaylistError):
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read {path}: {reason}")


class InvalidLocation(PlaylistError):
    def __init__(self, location: str):
        self.location = location
        super().__init__(f"Invalid location {location!r}. Provide a valid URL or file path.")


class ParseError(PlaylistError):
    """
    The input did not match the expected structure.

    `remaining` is the unconsumed text at the point of failure and `rule`
    names the grammar rule that rejected it.
    """

    def __init__(self, remaining: str, rule: str):
        self.remaining = remaining
        self.rule = rule
        snippet = remaining.splitlines()[0] if remaining else ""
        super().__init__(f"Parsing error ({rule}) at: {snippet!r}")


class IncompleteInput(PlaylistError):
    def __init__(self, needed: str):
        self.needed = needed
        super().__init__(f"Parsing incomplete, input ended while expecting {needed}")
