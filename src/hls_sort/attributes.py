from __future__ import annotations
from typing import List, Tuple

from .errors import ParseError

AttributePair = Tuple[str, str]

_LINE_BREAKS = "\r\n"


def _is_key_char(ch: str) -> bool:
    return ch.isalnum() or ch == "-"


def _scan_key(text: str, i: int) -> Tuple[str, int]:
    start = i
    while i < len(text) and _is_key_char(text[i]):
        i += 1
    if i == start:
        raise ParseError(text[start:], "key")
    return text[start:i], i


def _scan_quoted(text: str, i: int) -> Tuple[str, int]:
    # text[i] is the opening quote; the value ends at the next quote on the same line
    start = i + 1
    j = start
    while j < len(text) and text[j] != '"':
        if text[j] in _LINE_BREAKS:
            raise ParseError(text[i:], "quoted-string")
        j += 1
    if j >= len(text) or j == start:
        raise ParseError(text[i:], "quoted-string")
    return text[start:j], j + 1


def _scan_unquoted(text: str, i: int) -> Tuple[str, int]:
    start = i
    while i < len(text) and text[i] != "," and text[i] not in _LINE_BREAKS:
        i += 1
    if i == start:
        raise ParseError(text[start:], "unquoted-string")
    return text[start:i].strip(), i


def scan_attribute_list(text: str) -> Tuple[List[AttributePair], str]:
    """
    Read KEY=value pairs from the start of `text`.

    Values are either "quoted" (everything up to the next double quote, no
    escapes) or unquoted (everything up to the next comma or line break,
    trimmed). Scanning stops after the last value that is not followed by a
    comma, and the unconsumed remainder is returned alongside the pairs.
    """
    pairs: List[AttributePair] = []
    i = 0
    while True:
        key, i = _scan_key(text, i)

        if i >= len(text) or text[i] != "=":
            raise ParseError(text[i:], "separator:=")
        i += 1

        if i < len(text) and text[i] == '"':
            value, i = _scan_quoted(text, i)
        else:
            value, i = _scan_unquoted(text, i)
        pairs.append((key, value))

        if i < len(text) and text[i] == ",":
            i += 1
            continue
        return pairs, text[i:]


def parse_attribute_list(section: str) -> List[AttributePair]:
    """
    Parse the attribute section of a single tag line (the text after `TAG:`).

    Text left over after the last value (e.g. after an embedded quote ends a
    value early) is dropped; the pairs read so far are kept.
    """
    pairs, _ = scan_attribute_list(section)
    return pairs
