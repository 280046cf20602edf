"""Tests for playlist acquisition and fetch settings."""

import logging
from unittest.mock import Mock, patch

import pytest
import requests

from hls_sort.errors import FetchError, InvalidLocation, ParseError, PlaylistIOError
from hls_sort.fetch import (
    FetchSettings,
    fetch_content,
    fetch_playlist,
    load_settings,
)

LOGGER = logging.getLogger("hls_sort.test")
NO_RETRY = FetchSettings(timeout_secs=5, retries=0)


def _response(status_code=200, content=b""):
    resp = Mock()
    resp.status_code = status_code
    resp.content = content
    return resp


class TestFetchContent:
    def test_local_file(self, data_dir, master_text):
        assert fetch_content(str(data_dir / "master_hdr10.m3u8"), NO_RETRY, LOGGER) == master_text

    def test_invalid_location(self, tmp_path):
        with pytest.raises(InvalidLocation):
            fetch_content(str(tmp_path / "missing.m3u8"), NO_RETRY, LOGGER)

    def test_unreadable_path(self, tmp_path):
        """A directory exists but can't be read as a playlist."""
        with pytest.raises(PlaylistIOError):
            fetch_content(str(tmp_path), NO_RETRY, LOGGER)

    def test_http_url(self):
        with patch("hls_sort.fetch.requests.get", return_value=_response(content=b"#EXTM3U\n")) as get:
            text = fetch_content("https://example.com/master.m3u8", NO_RETRY, LOGGER)
        assert text == "#EXTM3U\n"
        get.assert_called_once_with("https://example.com/master.m3u8", headers={}, timeout=5)

    def test_http_error_status(self):
        with patch("hls_sort.fetch.requests.get", return_value=_response(status_code=404)):
            with pytest.raises(FetchError, match="HTTP 404"):
                fetch_content("http://example.com/missing.m3u8", NO_RETRY, LOGGER)

    def test_retries_network_errors(self):
        settings = FetchSettings(retries=2, backoff=1.5)
        side_effect = [
            requests.ConnectionError("reset"),
            _response(status_code=503),
            _response(content=b"#EXTM3U\n"),
        ]
        with patch("hls_sort.fetch.requests.get", side_effect=side_effect) as get, \
             patch("hls_sort.fetch.time.sleep") as sleep:
            text = fetch_content("http://example.com/master.m3u8", settings, LOGGER)
        assert text == "#EXTM3U\n"
        assert get.call_count == 3
        assert sleep.call_count == 2

    def test_gives_up_after_retries(self):
        settings = FetchSettings(retries=1)
        with patch("hls_sort.fetch.requests.get", side_effect=requests.Timeout("slow")) as get, \
             patch("hls_sort.fetch.time.sleep"):
            with pytest.raises(FetchError, match="slow"):
                fetch_content("http://example.com/master.m3u8", settings, LOGGER)
        assert get.call_count == 2


class TestFetchPlaylist:
    def test_parses_fetched_text(self, data_dir):
        playlist = fetch_playlist(str(data_dir / "master_hdr10.m3u8"), NO_RETRY)
        assert len(playlist.variants) == 4

    def test_parse_failure_propagates(self, tmp_path):
        path = tmp_path / "bad.m3u8"
        path.write_text("not a playlist\n", encoding="utf-8")
        with pytest.raises(ParseError):
            fetch_playlist(str(path))


class TestLoadSettings:
    def test_reads_fetch_section(self, tmp_path):
        config = tmp_path / "hls-sort.yml"
        config.write_text(
            "fetch:\n"
            "  timeout_secs: 7\n"
            "  retries: 1\n"
            "  backoff: 2\n"
            "  headers:\n"
            "    User-Agent: hls-sort\n",
            encoding="utf-8",
        )
        settings = load_settings(config)
        assert settings == FetchSettings(timeout_secs=7, retries=1, backoff=2.0, headers={"User-Agent": "hls-sort"})

    def test_empty_file_uses_defaults(self, tmp_path):
        config = tmp_path / "empty.yml"
        config.write_text("", encoding="utf-8")
        assert load_settings(config) == FetchSettings()

    def test_missing_file(self, tmp_path):
        with pytest.raises(PlaylistIOError):
            load_settings(tmp_path / "nope.yml")
