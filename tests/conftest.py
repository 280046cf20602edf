import logging
from pathlib import Path

import pytest

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture
def master_text() -> str:
    return (DATA_DIR / "master_hdr10.m3u8").read_text(encoding="utf-8")


@pytest.fixture(autouse=True)
def reset_cli_logging():
    """The CLI attaches a stderr handler once; drop it so each test starts clean."""
    yield
    logger = logging.getLogger("hls_sort")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
